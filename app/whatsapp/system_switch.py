"""
Process-wide kill switch for outbound traffic.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class SystemSwitch:
    """Enabled flag shared by the command router and the HTTP control endpoint."""

    def __init__(self, enabled: bool = True):
        self._enabled = enabled
        self.controlled_by: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self, source: str) -> None:
        self._set(True, source)

    def disable(self, source: str) -> None:
        self._set(False, source)

    def _set(self, enabled: bool, source: str) -> None:
        self._enabled = enabled
        self.controlled_by = source
        if enabled:
            logger.info(f"✅ System START by: {source}")
        else:
            logger.info(f"🛑 System STOP by: {source}")
