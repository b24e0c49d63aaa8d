from pydantic import BaseModel
from typing import Optional


class GroupSummary(BaseModel):
    id: str
    name: str
    member_count: int = 0


class SupervisorStatus(BaseModel):
    """Read-only snapshot of the supervisor."""

    state: str
    retry_count: int
    max_retries: int
    enabled: bool
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    qr_pending: bool = False

    @property
    def connected(self) -> bool:
        return self.state == "connected"
