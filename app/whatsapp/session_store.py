"""
Durable storage for the WhatsApp session credentials.

The protocol client owns the layout of the files inside the directory; this
module only creates the directory and deletes it wholesale when the session
has to be reset.
"""

import os
import shutil
import logging

logger = logging.getLogger(__name__)


class SessionStore:
    """Session directory shared with the protocol client."""

    DATABASE_FILENAME = "neonize.sqlite3"

    def __init__(self, directory: str = "session"):
        self.directory = directory

    @property
    def database_path(self) -> str:
        """Path of the credential database handed to the protocol client."""
        return os.path.join(self.directory, self.DATABASE_FILENAME)

    def ensure(self) -> None:
        """Create the session directory if it doesn't exist."""
        os.makedirs(self.directory, exist_ok=True)

    def exists(self) -> bool:
        return os.path.isdir(self.directory) and bool(os.listdir(self.directory))

    def clear(self) -> bool:
        """Delete the session directory. Returns True if anything was removed."""
        if not os.path.exists(self.directory):
            logger.info(f"No session directory at {self.directory}, nothing to clear")
            return False

        shutil.rmtree(self.directory, ignore_errors=True)
        logger.info(f"🗑️ Session directory {self.directory} cleared")
        return True
