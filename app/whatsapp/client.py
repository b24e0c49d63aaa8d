"""
Chat client boundary.

The protocol handshake, encryption and framing live in the external client
library. The supervisor only talks to the narrow ``ChatClient`` interface
below and receives lifecycle and message events as plain dataclasses.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from .jid import is_group_jid
from .session_store import SessionStore


class DisconnectReason(str, Enum):
    """Reason codes reported when the connection closes."""

    BAD_SESSION = "bad_session"
    CONNECTION_CLOSED = "connection_closed"
    CONNECTION_LOST = "connection_lost"
    CONNECTION_REPLACED = "connection_replaced"
    LOGGED_OUT = "logged_out"
    RESTART_REQUIRED = "restart_required"
    TIMED_OUT = "timed_out"
    UNKNOWN = "unknown"


@dataclass
class ConnectionUpdate:
    """Lifecycle event emitted by the client."""

    connection: Optional[str] = None  # "connecting", "open", "close"
    reason: Optional[DisconnectReason] = None
    qr: Optional[str] = None


@dataclass
class IncomingMessage:
    """Inbound message event."""

    chat_jid: str
    sender_jid: str
    from_me: bool = False
    text: Optional[str] = None
    mentioned_jids: List[str] = field(default_factory=list)

    @property
    def is_group(self) -> bool:
        return is_group_jid(self.chat_jid)


@dataclass
class BotUser:
    """Identity the session is bound to once the connection is open."""

    id: str
    name: Optional[str] = None


@dataclass
class GroupInfo:
    id: str
    name: str
    participants: List[str] = field(default_factory=list)


UpdateCallback = Callable[[ConnectionUpdate], Awaitable[None]]
MessageCallback = Callable[[IncomingMessage], Awaitable[None]]


class ChatClient(ABC):
    """A single connection attempt to the chat network."""

    def __init__(
        self,
        session_store: SessionStore,
        on_update: UpdateCallback,
        on_message: MessageCallback,
    ):
        self.session_store = session_store
        self._on_update: Optional[UpdateCallback] = on_update
        self._on_message: Optional[MessageCallback] = on_message

    def detach_listeners(self) -> None:
        """Stop delivering events to the supervisor."""
        self._on_update = None
        self._on_message = None

    async def emit_update(self, update: ConnectionUpdate) -> None:
        if self._on_update:
            await self._on_update(update)

    async def emit_message(self, message: IncomingMessage) -> None:
        if self._on_message:
            await self._on_message(message)

    @property
    @abstractmethod
    def user(self) -> Optional[BotUser]:
        """Bound identity, or None before the connection opens."""

    @abstractmethod
    async def start(self) -> None:
        """Open the connection using the stored credentials."""

    @abstractmethod
    async def close(self) -> None:
        """Close the socket."""

    @abstractmethod
    async def send_text(self, jid: str, text: str) -> None:
        """Send a plain text message."""

    @abstractmethod
    async def list_groups(self) -> List[GroupInfo]:
        """Fetch every group the account participates in."""


ClientFactory = Callable[[SessionStore, UpdateCallback, MessageCallback], ChatClient]
