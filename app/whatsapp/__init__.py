"""
WhatsApp connection system for the gateway.

The system is divided into a few collaborating parts:

- ConnectionSupervisor: owns the single connection, its state machine,
  the retry budget and the session-reset policy
- CommandRouter: interprets STOP/START/STATUS/HELP commands sent to the bot
- SessionStore: the credential directory shared with the protocol client
- ChatClient: the narrow interface to the protocol library, implemented by
  NeonizeChatClient

HTTP routes and the command router reach the connection only through the
supervisor.
"""

from .client import (
    BotUser,
    ChatClient,
    ConnectionUpdate,
    DisconnectReason,
    GroupInfo,
    IncomingMessage,
)
from .command_router import CommandRouter
from .session_store import SessionStore
from .supervisor import ConnectionState, ConnectionSupervisor, RetryBudget
from .system_switch import SystemSwitch

__all__ = [
    # Main classes
    "ConnectionSupervisor",
    "CommandRouter",
    "SessionStore",
    "SystemSwitch",
    # State
    "ConnectionState",
    "RetryBudget",
    # Client boundary
    "ChatClient",
    "BotUser",
    "ConnectionUpdate",
    "DisconnectReason",
    "GroupInfo",
    "IncomingMessage",
]
