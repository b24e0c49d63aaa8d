"""
Command router for in-band control of the gateway.
Interprets STOP/START/STATUS/HELP sent to the bot in a private chat or by
mentioning it in a group.
"""

import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Dict

from .client import IncomingMessage
from .command_utils import resolve_command_text
from .jid import jid_number
from .replies import START_REPLY, STOP_REPLY, help_reply, status_reply

if TYPE_CHECKING:
    from .supervisor import ConnectionSupervisor

logger = logging.getLogger(__name__)


class CommandRouter:
    """Handles bot commands arriving through the supervisor's message events."""

    def __init__(self, supervisor: "ConnectionSupervisor"):
        self.supervisor = supervisor
        self._commands: Dict[str, Callable[[IncomingMessage], Awaitable[None]]] = {
            "stop": self._handle_stop,
            "start": self._handle_start,
            "status": self._handle_status,
            "help": self._handle_help,
            "menu": self._handle_help,
        }

    def register(self) -> None:
        """Subscribe to inbound messages."""
        self.supervisor.add_message_listener(self.handle_message)

    async def handle_message(self, message: IncomingMessage):
        """Handle an inbound message event. Never raises."""
        try:
            bot_jid = self.supervisor.user.id if self.supervisor.user else None
            command = resolve_command_text(message, bot_jid)
            if command is None:
                return

            handler = self._commands.get(command)
            if handler is None:
                return

            await handler(message)

        except Exception as e:
            logger.error(f"Error processing message from {message.chat_jid}: {e}")

    async def _handle_stop(self, message: IncomingMessage):
        self.supervisor.system.disable(message.sender_jid)
        await self._reply(message, STOP_REPLY)

    async def _handle_start(self, message: IncomingMessage):
        self.supervisor.system.enable(message.sender_jid)
        await self._reply(message, START_REPLY)

    async def _handle_status(self, message: IncomingMessage):
        await self._reply(message, status_reply(self.supervisor.current_status()))

    async def _handle_help(self, message: IncomingMessage):
        user = self.supervisor.user
        bot_number = jid_number(user.id) if user else ""
        await self._reply(message, help_reply(bot_number))

    async def _reply(self, message: IncomingMessage, text: str):
        """Reply to the originating conversation; failures are only logged."""
        try:
            await self.supervisor.send(message.chat_jid, text)
        except Exception as e:
            logger.error(f"Failed to send command reply to {message.chat_jid}: {e}")
