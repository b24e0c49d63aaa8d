"""
ChatClient implementation backed by neonize (whatsmeow bindings).
"""

import asyncio
import logging
from typing import List, Optional

import segno

from .client import (
    BotUser,
    ChatClient,
    ConnectionUpdate,
    DisconnectReason,
    GroupInfo,
    IncomingMessage,
)

logger = logging.getLogger(__name__)


class NeonizeChatClient(ChatClient):
    """One neonize client per connection attempt."""

    def __init__(self, session_store, on_update, on_message):
        super().__init__(session_store, on_update, on_message)
        self._client = None
        self._connect_task: Optional[asyncio.Task] = None
        self._user: Optional[BotUser] = None

    @property
    def user(self) -> Optional[BotUser]:
        return self._user

    async def start(self) -> None:
        """Create the neonize client, register events and start connecting."""
        self.session_store.ensure()
        self._create_whatsapp_client()
        self._register_events()

        await self.emit_update(ConnectionUpdate(connection="connecting"))
        self._connect_task = asyncio.create_task(self._run_connection())

    async def close(self) -> None:
        if self._client is not None:
            try:
                await self._client.disconnect()
            except Exception as e:
                logger.error(f"Error disconnecting WhatsApp client: {e}")
            finally:
                self._client = None

        task = self._connect_task
        # close() may run inside the connection task itself when it reports
        # its own failure.
        if task and not task.done() and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._connect_task = None
        self._user = None

    async def send_text(self, jid: str, text: str) -> None:
        from neonize.utils import build_jid

        user, _, server = jid.partition("@")
        await self._client.send_message(build_jid(user, server), text)

    async def list_groups(self) -> List[GroupInfo]:
        from neonize.utils.jid import Jid2String

        groups = await self._client.get_joined_groups()
        return [
            GroupInfo(
                id=Jid2String(group.JID),
                name=group.GroupName.Name,
                participants=[Jid2String(p.JID) for p in group.Participants],
            )
            for group in groups
        ]

    def _create_whatsapp_client(self):
        """Create neonize client with the session database."""
        from neonize.aioze.client import NewAClient

        self._client = NewAClient(self.session_store.database_path)

    def _register_events(self):
        from neonize.aioze.events import (
            ConnectedEv,
            ConnectFailureEv,
            DisconnectedEv,
            LoggedOutEv,
            MessageEv,
            StreamReplacedEv,
        )

        client = self._client

        @client.event(ConnectedEv)
        async def on_connected(_, __):
            await self._handle_connected()

        @client.event(DisconnectedEv)
        async def on_disconnected(_, __):
            await self._handle_closed(DisconnectReason.CONNECTION_LOST)

        @client.event(LoggedOutEv)
        async def on_logged_out(_, __):
            await self._handle_closed(DisconnectReason.LOGGED_OUT)

        @client.event(StreamReplacedEv)
        async def on_stream_replaced(_, __):
            await self._handle_closed(DisconnectReason.CONNECTION_REPLACED)

        @client.event(ConnectFailureEv)
        async def on_connect_failure(_, __):
            await self._handle_closed(DisconnectReason.BAD_SESSION)

        @client.event(MessageEv)
        async def on_message(_, message):
            await self._handle_message(message)

        @client.event.qr
        async def on_qr(_, data_qr: bytes):
            qr = data_qr.decode() if isinstance(data_qr, bytes) else str(data_qr)
            render_qr(qr)
            await self.emit_update(ConnectionUpdate(qr=qr))

    async def _run_connection(self):
        try:
            await self._client.connect()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"WhatsApp connection task failed: {e}")
            await self._handle_closed(DisconnectReason.UNKNOWN)

    async def _handle_connected(self):
        try:
            me = await self._client.get_me()
            from neonize.utils.jid import Jid2String

            self._user = BotUser(id=Jid2String(me.JID), name=me.PushName or None)
        except Exception as e:
            logger.error(f"Failed to read bound identity: {e}")
        await self.emit_update(ConnectionUpdate(connection="open"))

    async def _handle_closed(self, reason: DisconnectReason):
        await self.emit_update(ConnectionUpdate(connection="close", reason=reason))

    async def _handle_message(self, event):
        from neonize.utils.jid import Jid2String

        source = event.Info.MessageSource
        body = event.Message
        extended = body.extendedTextMessage
        text = body.conversation or extended.text or None

        await self.emit_message(
            IncomingMessage(
                chat_jid=Jid2String(source.Chat),
                sender_jid=Jid2String(source.Sender),
                from_me=source.IsFromMe,
                text=text,
                mentioned_jids=list(extended.contextInfo.mentionedJID),
            )
        )


def create_neonize_client(session_store, on_update, on_message) -> NeonizeChatClient:
    """Client factory used by the supervisor in production."""
    return NeonizeChatClient(session_store, on_update, on_message)


def render_qr(qr: str) -> None:
    """Print the pairing code as a scannable QR block on the terminal."""
    segno.make_qr(qr).terminal(compact=True)
