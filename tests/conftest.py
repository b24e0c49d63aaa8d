import asyncio
from typing import List, Optional

import pytest

from app.whatsapp import (
    BotUser,
    ChatClient,
    ConnectionSupervisor,
    ConnectionUpdate,
    DisconnectReason,
    GroupInfo,
    IncomingMessage,
    SessionStore,
)

BOT_JID = "62812345678:7@s.whatsapp.net"


class FakeChatClient(ChatClient):
    def __init__(self, session_store, on_update, on_message, factory):
        super().__init__(session_store, on_update, on_message)
        self.factory = factory
        self.started = False
        self.closed = False
        self.sent: List[tuple] = []
        self._aborted = asyncio.Event()

    @property
    def user(self) -> Optional[BotUser]:
        return self.factory.bot_user

    async def start(self) -> None:
        if self.factory.block_start:
            await self._aborted.wait()
            raise RuntimeError("connection aborted")
        if self.factory.fail_start:
            raise RuntimeError("handshake failed")
        self.started = True

    async def close(self) -> None:
        self.closed = True
        self._aborted.set()

    async def send_text(self, jid: str, text: str) -> None:
        if self.factory.send_error:
            raise self.factory.send_error
        self.sent.append((jid, text))

    async def list_groups(self) -> List[GroupInfo]:
        return list(self.factory.groups)

    @property
    def listeners_attached(self) -> bool:
        return self._on_update is not None or self._on_message is not None

    async def open(self):
        await self.emit_update(ConnectionUpdate(connection="open"))

    async def drop(self, reason: DisconnectReason = DisconnectReason.CONNECTION_LOST):
        await self.emit_update(ConnectionUpdate(connection="close", reason=reason))


class FakeClientFactory:
    def __init__(self):
        self.clients: List[FakeChatClient] = []
        self.fail_start = False
        self.block_start = False
        self.send_error: Optional[Exception] = None
        self.bot_user = BotUser(id=BOT_JID, name="Gateway Bot")
        self.groups: List[GroupInfo] = []

    def __call__(self, session_store, on_update, on_message) -> FakeChatClient:
        client = FakeChatClient(session_store, on_update, on_message, self)
        self.clients.append(client)
        return client

    @property
    def latest(self) -> FakeChatClient:
        return self.clients[-1]

    @property
    def sent(self) -> List[tuple]:
        return [item for client in self.clients for item in client.sent]


class ManualSleeper:
    """Records requested delays and blocks until released."""

    def __init__(self):
        self.delays: List[float] = []
        self._released = asyncio.Event()

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await self._released.wait()

    def release(self):
        self._released.set()


async def settle(rounds: int = 10):
    """Let pending tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


def direct_message(text, sender="628999000111@s.whatsapp.net", from_me=False):
    return IncomingMessage(chat_jid=sender, sender_jid=sender, from_me=from_me, text=text)


def group_message(text, mentioned=(), group="120363000000000001@g.us",
                  sender="628999000111@s.whatsapp.net"):
    return IncomingMessage(
        chat_jid=group,
        sender_jid=sender,
        text=text,
        mentioned_jids=list(mentioned),
    )


@pytest.fixture
def session_store(tmp_path) -> SessionStore:
    store = SessionStore(str(tmp_path / "session"))
    store.ensure()
    (tmp_path / "session" / "creds.json").write_text("{}")
    return store


@pytest.fixture
def factory() -> FakeClientFactory:
    return FakeClientFactory()


@pytest.fixture
def sleeper() -> ManualSleeper:
    return ManualSleeper()


@pytest.fixture
def supervisor(session_store, factory, sleeper) -> ConnectionSupervisor:
    return ConnectionSupervisor(
        session_store=session_store,
        client_factory=factory,
        max_retries=6,
        retry_interval=5.0,
        session_reset_delay=3.0,
        restart_delay=2.0,
        clear_session_delay=3.0,
        sleep=sleeper,
    )
