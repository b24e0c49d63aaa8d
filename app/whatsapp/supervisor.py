"""
Connection supervisor for the WhatsApp session.

Owns the single live ChatClient, the connection state machine, the retry
budget and the session-reset policy. HTTP handlers and the command router
only reach the connection through the methods exposed here.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from app.models import GroupSummary, SupervisorStatus

from .client import (
    BotUser,
    ChatClient,
    ClientFactory,
    ConnectionUpdate,
    DisconnectReason,
    IncomingMessage,
    MessageCallback,
)
from .errors import ChatClientError, NotConnectedError
from .session_store import SessionStore
from .system_switch import SystemSwitch

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass
class RetryBudget:
    """Consecutive failed attempts allowed before the session is reset."""

    max: int = 6
    interval: float = 5.0
    count: int = 0

    def record_failure(self) -> bool:
        """Count a failure. Returns True once the budget is exhausted."""
        self.count += 1
        return self.count >= self.max

    def reset(self) -> int:
        """Zero the counter and return its previous value."""
        old_count = self.count
        self.count = 0
        return old_count


_CLOSE_REASON_LOGS = {
    DisconnectReason.BAD_SESSION: "❌ Bad session detected, will reset session after max retries",
    DisconnectReason.CONNECTION_CLOSED: "🔄 Connection closed, attempting reconnect...",
    DisconnectReason.CONNECTION_LOST: "🔄 Connection lost, attempting reconnect...",
    DisconnectReason.CONNECTION_REPLACED: "❌ Connection replaced by another session",
    DisconnectReason.LOGGED_OUT: "❌ Device logged out, will clear session after max retries",
    DisconnectReason.RESTART_REQUIRED: "🔄 Restart required, attempting reconnect...",
    DisconnectReason.TIMED_OUT: "🔄 Connection timed out, attempting reconnect...",
}


class ConnectionSupervisor:
    """Supervises the lifecycle of the single WhatsApp connection."""

    def __init__(
        self,
        session_store: SessionStore,
        client_factory: ClientFactory,
        system: Optional[SystemSwitch] = None,
        max_retries: int = 6,
        retry_interval: float = 5.0,
        session_reset_delay: float = 3.0,
        restart_delay: float = 2.0,
        clear_session_delay: float = 3.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.session_store = session_store
        self.system = system or SystemSwitch()
        self.retry_budget = RetryBudget(max=max_retries, interval=retry_interval)
        self.session_reset_delay = session_reset_delay
        self.restart_delay = restart_delay
        self.clear_session_delay = clear_session_delay

        self._client_factory = client_factory
        self._sleep = sleep
        self._state = ConnectionState.DISCONNECTED
        self._client: Optional[ChatClient] = None
        self._user: Optional[BotUser] = None
        self._pending_qr: Optional[str] = None
        self._message_listeners: List[MessageCallback] = []

        # Bumped by every explicit action; a scheduled reconnect carrying an
        # older generation is discarded when it fires.
        self._generation = 0
        self._retry_task: Optional[asyncio.Task] = None
        self._retry_delay: Optional[float] = None
        self._closed = False

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._client is not None and self._state is ConnectionState.CONNECTED

    @property
    def user(self) -> Optional[BotUser]:
        return self._user

    @property
    def pending_qr(self) -> Optional[str]:
        return self._pending_qr

    @property
    def scheduled_retry_delay(self) -> Optional[float]:
        """Delay of the reconnect currently waiting to fire, if any."""
        return self._retry_delay

    def add_message_listener(self, listener: MessageCallback) -> None:
        self._message_listeners.append(listener)

    async def connect(self):
        """Start a connection attempt. No-op while an attempt is in progress."""
        if self._closed:
            logger.info("Supervisor shut down, ignoring connect request")
            return

        if self._state is ConnectionState.CONNECTING:
            logger.info("Already connecting, please wait...")
            return

        logger.info("🔄 Starting WhatsApp connection...")
        self._state = ConnectionState.CONNECTING
        generation = self._generation

        await self._teardown()
        if self._is_superseded(generation):
            logger.info("Connection attempt superseded before it started")
            return

        try:
            self._client = self._client_factory(
                self.session_store, self._handle_connection_update, self._dispatch_message
            )
            await self._client.start()
        except Exception as e:
            if self._is_superseded(generation):
                logger.info(f"Superseded connection attempt failed: {e}")
                return

            logger.error(f"❌ Error while connecting to WhatsApp: {e}")
            self._state = ConnectionState.DISCONNECTED
            await self._teardown()
            logger.info("🔄 Error occurred, attempting auto restart...")
            await self._apply_retry_policy()
            return

        if self._is_superseded(generation):
            logger.info("Connection attempt superseded while starting")

    def _is_superseded(self, generation: int) -> bool:
        """A manual action or shutdown happened since the attempt began."""
        return generation != self._generation or self._closed

    async def send(self, jid: str, text: str) -> None:
        """Send a text message. Raises NotConnectedError or ChatClientError."""
        client = self._require_connection()
        try:
            await client.send_text(jid, text)
        except Exception as e:
            raise ChatClientError(str(e) or e.__class__.__name__) from e
        logger.info(f"✅ Message sent to {jid} - Length: {len(text)} chars")

    async def list_groups(self) -> List[GroupSummary]:
        client = self._require_connection()
        try:
            groups = await client.list_groups()
        except Exception as e:
            raise ChatClientError(str(e) or e.__class__.__name__) from e
        return [
            GroupSummary(id=group.id, name=group.name, member_count=len(group.participants))
            for group in groups
        ]

    async def manual_restart(self):
        """Tear down and reconnect without spending the retry budget."""
        logger.info("🔄 Manual restart requested...")
        self._cancel_pending_retry()
        self._state = ConnectionState.DISCONNECTED
        self.retry_budget.reset()
        await self._teardown()
        self._schedule_reconnect(self.restart_delay)

    async def clear_session(self):
        """Tear down, delete the stored credentials and reconnect."""
        logger.info("🗑️ Session clear requested...")
        self._cancel_pending_retry()
        self._state = ConnectionState.DISCONNECTED
        self.retry_budget.reset()
        await self._teardown()
        if self.session_store.clear():
            logger.info("📁 Session folder cleared manually")
        self._schedule_reconnect(self.clear_session_delay)

    def reset_retry_count(self) -> int:
        """Zero the retry counter. Returns the previous value."""
        old_count = self.retry_budget.reset()
        logger.info(f"Retry count reset ({old_count} -> 0)")
        return old_count

    def current_status(self) -> SupervisorStatus:
        user = self._user if self.is_connected else None
        return SupervisorStatus(
            state=self._state.value,
            retry_count=self.retry_budget.count,
            max_retries=self.retry_budget.max,
            enabled=self.system.enabled,
            user_id=user.id if user else None,
            user_name=user.name if user else None,
            qr_pending=self._pending_qr is not None,
        )

    async def shutdown(self):
        """Tear down the connection and drop any pending reconnect."""
        logger.info("🛑 Shutting down WhatsApp connection...")
        self._closed = True
        self._cancel_pending_retry()
        self._state = ConnectionState.DISCONNECTED
        await self._teardown()

    def _require_connection(self) -> ChatClient:
        if not self.is_connected:
            raise NotConnectedError()
        return self._client

    async def _handle_connection_update(self, update: ConnectionUpdate):
        if update.qr:
            self._pending_qr = update.qr
            logger.info("=== SCAN QR CODE === (also available at GET /qr)")

        if update.connection == "connecting":
            logger.info("🔄 Connecting to WhatsApp...")
        elif update.connection == "open":
            self._handle_open()
        elif update.connection == "close":
            await self._handle_close(update.reason or DisconnectReason.UNKNOWN)

    def _handle_open(self):
        self._state = ConnectionState.CONNECTED
        self._user = self._client.user if self._client else None
        self._pending_qr = None

        logger.info("✅ WhatsApp Connected Successfully!")
        if self._user:
            logger.info(f"📱 Connected as: {self._user.id}")

        old_count = self.retry_budget.reset()
        if old_count > 0:
            logger.info(f"✅ Connection restored after {old_count} attempts")

    async def _handle_close(self, reason: DisconnectReason):
        if self._closed:
            return

        self._state = ConnectionState.DISCONNECTED
        logger.info(f"❌ Connection closed with reason: {reason.value}")
        logger.info(_CLOSE_REASON_LOGS.get(reason, "🔄 Unknown error, attempting reconnect..."))

        await self._teardown()
        await self._apply_retry_policy()

    async def _apply_retry_policy(self):
        exhausted = self.retry_budget.record_failure()
        logger.info(
            f"🔍 Auto restart attempt {self.retry_budget.count}/{self.retry_budget.max}"
        )

        if not exhausted:
            self._schedule_reconnect(self.retry_budget.interval)
            return

        logger.warning("❌ Max retry attempts reached. Clearing session and restarting...")
        await self._teardown()
        self.session_store.clear()
        self.retry_budget.reset()
        self._schedule_reconnect(self.session_reset_delay)

    def _schedule_reconnect(self, delay: float):
        if self._closed:
            return

        if self._retry_task and not self._retry_task.done():
            self._retry_task.cancel()

        self._retry_delay = delay
        self._retry_task = asyncio.create_task(
            self._delayed_connect(delay, self._generation)
        )
        logger.info(f"⏱️ Reconnect scheduled in {delay:g} seconds")

    def _cancel_pending_retry(self):
        self._generation += 1
        if self._retry_task and not self._retry_task.done():
            self._retry_task.cancel()
        self._retry_task = None
        self._retry_delay = None

    async def _delayed_connect(self, delay: float, generation: int):
        await self._sleep(delay)

        if self._is_superseded(generation):
            logger.debug("Discarding stale scheduled reconnect")
            return

        self._retry_task = None
        self._retry_delay = None
        await self.connect()

    async def _teardown(self):
        """Detach listeners and close the current client, if any."""
        client, self._client = self._client, None
        self._user = None
        if client is None:
            return

        client.detach_listeners()
        try:
            await client.close()
        except Exception as e:
            logger.error(f"Cleanup error: {e}")

    async def _dispatch_message(self, message: IncomingMessage):
        for listener in self._message_listeners:
            try:
                await listener(message)
            except Exception as e:
                logger.error(f"Error processing message: {e}")
