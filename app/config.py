"""Application configuration and startup logic."""

import os
import asyncio
import logging
import logging.config
from dataclasses import dataclass
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

from app.whatsapp import CommandRouter, ConnectionSupervisor, SessionStore
from app.whatsapp.errors import GatewayError
from app.whatsapp.neonize_client import create_neonize_client

logger = logging.getLogger(__name__)

ENDPOINTS = [
    ("/send-message?number=6281234567890&message=Halo", "Send a message to a number"),
    ("/send-group-message?groupId=120363123456789012@g.us&message=Halo", "Send a message to a group"),
    ("/groups", "List groups"),
    ("/status", "Connection & system status"),
    ("/health", "Health check with auto restart info"),
    ("/system-control?action=stop/start/status", "Manual system control"),
    ("/qr", "Get the pairing QR code"),
    ("/restart", "Restart the connection"),
    ("/clear-session", "Clear the session"),
    ("/reset-retry", "Reset the retry counter"),
]


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Gateway settings read from the environment."""

    host: str = "0.0.0.0"
    port: int = 3000
    session_dir: str = "session"
    max_retries: int = 6
    retry_interval: float = 5.0
    session_reset_delay: float = 3.0
    restart_delay: float = 2.0
    clear_session_delay: float = 3.0
    auto_connect: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3000")),
            session_dir=os.getenv("SESSION_DIR", "session"),
            max_retries=int(os.getenv("MAX_RETRIES", "6")),
            retry_interval=float(os.getenv("RETRY_INTERVAL", "5")),
            session_reset_delay=float(os.getenv("SESSION_RESET_DELAY", "3")),
            restart_delay=float(os.getenv("RESTART_DELAY", "2")),
            clear_session_delay=float(os.getenv("CLEAR_SESSION_DELAY", "3")),
            auto_connect=_env_bool("AUTO_CONNECT", True),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def __post_init__(self):
        if self.max_retries < 1:
            raise ValueError("MAX_RETRIES must be at least 1")
        if self.retry_interval < 0:
            raise ValueError("RETRY_INTERVAL must not be negative")


def configure_logging(level: str = "INFO"):
    """Configure application logging."""
    if os.path.exists("logging.conf"):
        logging.config.fileConfig("logging.conf")
    else:
        logging.basicConfig(
            level=getattr(logging, level, logging.INFO),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )


def create_supervisor(settings: Settings) -> ConnectionSupervisor:
    """Build the supervisor and wire the command router into it."""
    supervisor = ConnectionSupervisor(
        session_store=SessionStore(settings.session_dir),
        client_factory=create_neonize_client,
        max_retries=settings.max_retries,
        retry_interval=settings.retry_interval,
        session_reset_delay=settings.session_reset_delay,
        restart_delay=settings.restart_delay,
        clear_session_delay=settings.clear_session_delay,
    )
    CommandRouter(supervisor).register()
    return supervisor


def log_startup_banner(settings: Settings):
    logger.info(f"🚀 Server running on port {settings.port}")
    logger.info("📋 Available endpoints:")
    for path, description in ENDPOINTS:
        logger.info(f"GET  http://localhost:{settings.port}{path} - {description}")
    logger.info(
        f"🔧 Auto Restart: session is cleared and restarted after "
        f"{settings.max_retries} failed attempts"
    )
    logger.info(f"⏱️ Retry Interval: {settings.retry_interval:g} seconds between attempts")
    logger.info(
        "🤖 Bot Control: send STOP/START/STATUS/HELP privately or mention the bot in a group"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings: Settings = app.state.settings
    supervisor: ConnectionSupervisor = app.state.supervisor

    # Startup
    log_startup_banner(settings)
    connect_task = None
    if settings.auto_connect:
        connect_task = asyncio.create_task(supervisor.connect())

    yield

    # Cleanup
    if connect_task and not connect_task.done():
        connect_task.cancel()
    await supervisor.shutdown()
    logger.info("Application shutdown complete")


def create_exception_handlers(app: FastAPI):
    """Create and configure exception handlers."""

    @app.exception_handler(GatewayError)
    async def gateway_exception_handler(request: Request, exc: GatewayError):
        content = {"success": False, "error": exc.message}
        if exc.example:
            content["example"] = exc.example
        return JSONResponse(status_code=exc.status_code, content=content)


def create_app(
    settings: Optional[Settings] = None,
    supervisor: Optional[ConnectionSupervisor] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    # Load environment variables
    load_dotenv()

    if settings is None:
        settings = Settings.from_env()

    # Configure logging
    configure_logging(settings.log_level)

    # Create FastAPI app
    app = FastAPI(
        title="WhatsApp Gateway",
        description="HTTP gateway for sending WhatsApp messages with a supervised connection",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.supervisor = supervisor or create_supervisor(settings)

    # Create exception handlers
    create_exception_handlers(app)

    return app
