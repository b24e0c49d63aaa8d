"""Request dependencies shared by the route modules."""

from fastapi import Depends, Request

from app.config import Settings
from app.whatsapp import ConnectionSupervisor
from app.whatsapp.errors import SystemDisabledError


def get_supervisor(request: Request) -> ConnectionSupervisor:
    """Get the supervisor owned by the application."""
    return request.app.state.supervisor


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def require_system_enabled(
    supervisor: ConnectionSupervisor = Depends(get_supervisor),
) -> ConnectionSupervisor:
    """Reject the request when outbound traffic has been switched off."""
    if not supervisor.system.enabled:
        raise SystemDisabledError()
    return supervisor
