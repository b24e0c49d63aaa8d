"""Routes for connection status and system control."""

import logging
from typing import Optional
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.dependencies import get_supervisor, require_system_enabled
from app.whatsapp import ConnectionSupervisor
from app.whatsapp.errors import RequestValidationFailed

logger = logging.getLogger(__name__)

router = APIRouter()


def _user_payload(supervisor: ConnectionSupervisor) -> Optional[dict]:
    if not supervisor.is_connected or not supervisor.user:
        return None
    return {"id": supervisor.user.id, "name": supervisor.user.name}


@router.get("/status")
async def status(supervisor: ConnectionSupervisor = Depends(get_supervisor)):
    """Connection and system status."""
    snapshot = supervisor.current_status()
    return {
        "success": True,
        "connected": supervisor.is_connected,
        "connectionState": snapshot.state,
        "systemEnabled": snapshot.enabled,
        "retryCount": snapshot.retry_count,
        "maxRetries": snapshot.max_retries,
        "user": _user_payload(supervisor),
    }


@router.get("/qr")
async def qr_code(supervisor: ConnectionSupervisor = Depends(get_supervisor)):
    """Return the pending pairing QR code, if any."""
    if supervisor.pending_qr:
        return {"success": True, "qr": supervisor.pending_qr}
    return {"success": False, "message": "QR code tidak tersedia"}


@router.get("/health")
async def health(supervisor: ConnectionSupervisor = Depends(get_supervisor)):
    """Health check with auto restart info."""
    snapshot = supervisor.current_status()
    healthy = supervisor.is_connected
    interval = supervisor.retry_budget.interval
    return {
        "success": True,
        "healthy": healthy,
        "connectionState": snapshot.state,
        "systemEnabled": snapshot.enabled,
        "retryCount": snapshot.retry_count,
        "maxRetries": snapshot.max_retries,
        "nextRetryIn": None if healthy else f"{interval:g} seconds",
        "autoRestartEnabled": True,
    }


@router.get("/restart")
async def restart(supervisor: ConnectionSupervisor = Depends(require_system_enabled)):
    """Restart the connection manually."""
    try:
        await supervisor.manual_restart()
    except Exception as e:
        logger.error(f"Error during manual restart: {e}")
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    return {"success": True, "message": "Koneksi restart dimulai", "retryCount": 0}


@router.get("/clear-session")
async def clear_session(supervisor: ConnectionSupervisor = Depends(require_system_enabled)):
    """Delete the stored session and reconnect."""
    try:
        await supervisor.clear_session()
    except Exception as e:
        logger.error(f"Error clearing session: {e}")
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    delay = supervisor.clear_session_delay
    return {
        "success": True,
        "message": f"Session cleared, akan restart otomatis dalam {delay:g} detik",
        "retryCount": 0,
    }


@router.get("/reset-retry")
async def reset_retry(supervisor: ConnectionSupervisor = Depends(require_system_enabled)):
    """Reset the retry counter without touching the connection."""
    old_retry_count = supervisor.reset_retry_count()
    return {
        "success": True,
        "message": "Retry count reset",
        "oldRetryCount": old_retry_count,
        "newRetryCount": supervisor.retry_budget.count,
    }


@router.get("/system-control")
async def system_control(
    action: Optional[str] = None,
    supervisor: ConnectionSupervisor = Depends(get_supervisor),
):
    """Enable, disable or inspect the system out-of-band."""
    if not action:
        raise RequestValidationFailed(
            "Parameter action wajib diisi (start/stop/status)",
            example="/system-control?action=stop",
        )

    command = action.lower()
    system = supervisor.system

    if command == "stop":
        system.disable("API")
        return {
            "success": True,
            "message": "Sistem send WA dihentikan via API",
            "systemEnabled": system.enabled,
            "controlledBy": "API",
        }

    if command == "start":
        system.enable("API")
        return {
            "success": True,
            "message": "Sistem send WA diaktifkan via API",
            "systemEnabled": system.enabled,
            "controlledBy": "API",
        }

    if command == "status":
        return {
            "success": True,
            "systemEnabled": system.enabled,
            "connectionState": supervisor.state.value,
            "controlledBy": system.controlled_by,
            "message": f"Sistem saat ini {'AKTIF' if system.enabled else 'NONAKTIF'}",
        }

    raise RequestValidationFailed("Action tidak valid. Gunakan: start, stop, atau status")
