"""Routes for sending messages and listing groups."""

import logging
from typing import Optional
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.dependencies import require_system_enabled
from app.whatsapp import ConnectionSupervisor
from app.whatsapp.errors import GatewayError, RequestValidationFailed
from app.whatsapp.jid import to_direct_jid, to_group_jid

logger = logging.getLogger(__name__)

router = APIRouter()


def _error_response(e: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"success": False, "error": str(e)})


@router.get("/send-message")
async def send_message(
    number: Optional[str] = None,
    message: Optional[str] = None,
    supervisor: ConnectionSupervisor = Depends(require_system_enabled),
):
    """Send a text message to a phone number."""
    if not number or not message:
        raise RequestValidationFailed(
            "Parameter number dan message wajib diisi",
            example="/send-message?number=6281234567890&message=Halo%20dari%20API",
        )

    try:
        await supervisor.send(to_direct_jid(number), message)
    except GatewayError:
        raise
    except Exception as e:
        logger.error(f"Error sending message to {number}: {e}")
        return _error_response(e)

    logger.info(f"✅ Message delivered to {number}: {message}")
    return {
        "success": True,
        "to": number,
        "text": message,
        "systemEnabled": supervisor.system.enabled,
    }


@router.get("/send-group-message")
async def send_group_message(
    groupId: Optional[str] = None,
    message: Optional[str] = None,
    supervisor: ConnectionSupervisor = Depends(require_system_enabled),
):
    """Send a text message to a group."""
    if not groupId or not message:
        raise RequestValidationFailed(
            "Parameter groupId dan message wajib diisi",
            example="/send-group-message?groupId=120363123456789012@g.us&message=Halo%20grup",
        )

    try:
        await supervisor.send(to_group_jid(groupId), message)
    except GatewayError:
        raise
    except Exception as e:
        logger.error(f"Error sending group message to {groupId}: {e}")
        return _error_response(e)

    return {"success": True, "to": groupId, "text": message}


@router.get("/groups")
async def list_groups(supervisor: ConnectionSupervisor = Depends(require_system_enabled)):
    """List the groups the bot participates in."""
    try:
        groups = await supervisor.list_groups()
    except GatewayError as e:
        logger.error(f"Error fetching groups: {e}")
        raise
    except Exception as e:
        logger.error(f"Error fetching groups: {e}")
        return _error_response(e)

    return {
        "success": True,
        "groups": [
            {"id": group.id, "name": group.name, "participants": group.member_count}
            for group in groups
        ],
    }
