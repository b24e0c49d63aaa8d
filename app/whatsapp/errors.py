"""
Errors raised by the gateway and rendered by the HTTP layer.

Connection lifecycle failures are deliberately absent: the supervisor
absorbs them and turns them into retry decisions.
"""

from typing import Optional


class GatewayError(Exception):
    """Base class for errors surfaced to HTTP callers."""

    status_code = 500

    def __init__(self, message: str, example: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.example = example


class NotConnectedError(GatewayError):
    """Operation attempted while the connection is not open."""

    def __init__(self, message: str = "WhatsApp belum terkoneksi"):
        super().__init__(message)


class SystemDisabledError(GatewayError):
    """Outbound traffic has been switched off."""

    def __init__(self, message: str = "Sistem belum diaktifkan"):
        super().__init__(message)


class RequestValidationFailed(GatewayError):
    """A required query parameter is missing or invalid."""

    status_code = 400


class ChatClientError(GatewayError):
    """The underlying chat client rejected a send or fetch."""
