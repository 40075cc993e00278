"""Exception hierarchy for the YKUSH3 driver."""
from __future__ import annotations

from typing import Optional


class YkushError(RuntimeError):
    """Base class for all driver errors."""
    pass


class InvalidPortError(YkushError, ValueError):
    """Raised when a port is not valid for the requested operation.

    Always raised before any transport I/O takes place.
    """
    pass


class NotConnectedError(YkushError):
    """Raised when a command is issued on an unopened or closed handle."""
    pass


class TransportError(YkushError):
    """Raised when the underlying HID transport fails (open, write, read, close, enumerate)."""
    pass


class ProtocolError(YkushError):
    """Raised when the device answered, but the answer is not acceptable.

    Attributes:
        status: Observed status byte (byte 0), or None if the report was too short.
        payload: Observed echo/state byte (byte 1), or None if the report was too short.
    """
    def __init__(self, message: str, status: Optional[int] = None, payload: Optional[int] = None):
        super().__init__(message)
        self.status = status
        self.payload = payload
