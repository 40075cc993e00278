"""hidapi-backed HID transport.

Wraps ``hid.device`` from the hidapi distribution and maps its errors
(OSError/IOError, ValueError on a closed handle) to TransportError.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import hid

from ..errors import TransportError
from .base import HIDTransport

logger = logging.getLogger(__name__)


def enumerate_hid(vendor_id: int, product_id: int) -> List[Dict[str, Any]]:
    """List HID devices with the given identifiers.

    Returns:
        hidapi device descriptors (dicts with 'path', 'serial_number',
        'product_string', ...)

    Raises:
        TransportError: If enumeration fails
    """
    try:
        return list(hid.enumerate(vendor_id, product_id))
    except (OSError, ValueError) as e:
        logger.error(f"HID enumeration failed: {e}")
        raise TransportError(f"Failed to enumerate devices: {e}") from e


class HidApiTransport(HIDTransport):
    """HID transport using hidapi.

    Reads are blocking unless a timeout is given. Reports are written
    verbatim: the YKUSH3 uses no report IDs, byte 0 is the opcode.
    """

    def __init__(self):
        self._device: Optional[hid.device] = None

    def open(self, vendor_id: int, product_id: int, serial: Optional[str] = None) -> None:
        if self._device is not None:
            logger.warning("Already open")
            return

        device = hid.device()
        try:
            if serial:
                device.open(vendor_id, product_id, serial)
            else:
                device.open(vendor_id, product_id)
        except (OSError, ValueError) as e:
            target = f"serial {serial}" if serial else "first match"
            logger.error(f"Failed to open {vendor_id:04x}:{product_id:04x} ({target}): {e}")
            raise TransportError(f"Failed to open device: {e}") from e

        try:
            device.set_nonblocking(0)
        except (OSError, ValueError) as e:
            self._close_quietly(device)
            raise TransportError(f"Failed to configure device: {e}") from e

        self._device = device
        logger.debug(f"Opened HID device {vendor_id:04x}:{product_id:04x}")

    def close(self) -> None:
        if self._device is None:
            return
        device, self._device = self._device, None
        try:
            device.close()
        except (OSError, ValueError) as e:
            raise TransportError(f"Failed to close device: {e}") from e

    def is_open(self) -> bool:
        return self._device is not None

    def write(self, report: bytes) -> int:
        device = self._require_device()
        try:
            written = device.write(report)
        except (OSError, ValueError) as e:
            raise TransportError(f"Failed to send command: {e}") from e
        if written < 0:
            raise TransportError(f"Failed to send command: {self._last_error(device)}")
        return written

    def read(self, size: int, timeout_ms: Optional[int] = None) -> bytes:
        device = self._require_device()
        try:
            if timeout_ms is None:
                data = device.read(size)
            else:
                data = device.read(size, timeout_ms)
        except (OSError, ValueError) as e:
            raise TransportError(f"Failed to read response: {e}") from e
        if not data:
            if timeout_ms is None:
                raise TransportError("Failed to read response: device returned no data")
            raise TransportError(f"Failed to read response: no report within {timeout_ms} ms")
        return bytes(data)

    def get_serial_number(self) -> str:
        device = self._require_device()
        try:
            serial = device.get_serial_number_string()
        except (OSError, ValueError) as e:
            raise TransportError(f"Failed to read serial number: {e}") from e
        return serial or ""

    def _require_device(self) -> hid.device:
        if self._device is None:
            raise TransportError("Transport not open")
        return self._device

    @staticmethod
    def _close_quietly(device: hid.device) -> None:
        try:
            device.close()
        except (OSError, ValueError) as e:
            logger.warning(f"Error closing half-opened device: {e}")

    @staticmethod
    def _last_error(device: hid.device) -> str:
        try:
            return device.error() or "unknown error"
        except (OSError, ValueError):
            return "unknown error"
