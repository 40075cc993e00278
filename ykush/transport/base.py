"""Abstract base class for the HID transport layer.

The HIDTransport interface is the only thing the protocol engine needs from
the outside world: open a device, write one report, read one report, close.
Implementations can wrap hidapi, a test stub, or anything else that moves
fixed-size reports.

Key principles:
- Blocking, report-at-a-time I/O
- All failures surface as TransportError
- No protocol knowledge (opcodes, status bytes) in this layer
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class HIDTransport(ABC):
    """Abstract transport to a single HID device.

    Transports are responsible for:
    1. Managing the OS handle lifecycle
    2. Writing and reading raw reports
    3. Reporting the device serial number

    Transports should NOT interpret report contents.
    """

    @abstractmethod
    def open(self, vendor_id: int, product_id: int, serial: Optional[str] = None) -> None:
        """Open the device.

        Args:
            vendor_id: USB Vendor ID
            product_id: USB Product ID
            serial: Serial number to match, or None for the first matching device

        Raises:
            TransportError: If no device could be opened
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the device handle.

        Should be safe to call multiple times.
        """
        pass

    @abstractmethod
    def is_open(self) -> bool:
        """Check if the transport currently holds an open handle."""
        pass

    @abstractmethod
    def write(self, report: bytes) -> int:
        """Write one report.

        Args:
            report: Complete report bytes

        Returns:
            Number of bytes written

        Raises:
            TransportError: On write failure
        """
        pass

    @abstractmethod
    def read(self, size: int, timeout_ms: Optional[int] = None) -> bytes:
        """Read one report.

        Blocks until a report arrives, or until timeout_ms elapses if given.

        Args:
            size: Maximum number of bytes to read
            timeout_ms: Bound on the wait in milliseconds, None to block

        Returns:
            Report bytes

        Raises:
            TransportError: On read failure or timeout
        """
        pass

    @abstractmethod
    def get_serial_number(self) -> str:
        """Return the USB serial number string of the open device.

        Raises:
            TransportError: If the serial cannot be read
        """
        pass

    def __enter__(self) -> HIDTransport:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager support - close on exit."""
        self.close()
