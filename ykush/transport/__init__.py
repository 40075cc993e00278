"""Transport layer for YKUSH3 communication."""

from .base import HIDTransport
from .usb_hid import HidApiTransport, enumerate_hid

__all__ = ["HIDTransport", "HidApiTransport", "enumerate_hid"]
