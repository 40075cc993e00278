"""YKUSH3 SDK - host-side driver for the Yepkit YKUSH3 3-port USB switch."""

from .constants import VENDOR_ID, PRODUCT_ID, REPORT_SIZE
from .device import YKUSH3, SessionState
from .errors import (
    YkushError,
    InvalidPortError,
    NotConnectedError,
    TransportError,
    ProtocolError,
)
from .finder import find_devices, list_devices, is_matching_device
from .models import Port, PortState, PortStates, DeviceInfo

__all__ = [
    "VENDOR_ID",
    "PRODUCT_ID",
    "REPORT_SIZE",
    "YKUSH3",
    "SessionState",
    "YkushError",
    "InvalidPortError",
    "NotConnectedError",
    "TransportError",
    "ProtocolError",
    "find_devices",
    "list_devices",
    "is_matching_device",
    "Port",
    "PortState",
    "PortStates",
    "DeviceInfo",
]
