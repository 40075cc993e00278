"""Immutable data models for YKUSH3 ports, states and enumerated devices.

These models are the contract between the protocol, transport and device layers.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, Iterator, Optional, Tuple


class Port(IntEnum):
    """Switchable downstream port of a YKUSH3.

    ALL is a sentinel accepted by the actuation commands only.
    """
    PORT1 = 1
    PORT2 = 2
    PORT3 = 3
    ALL = 10

    def __str__(self) -> str:
        if self is Port.ALL:
            return "All Ports"
        return f"Port {self.value}"

    def __format__(self, format_spec: str) -> str:
        return format(str(self), format_spec)


# Fixed polling order for bulk queries
INDIVIDUAL_PORTS = (Port.PORT1, Port.PORT2, Port.PORT3)


class PortState(Enum):
    """Power state of a port. There are no intermediate states."""
    OFF = False
    ON = True

    @classmethod
    def from_bool(cls, value: bool) -> PortState:
        return cls.ON if value else cls.OFF

    def __bool__(self) -> bool:
        return self.value

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class PortStates:
    """Snapshot of the three individual port states.

    Attributes:
        port1: State of Port 1
        port2: State of Port 2
        port3: State of Port 3
    """
    port1: PortState
    port2: PortState
    port3: PortState

    def get(self, port: Port) -> PortState:
        """Return the state of a single port.

        Raises:
            KeyError: If port is not one of PORT1..PORT3
        """
        if port == Port.PORT1:
            return self.port1
        if port == Port.PORT2:
            return self.port2
        if port == Port.PORT3:
            return self.port3
        raise KeyError(port)

    def __getitem__(self, port: Port) -> PortState:
        return self.get(port)

    def items(self) -> Iterator[Tuple[Port, PortState]]:
        """Iterate (port, state) pairs in Port1, Port2, Port3 order."""
        for port in INDIVIDUAL_PORTS:
            yield port, self.get(port)

    def as_dict(self) -> Dict[Port, PortState]:
        return dict(self.items())


@dataclass(frozen=True)
class DeviceInfo:
    """
    Representation of one YKUSH3 as reported by HID enumeration.

    Attributes:
        path: OS-specific HID path (bytes, as returned by hidapi).
        vendor_id: USB Vendor ID.
        product_id: USB Product ID.
        serial_number: USB serial string, if available.
        manufacturer: USB manufacturer string, if available.
        product: USB product string, if available.
        release_number: Device release number (bcdDevice).
        interface_number: USB interface number, -1 if unknown.
    """
    path: bytes
    vendor_id: int
    product_id: int
    serial_number: Optional[str]
    manufacturer: Optional[str]
    product: Optional[str]
    release_number: int = 0
    interface_number: int = -1

    @property
    def device_id(self) -> str:
        """
        Stable identifier for the device.

        Prefer the USB serial number (what open-by-serial uses);
        fall back to the HID path if the serial is missing.
        """
        if self.serial_number:
            return self.serial_number
        return self.path.decode("utf-8", errors="replace")
