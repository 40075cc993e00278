"""YKUSH3 device session.

The YKUSH3 is a 3-port USB switch. Each port can be powered up or down and
its state queried over a 64-byte HID report exchange:

- Host writes a report: byte 0 = opcode, byte 1 = control (same as opcode)
- Device answers with a report: byte 0 = status (0x01 = success),
  byte 1 = echoed opcode, or a state code for queries

This module handles:
- Session lifecycle (unopened -> open -> closed)
- The synchronous write-then-read exchange
- Port operations built on the protocol layer

Note: A handle is not thread-safe. The device has no request IDs, so
      callers sharing a handle must serialize access themselves.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Union

from .constants import PRODUCT_ID, REPORT_SIZE, VENDOR_ID
from .errors import NotConnectedError, YkushError
from .models import INDIVIDUAL_PORTS, Port, PortState, PortStates
from .protocol import Command, CommandEncoder, Response, ResponseDecoder
from .transport import HIDTransport, HidApiTransport

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle of a device handle. CLOSED is terminal."""
    UNOPENED = "unopened"
    OPEN = "open"
    CLOSED = "closed"


class YKUSH3:
    """Connection to a YKUSH3 USB switching device.

    Example:
        >>> with YKUSH3.first_available() as ykush:
        ...     ykush.port_up(Port.PORT1)
        ...     print(ykush.get_port_state(Port.PORT1))
        ON
    """

    def __init__(self,
                 serial: Optional[str] = None,
                 transport: Optional[HIDTransport] = None,
                 timeout_ms: Optional[int] = None):
        """Create an unopened handle.

        Args:
            serial: Serial number of the device to open, or None for the first match
            transport: Transport to use (default: a new HidApiTransport on open)
            timeout_ms: Bound on each response read in milliseconds, None to block
        """
        self._serial = serial or None
        self._transport = transport
        self._timeout_ms = timeout_ms
        self._state = SessionState.UNOPENED

    @classmethod
    def first_available(cls,
                        transport: Optional[HIDTransport] = None,
                        timeout_ms: Optional[int] = None) -> YKUSH3:
        """Open the first YKUSH3 found on the system."""
        device = cls(transport=transport, timeout_ms=timeout_ms)
        device.open()
        return device

    @classmethod
    def with_serial(cls,
                    serial: str,
                    transport: Optional[HIDTransport] = None,
                    timeout_ms: Optional[int] = None) -> YKUSH3:
        """Open the YKUSH3 with the given serial number."""
        device = cls(serial=serial, transport=transport, timeout_ms=timeout_ms)
        device.open()
        return device

    # --- Lifecycle ---

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is SessionState.OPEN

    def open(self) -> None:
        """Open the transport connection.

        Raises:
            NotConnectedError: If the handle was already closed
            TransportError: If the device cannot be opened
        """
        if self._state is SessionState.OPEN:
            logger.warning("Already open")
            return
        if self._state is SessionState.CLOSED:
            raise NotConnectedError("Device handle has been closed")

        if self._transport is None:
            self._transport = HidApiTransport()

        self._transport.open(VENDOR_ID, PRODUCT_ID, self._serial)
        self._state = SessionState.OPEN
        logger.info(f"Opened YKUSH3 ({self._serial or 'first available'})")

    def close(self) -> None:
        """Close the connection and release the transport.

        Idempotent: closing a closed or never-opened handle is a no-op
        apart from making the handle permanently closed.

        Raises:
            TransportError: If the transport failed to close (the handle is closed anyway)
        """
        if self._state is SessionState.CLOSED:
            return

        was_open = self._state is SessionState.OPEN
        self._state = SessionState.CLOSED
        if was_open and self._transport is not None:
            self._transport.close()
            logger.info("Closed YKUSH3")

    def __enter__(self) -> YKUSH3:
        if self._state is not SessionState.OPEN:
            self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def get_serial(self) -> str:
        """Return the serial number of the connected device.

        Raises:
            NotConnectedError: If the handle is not open
            TransportError: If the serial cannot be read
        """
        transport = self._require_open()
        if self._serial is None:
            self._serial = transport.get_serial_number()
        return self._serial

    # --- Port operations ---

    def port_up(self, port: Port) -> None:
        """Turn on the specified port (Port.ALL for every port).

        Raises:
            InvalidPortError: If port is not a valid port
            NotConnectedError: If the handle is not open
            TransportError: On I/O failure
            ProtocolError: If the device did not acknowledge the command
        """
        self._actuate(CommandEncoder.raise_command(port))

    def port_down(self, port: Port) -> None:
        """Turn off the specified port (Port.ALL for every port)."""
        self._actuate(CommandEncoder.lower_command(port))

    def set_port_state(self, port: Port, state: Union[PortState, bool]) -> None:
        if state:
            self.port_up(port)
        else:
            self.port_down(port)

    def all_ports_up(self) -> None:
        self.port_up(Port.ALL)

    def all_ports_down(self) -> None:
        self.port_down(Port.ALL)

    def get_port_state(self, port: Port) -> PortState:
        """Return the current state of a single port.

        Raises:
            InvalidPortError: If port is Port.ALL or not a valid port
            NotConnectedError: If the handle is not open
            TransportError: On I/O failure
            ProtocolError: If the response is not a recognised state
        """
        command = CommandEncoder.query_command(port)
        response = self._exchange(command)
        return ResponseDecoder.decode_state(command, response)

    def get_all_ports_state(self) -> PortStates:
        """Query Port 1, Port 2 and Port 3, in that order.

        The first failure propagates; no partial snapshot is ever returned.
        """
        states = []
        for port in INDIVIDUAL_PORTS:
            try:
                states.append(self.get_port_state(port))
            except YkushError as e:
                logger.error(f"Failed to get state for {port}: {e}")
                raise
        return PortStates(*states)

    # Internal methods

    def _actuate(self, command: Command) -> None:
        response = self._exchange(command)
        ResponseDecoder.check_ack(command, response)

    def _exchange(self, command: Command) -> Response:
        """Write one command report and read one response report."""
        transport = self._require_open()
        report = command.to_report(REPORT_SIZE)

        logger.debug(f"-> {report[:2].hex()}")
        transport.write(report)
        data = transport.read(REPORT_SIZE, timeout_ms=self._timeout_ms)
        logger.debug(f"<- {bytes(data[:2]).hex()}")

        return Response.from_bytes(data)

    def _require_open(self) -> HIDTransport:
        if self._state is not SessionState.OPEN or self._transport is None:
            raise NotConnectedError(f"Device not connected (state: {self._state.value})")
        return self._transport
