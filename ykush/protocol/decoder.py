"""Response decoder for the YKUSH3 HID protocol.

Validates acknowledgements and decodes port states from input reports.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from ..constants import STATUS_SUCCESS
from ..errors import ProtocolError
from ..models import Port, PortState
from .encoder import Command, LOWER_OPCODES, QUERY_OPCODES, RAISE_OPCODES


def _individual(table: Dict[Port, int]) -> frozenset:
    return frozenset(code for port, code in table.items() if port != Port.ALL)


# A state query answers with the opcode that would produce the current state
OFF_CODES = _individual(LOWER_OPCODES)
ON_CODES = _individual(RAISE_OPCODES)
# An echoed query opcode also reports an unpowered port
QUERY_ECHO_CODES = frozenset(QUERY_OPCODES.values())


@dataclass(frozen=True)
class Response:
    """A parsed input report.

    Attributes:
        status: Status byte (0x01 on success)
        payload: Echoed opcode for actuation, state code for queries
        raw: The complete report as read from the device
    """
    status: int
    payload: int
    raw: bytes

    @property
    def ok(self) -> bool:
        return self.status == STATUS_SUCCESS

    @classmethod
    def from_bytes(cls, data: bytes) -> Response:
        """Parse a report read from the device.

        Raises:
            ProtocolError: If the report holds fewer than two bytes
        """
        raw = bytes(data)
        if len(raw) < 2:
            raise ProtocolError(
                f"Short response: expected at least 2 bytes, got {len(raw)}",
                status=raw[0] if raw else None,
            )
        return cls(status=raw[0], payload=raw[1], raw=raw)


class ResponseDecoder:
    """Interprets responses according to the command that produced them."""

    @staticmethod
    def check_ack(command: Command, response: Response) -> None:
        """Validate the acknowledgement of a raise/lower command.

        The device must report success and echo the opcode it executed.

        Raises:
            ProtocolError: With both observed bytes, on any mismatch
        """
        if not response.ok or response.payload != command.opcode:
            raise ProtocolError(
                f"Unexpected response: status=0x{response.status:02x}, "
                f"response=0x{response.payload:02x} (sent 0x{command.opcode:02x})",
                status=response.status,
                payload=response.payload,
            )

    @staticmethod
    def decode_state(command: Command, response: Response) -> PortState:
        """Decode the answer to a state query.

        An echo of the query opcode means OFF, but only for the query that was sent.

        Returns:
            PortState.ON or PortState.OFF

        Raises:
            ProtocolError: If the status is not success or the state code is unknown
        """
        if not response.ok:
            raise ProtocolError(
                f"Command failed: status=0x{response.status:02x}",
                status=response.status,
                payload=response.payload,
            )
        if response.payload in OFF_CODES or (
            response.payload in QUERY_ECHO_CODES and response.payload == command.opcode
        ):
            return PortState.OFF
        if response.payload in ON_CODES:
            return PortState.ON
        raise ProtocolError(
            f"Unexpected state response: 0x{response.payload:02x}",
            status=response.status,
            payload=response.payload,
        )
