"""Command encoder for the YKUSH3 HID protocol.

Maps (operation, port) pairs to opcode bytes and builds output reports.
Pure functions with no side effects.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict

from ..constants import REPORT_SIZE
from ..errors import InvalidPortError
from ..models import Port


class Operation(Enum):
    """Logical switch operation."""
    RAISE = "raise"
    LOWER = "lower"
    QUERY_STATE = "query_state"


RAISE_OPCODES: Dict[Port, int] = {
    Port.PORT1: 0x11,
    Port.PORT2: 0x12,
    Port.PORT3: 0x13,
    Port.ALL: 0x1A,
}

LOWER_OPCODES: Dict[Port, int] = {
    Port.PORT1: 0x01,
    Port.PORT2: 0x02,
    Port.PORT3: 0x03,
    Port.ALL: 0x0A,
}

# No query opcode exists for Port.ALL
QUERY_OPCODES: Dict[Port, int] = {
    Port.PORT1: 0x21,
    Port.PORT2: 0x22,
    Port.PORT3: 0x23,
}

_OPCODE_TABLES: Dict[Operation, Dict[Port, int]] = {
    Operation.RAISE: RAISE_OPCODES,
    Operation.LOWER: LOWER_OPCODES,
    Operation.QUERY_STATE: QUERY_OPCODES,
}


@dataclass(frozen=True)
class Command:
    """A single device command.

    Attributes:
        opcode: Operation code (byte 0 of the report)
        control: Control byte (byte 1), echoed back by the device
    """
    opcode: int
    control: int

    def to_report(self, size: int = REPORT_SIZE) -> bytes:
        """Build a zero-padded output report of the given size."""
        if size < 2:
            raise ValueError(f"Report size must be at least 2 bytes, got {size}")
        report = bytearray(size)
        report[0] = self.opcode
        report[1] = self.control
        return bytes(report)


class CommandEncoder:
    """Encoder for the YKUSH3 command set.

    Opcode layout:
    - 0x1N raise (power on) port N, 0x1A all ports
    - 0x0N lower (power off) port N, 0x0A all ports
    - 0x2N query state of port N
    """

    @staticmethod
    def encode(operation: Operation, port: Port) -> Command:
        """Encode an operation on a port into a command.

        Args:
            operation: Operation to perform
            port: Target port (Port.ALL is not valid for QUERY_STATE)

        Returns:
            Command whose control byte equals its opcode

        Raises:
            InvalidPortError: If the port is unknown or not valid for the operation

        Examples:
            >>> CommandEncoder.encode(Operation.RAISE, Port.PORT2)
            Command(opcode=18, control=18)
        """
        table = _OPCODE_TABLES[operation]
        opcode = table.get(CommandEncoder._coerce_port(port))
        if opcode is None:
            raise InvalidPortError(f"Invalid port for {operation.value}: {port}")
        return Command(opcode=opcode, control=opcode)

    @staticmethod
    def raise_command(port: Port) -> Command:
        return CommandEncoder.encode(Operation.RAISE, port)

    @staticmethod
    def lower_command(port: Port) -> Command:
        return CommandEncoder.encode(Operation.LOWER, port)

    @staticmethod
    def query_command(port: Port) -> Command:
        return CommandEncoder.encode(Operation.QUERY_STATE, port)

    @staticmethod
    def _coerce_port(port) -> Port:
        """Convert a raw value to Port, rejecting anything that is not a member."""
        # bool is an int subclass; True must not silently mean Port 1
        if isinstance(port, bool) or not isinstance(port, int):
            raise InvalidPortError(f"Invalid port: {port!r}")
        try:
            return Port(port)
        except ValueError:
            raise InvalidPortError(f"Invalid port: {port}") from None
