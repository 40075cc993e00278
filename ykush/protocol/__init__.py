"""Protocol layer for the YKUSH3 HID command set."""

from .encoder import (
    Command,
    CommandEncoder,
    Operation,
    RAISE_OPCODES,
    LOWER_OPCODES,
    QUERY_OPCODES,
)
from .decoder import Response, ResponseDecoder, OFF_CODES, ON_CODES, QUERY_ECHO_CODES

__all__ = [
    "Command",
    "CommandEncoder",
    "Operation",
    "RAISE_OPCODES",
    "LOWER_OPCODES",
    "QUERY_OPCODES",
    "Response",
    "ResponseDecoder",
    "OFF_CODES",
    "ON_CODES",
    "QUERY_ECHO_CODES",
]
