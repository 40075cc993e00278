"""Unit tests for the YKUSH3 device session.

Tests run against StubTransport, an in-memory YKUSH3 that remembers
port states and records every report written to it.
"""
import unittest
from unittest.mock import MagicMock, patch

from ykush.constants import PRODUCT_ID, REPORT_SIZE, VENDOR_ID
from ykush.device import SessionState, YKUSH3
from ykush.errors import (
    InvalidPortError,
    NotConnectedError,
    ProtocolError,
    TransportError,
)
from ykush.models import Port, PortState, PortStates
from ykush.transport.base import HIDTransport


class StubTransport(HIDTransport):
    """Simulated YKUSH3 firmware behind the transport interface."""

    def __init__(self, serial="YK30001"):
        self.serial = serial
        self.opened_with = None
        self.open_count = 0
        self.close_count = 0
        self.writes = []
        self.read_timeouts = []
        self.states = {1: False, 2: False, 3: False}
        self.fail_on_query = None  # port number whose query fails
        self.forced_response = None
        self._pending = None
        self._open = False

    def open(self, vendor_id, product_id, serial=None):
        self.open_count += 1
        self.opened_with = (vendor_id, product_id, serial)
        self._open = True

    def close(self):
        self.close_count += 1
        self._open = False

    def is_open(self):
        return self._open

    def write(self, report):
        self.writes.append(bytes(report))
        self._pending = self._respond(report[0])
        return len(report)

    def read(self, size, timeout_ms=None):
        self.read_timeouts.append(timeout_ms)
        if self._pending is None:
            raise TransportError("Failed to read response: nothing pending")
        data, self._pending = self._pending, None
        return data

    def get_serial_number(self):
        return self.serial

    def _respond(self, opcode):
        if self.forced_response is not None:
            status, payload = self.forced_response
            return self._report(status, payload)

        high, low = opcode >> 4, opcode & 0x0F
        ports = [1, 2, 3] if low == 0x0A else [low]
        if high in (0x0, 0x1):
            for port in ports:
                self.states[port] = high == 0x1
            return self._report(0x01, opcode)
        if high == 0x2:
            if self.fail_on_query == low:
                return self._report(0x00, 0x00)
            on = self.states[low]
            return self._report(0x01, (0x10 if on else 0x00) | low)
        return self._report(0x00, 0x00)

    @staticmethod
    def _report(status, payload):
        data = bytearray(REPORT_SIZE)
        data[0] = status
        data[1] = payload
        return bytes(data)


class TestYKUSH3Lifecycle(unittest.TestCase):
    """Tests for open/close semantics."""

    def test_init_is_unopened(self):
        transport = StubTransport()
        ykush = YKUSH3(transport=transport)

        self.assertIs(ykush.state, SessionState.UNOPENED)
        self.assertFalse(ykush.is_open)
        self.assertEqual(transport.open_count, 0)

    def test_first_available(self):
        transport = StubTransport()
        ykush = YKUSH3.first_available(transport=transport)

        self.assertTrue(ykush.is_open)
        self.assertEqual(transport.opened_with, (VENDOR_ID, PRODUCT_ID, None))

    def test_with_serial(self):
        transport = StubTransport()
        ykush = YKUSH3.with_serial("YK30042", transport=transport)

        self.assertTrue(ykush.is_open)
        self.assertEqual(transport.opened_with, (0x04D8, 0xF11B, "YK30042"))

    def test_open_twice_is_noop(self):
        transport = StubTransport()
        ykush = YKUSH3.first_available(transport=transport)
        ykush.open()

        self.assertEqual(transport.open_count, 1)

    def test_open_failure_stays_unopened(self):
        transport = StubTransport()
        transport.open = MagicMock(side_effect=TransportError("Failed to open device"))
        ykush = YKUSH3(transport=transport)

        with self.assertRaises(TransportError):
            ykush.open()
        self.assertIs(ykush.state, SessionState.UNOPENED)
        with self.assertRaises(NotConnectedError):
            ykush.port_up(Port.PORT1)

    def test_close(self):
        transport = StubTransport()
        ykush = YKUSH3.first_available(transport=transport)
        ykush.close()

        self.assertIs(ykush.state, SessionState.CLOSED)
        self.assertEqual(transport.close_count, 1)

    def test_close_idempotent(self):
        transport = StubTransport()
        ykush = YKUSH3.first_available(transport=transport)
        ykush.close()
        ykush.close()

        self.assertEqual(transport.close_count, 1)
        with self.assertRaises(NotConnectedError):
            ykush.port_up(Port.PORT1)

    def test_close_unopened(self):
        transport = StubTransport()
        ykush = YKUSH3(transport=transport)
        ykush.close()

        self.assertIs(ykush.state, SessionState.CLOSED)
        self.assertEqual(transport.close_count, 0)

    def test_close_transport_error_still_closes(self):
        transport = StubTransport()
        transport.close = MagicMock(side_effect=TransportError("Failed to close device"))
        ykush = YKUSH3.first_available(transport=transport)

        with self.assertRaises(TransportError):
            ykush.close()
        self.assertIs(ykush.state, SessionState.CLOSED)
        ykush.close()
        transport.close.assert_called_once()

    def test_reopen_after_close_rejected(self):
        ykush = YKUSH3.first_available(transport=StubTransport())
        ykush.close()

        with self.assertRaises(NotConnectedError):
            ykush.open()

    def test_context_manager(self):
        transport = StubTransport()
        with YKUSH3(transport=transport) as ykush:
            self.assertTrue(ykush.is_open)
            ykush.port_up(Port.PORT2)

        self.assertIs(ykush.state, SessionState.CLOSED)
        self.assertEqual(transport.close_count, 1)

    @patch('ykush.device.HidApiTransport')
    def test_default_transport(self, mock_transport_class):
        ykush = YKUSH3.first_available()

        mock_transport_class.assert_called_once_with()
        mock_transport_class.return_value.open.assert_called_once_with(VENDOR_ID, PRODUCT_ID, None)
        self.assertTrue(ykush.is_open)


class TestYKUSH3NotConnected(unittest.TestCase):
    """Every command on an unopened or closed handle fails without I/O."""

    def _calls(self, ykush):
        return [
            lambda: ykush.port_up(Port.PORT1),
            lambda: ykush.port_down(Port.PORT1),
            lambda: ykush.set_port_state(Port.PORT2, PortState.ON),
            lambda: ykush.all_ports_up(),
            lambda: ykush.all_ports_down(),
            lambda: ykush.get_port_state(Port.PORT3),
            lambda: ykush.get_all_ports_state(),
            lambda: ykush.get_serial(),
        ]

    def test_unopened(self):
        transport = StubTransport()
        ykush = YKUSH3(transport=transport)
        for call in self._calls(ykush):
            with self.assertRaises(NotConnectedError):
                call()
        self.assertEqual(transport.writes, [])

    def test_closed(self):
        transport = StubTransport()
        ykush = YKUSH3.first_available(transport=transport)
        ykush.close()
        for call in self._calls(ykush):
            with self.assertRaises(NotConnectedError):
                call()
        self.assertEqual(transport.writes, [])


class TestYKUSH3Commands(unittest.TestCase):
    """Tests for port operations."""

    def setUp(self):
        self.transport = StubTransport()
        self.ykush = YKUSH3.first_available(transport=self.transport)

    def test_port_up_report(self):
        self.ykush.port_up(Port.PORT1)

        report = self.transport.writes[-1]
        self.assertEqual(len(report), 64)
        self.assertEqual(report[:2], b"\x11\x11")
        self.assertEqual(report[2:], bytes(62))

    def test_port_down_report(self):
        self.ykush.port_down(Port.PORT3)
        self.assertEqual(self.transport.writes[-1][:2], b"\x03\x03")

    def test_all_ports(self):
        self.ykush.all_ports_up()
        self.assertEqual(self.transport.writes[-1][:2], b"\x1a\x1a")
        self.assertEqual(self.transport.states, {1: True, 2: True, 3: True})

        self.ykush.all_ports_down()
        self.assertEqual(self.transport.writes[-1][:2], b"\x0a\x0a")
        self.assertEqual(self.transport.states, {1: False, 2: False, 3: False})

    def test_raise_then_query(self):
        self.ykush.port_up(Port.PORT1)
        self.assertIs(self.ykush.get_port_state(Port.PORT1), PortState.ON)

    def test_lower_then_query(self):
        self.ykush.port_up(Port.PORT1)
        self.ykush.port_down(Port.PORT1)
        self.assertIs(self.ykush.get_port_state(Port.PORT1), PortState.OFF)

    def test_query_report(self):
        self.ykush.get_port_state(Port.PORT2)
        self.assertEqual(self.transport.writes[-1][:2], b"\x22\x22")

    def test_set_port_state_delegates(self):
        with patch.object(self.ykush, 'port_up') as mock_up, \
                patch.object(self.ykush, 'port_down') as mock_down:
            self.ykush.set_port_state(Port.PORT2, PortState.ON)
            self.ykush.set_port_state(Port.PORT3, False)

        mock_up.assert_called_once_with(Port.PORT2)
        mock_down.assert_called_once_with(Port.PORT3)

    def test_set_port_state_accepts_bool(self):
        self.ykush.set_port_state(Port.PORT2, True)
        self.assertTrue(self.transport.states[2])

    def test_query_all_sentinel_no_io(self):
        with self.assertRaises(InvalidPortError):
            self.ykush.get_port_state(Port.ALL)
        self.assertEqual(self.transport.writes, [])

    def test_invalid_port_no_io(self):
        for call in (self.ykush.port_up, self.ykush.port_down, self.ykush.get_port_state):
            with self.assertRaises(InvalidPortError):
                call(5)
        self.assertEqual(self.transport.writes, [])

    def test_failure_status_is_protocol_error(self):
        self.transport.forced_response = (0x00, 0x11)
        with self.assertRaises(ProtocolError) as ctx:
            self.ykush.port_up(Port.PORT1)
        self.assertEqual(ctx.exception.status, 0x00)
        self.assertEqual(ctx.exception.payload, 0x11)

    def test_wrong_echo_is_protocol_error(self):
        self.transport.forced_response = (0x01, 0x12)
        with self.assertRaises(ProtocolError):
            self.ykush.port_up(Port.PORT1)

    def test_unknown_state_is_protocol_error(self):
        self.transport.forced_response = (0x01, 0x7F)
        with self.assertRaises(ProtocolError):
            self.ykush.get_port_state(Port.PORT1)

    def test_forced_state_responses(self):
        self.transport.forced_response = (0x01, 0x21)
        self.assertIs(self.ykush.get_port_state(Port.PORT1), PortState.OFF)
        self.transport.forced_response = (0x01, 0x11)
        self.assertIs(self.ykush.get_port_state(Port.PORT1), PortState.ON)

    def test_echo_of_other_query_is_protocol_error(self):
        self.transport.forced_response = (0x01, 0x23)
        with self.assertRaises(ProtocolError) as ctx:
            self.ykush.get_port_state(Port.PORT1)
        self.assertEqual(ctx.exception.payload, 0x23)

        self.assertIs(self.ykush.get_port_state(Port.PORT3), PortState.OFF)

    def test_transport_error_propagates(self):
        self.transport.write = MagicMock(side_effect=TransportError("Failed to send command"))
        with self.assertRaises(TransportError):
            self.ykush.port_down(Port.PORT2)

    def test_short_read_is_protocol_error(self):
        self.transport.read = MagicMock(return_value=b"\x01")
        with self.assertRaises(ProtocolError):
            self.ykush.port_up(Port.PORT1)

    def test_blocking_read_by_default(self):
        self.ykush.port_up(Port.PORT1)
        self.assertEqual(self.transport.read_timeouts, [None])

    def test_timeout_passed_to_transport(self):
        transport = StubTransport()
        ykush = YKUSH3.first_available(transport=transport, timeout_ms=250)
        ykush.port_up(Port.PORT1)
        self.assertEqual(transport.read_timeouts, [250])


class TestYKUSH3AllPortsState(unittest.TestCase):
    """Tests for the bulk state query."""

    def setUp(self):
        self.transport = StubTransport()
        self.ykush = YKUSH3.first_available(transport=self.transport)

    def test_snapshot(self):
        self.transport.states = {1: True, 2: False, 3: True}
        states = self.ykush.get_all_ports_state()

        self.assertEqual(states, PortStates(PortState.ON, PortState.OFF, PortState.ON))

    def test_fixed_query_order(self):
        self.ykush.get_all_ports_state()

        opcodes = [report[0] for report in self.transport.writes]
        self.assertEqual(opcodes, [0x21, 0x22, 0x23])

    def test_failure_discards_partial_results(self):
        self.transport.fail_on_query = 2
        result = None
        with self.assertRaises(ProtocolError):
            result = self.ykush.get_all_ports_state()

        self.assertIsNone(result)
        # Port 3 is never queried after Port 2 fails
        opcodes = [report[0] for report in self.transport.writes]
        self.assertEqual(opcodes, [0x21, 0x22])

    def test_failure_logs_failing_port(self):
        self.transport.fail_on_query = 2
        with self.assertLogs('ykush.device', level='ERROR') as logs:
            with self.assertRaises(ProtocolError):
                self.ykush.get_all_ports_state()

        self.assertEqual(len(logs.records), 1)
        self.assertIn("Failed to get state for Port 2", logs.output[0])

    def test_transport_failure_type_unchanged(self):
        self.transport.read = MagicMock(side_effect=TransportError("Failed to read response"))
        with self.assertLogs('ykush.device', level='ERROR') as logs:
            with self.assertRaises(TransportError):
                self.ykush.get_all_ports_state()

        self.assertIn("Port 1", logs.output[0])


class TestYKUSH3Serial(unittest.TestCase):
    """Tests for get_serial."""

    def test_serial_from_open(self):
        transport = StubTransport(serial="OTHER")
        ykush = YKUSH3.with_serial("YK30042", transport=transport)
        self.assertEqual(ykush.get_serial(), "YK30042")

    def test_serial_read_once_and_cached(self):
        transport = StubTransport(serial="YK30001")
        transport.get_serial_number = MagicMock(return_value="YK30001")
        ykush = YKUSH3.first_available(transport=transport)

        self.assertEqual(ykush.get_serial(), "YK30001")
        self.assertEqual(ykush.get_serial(), "YK30001")
        transport.get_serial_number.assert_called_once()


if __name__ == '__main__':
    unittest.main()
