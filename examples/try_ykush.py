#!/usr/bin/env python3
"""
Interactive YKUSH3 Test Script.

This script demonstrates the high-level YKUSH3 API.
Run it to list connected switches, then power-cycle each port of the
first one and print the port states along the way.
"""

import sys
import time
import logging
from pathlib import Path

# Add SDK to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from ykush import YKUSH3, Port, PortState, YkushError, list_devices

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)


def print_states(ykush: YKUSH3) -> None:
    states = ykush.get_all_ports_state()
    print("  " + " | ".join(f"{port}: {state}" for port, state in states.items()))


def main():
    print("Looking for YKUSH3 devices...")
    devices = list_devices()
    if not devices:
        print("No YKUSH3 found! Is it plugged in?")
        return

    for idx, info in enumerate(devices, 1):
        print(f"  #{idx}: serial={info.serial_number} product={info.product}")

    try:
        ykush = YKUSH3.first_available(timeout_ms=1000)
    except YkushError as e:
        print(f"Failed to open device: {e}")
        return

    try:
        print(f"\nConnected to {ykush.get_serial()}")
        print_states(ykush)

        for port in (Port.PORT1, Port.PORT2, Port.PORT3):
            print(f"\nPower-cycling {port}...")
            ykush.set_port_state(port, PortState.OFF)
            print_states(ykush)
            time.sleep(1.0)
            ykush.set_port_state(port, PortState.ON)
            print_states(ykush)

        print("\nAll ports up.")
        ykush.all_ports_up()
        print_states(ykush)

    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    except YkushError as e:
        print(f"\nDevice error: {e}")
    finally:
        print("\nClosing...")
        ykush.close()
        print("Done.")

if __name__ == "__main__":
    main()
