from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from .constants import PRODUCT_ID, VENDOR_ID
from .models import DeviceInfo
from .transport.usb_hid import enumerate_hid

logger = logging.getLogger(__name__)


def _descriptor_to_info(descriptor: Dict[str, Any]) -> DeviceInfo:
    """Convert a hidapi enumeration dict to DeviceInfo."""
    return DeviceInfo(
        path=descriptor.get("path") or b"",
        vendor_id=descriptor.get("vendor_id", 0),
        product_id=descriptor.get("product_id", 0),
        serial_number=descriptor.get("serial_number") or None,
        manufacturer=descriptor.get("manufacturer_string") or None,
        product=descriptor.get("product_string") or None,
        release_number=descriptor.get("release_number", 0),
        interface_number=descriptor.get("interface_number", -1),
    )


def is_matching_device(
    info: DeviceInfo,
    *,
    product_substring: Optional[str] = None,
    serial_prefix: Optional[str] = None,
) -> bool:
    """
    Decide whether a given DeviceInfo describes the device we want.

    All checks are AND-combined; if a criterion is None, it is ignored.

    Args:
        product_substring: Case-insensitive substring expected in product string.
        serial_prefix: Expected prefix of the serial number.
    """
    if product_substring is not None:
        if not info.product:
            return False
        if product_substring.lower() not in info.product.lower():
            return False

    if serial_prefix is not None:
        if not info.serial_number:
            return False
        if not info.serial_number.startswith(serial_prefix):
            return False

    return True


def find_devices(
    *,
    matcher: Optional[Callable[[DeviceInfo], bool]] = None,
    product_substring: Optional[str] = None,
    serial_prefix: Optional[str] = None,
    vendor_id: int = VENDOR_ID,
    product_id: int = PRODUCT_ID,
) -> List[DeviceInfo]:
    """
    Find connected YKUSH3 devices.

    Either pass a custom `matcher(info) -> bool` or use the built-in
    criteria (product_substring / serial_prefix).

    Returns:
        List of DeviceInfo objects in enumeration order.

    Raises:
        TransportError: If HID enumeration fails.
    """
    results: List[DeviceInfo] = []

    for descriptor in enumerate_hid(vendor_id, product_id):
        info = _descriptor_to_info(descriptor)
        if matcher is not None:
            if matcher(info):
                results.append(info)
        elif is_matching_device(
            info,
            product_substring=product_substring,
            serial_prefix=serial_prefix,
        ):
            results.append(info)

    logger.debug("Found %d matching device(s): %s", len(results), results)
    return results


def list_devices() -> List[DeviceInfo]:
    """Return every connected YKUSH3."""
    return find_devices()
