"""USB identifiers and wire sizes for the YKUSH3 device family."""

VENDOR_ID = 0x04D8
PRODUCT_ID = 0xF11B

REPORT_SIZE = 64  # bytes, both directions

STATUS_SUCCESS = 0x01
