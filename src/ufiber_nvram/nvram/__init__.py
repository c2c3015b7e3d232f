"""
NVRAM Block Handling for UFiber Images
======================================

This module provides support for reading and patching the Broadcom NVRAM
block stored in a UFiber firmware image (the ``/dev/mtdblock3`` dump).

This module provides:
- **NVRAM**: Parse, inspect, patch and re-serialize the block
- **Layout**: Field offsets, widths and region constants
- **Checksum utilities**: The boot loader's CRC-32 variant

Quick Start
-----------
Inspecting a dump:

    >>> from ufiber_nvram.nvram import NVRAM
    >>> nvram = NVRAM.from_file("fw.bin")
    >>> print(nvram)

Cloning a MAC address and setting the SLID:

    >>> nvram.set_base_mac_address("245A4C001122")
    >>> nvram.set_gpon_password("1234567890")
    >>> patched = nvram.finalize()
"""

# =============================================================================
# Public API Exports
# =============================================================================

# Layout definitions
from ufiber_nvram.nvram.layout import (
    NVRAM_OFFSET,
    NVRAM_LENGTH,
    NVRAM_CRC_OFFSET,
    NVRAM_CRC_LENGTH,
    NVRAM_MIN_LENGTH,
    MAC_LENGTH,
    GPON_VENDOR_ID_LENGTH,
    GPON_SERIAL_LENGTH,
    GPON_PASSWORD_MAX_LENGTH,
    FieldKind,
    NVRAMField,
    NVRAM_FIELDS,
    get_field,
)

# Checksum utilities
from ufiber_nvram.nvram.checksum import (
    CRC_INITIAL,
    CRC_TABLE,
    REFERENCE_CRC_VALUES,
    crc32,
    crc_to_bytes,
    crc_from_bytes,
    verify_crc,
)

# Record codec
from ufiber_nvram.nvram.record import (
    NVRAM,
    ascii_z,
    format_mac,
    hex_to_bytes,
    split_gpon_serial,
    parse_nvram,
    parse_nvram_file,
)

# =============================================================================
# Module-level __all__ for explicit exports
# =============================================================================

__all__ = [
    # Layout
    "NVRAM_OFFSET",
    "NVRAM_LENGTH",
    "NVRAM_CRC_OFFSET",
    "NVRAM_CRC_LENGTH",
    "NVRAM_MIN_LENGTH",
    "MAC_LENGTH",
    "GPON_VENDOR_ID_LENGTH",
    "GPON_SERIAL_LENGTH",
    "GPON_PASSWORD_MAX_LENGTH",
    "FieldKind",
    "NVRAMField",
    "NVRAM_FIELDS",
    "get_field",
    # Checksum
    "CRC_INITIAL",
    "CRC_TABLE",
    "REFERENCE_CRC_VALUES",
    "crc32",
    "crc_to_bytes",
    "crc_from_bytes",
    "verify_crc",
    # Record
    "NVRAM",
    "ascii_z",
    "format_mac",
    "hex_to_bytes",
    "split_gpon_serial",
    "parse_nvram",
    "parse_nvram_file",
]
