"""
CRC-32 Implementation for the Broadcom NVRAM Block
==================================================

This module implements the CRC-32 variant that the Broadcom CFE boot loader
uses to protect the NVRAM block of a UFiber image. The boot loader rejects
an NVRAM block whose stored CRC does not match, so the convention below has
to be reproduced bit-for-bit.

Technical Details
-----------------
- Polynomial: 0x04C11DB7, processed reflected (table built from 0xEDB88320)
- Initial value: 0xFFFFFFFF
- Final XOR: none
- Byte order when stored: big-endian

This is the standard zlib/IEEE CRC-32 without the final inversion, so for
any input ``crc32(data) == zlib.crc32(data) ^ 0xFFFFFFFF``.

Iterative Formula
-----------------
For each byte bb of the input:

    crc = (crc >> 8) XOR TABLE[(crc XOR bb) & 0xFF]

Usage
-----
    from ufiber_nvram.nvram.checksum import crc32, crc_to_bytes

    checksum = crc32(b"123456789")  # Returns 0x340BC6D9
    slot = crc_to_bytes(checksum)   # b"\\x34\\x0b\\xc6\\xd9"
"""

from typing import Final

# =============================================================================
# CRC-32 Constants
# =============================================================================

# Reflected form of the IEEE 802.3 polynomial
CRC_POLYNOMIAL: Final[int] = 0xEDB88320

# Boot loader seeds the register with all ones and never inverts the result
CRC_INITIAL: Final[int] = 0xFFFFFFFF

# Mask for 32-bit values
CRC_MASK: Final[int] = 0xFFFFFFFF

# Width of the stored checksum in bytes
CRC_SIZE: Final[int] = 4


# =============================================================================
# Lookup Table Generation
# =============================================================================

def _generate_crc_table() -> tuple[int, ...]:
    """
    Generate the 256-entry CRC lookup table.

    Each entry is the register value after shifting a single byte through
    the reflected polynomial eight times.

    Returns:
        Tuple of 256 CRC values for each possible byte value.
    """
    table = []
    for byte_val in range(256):
        crc = byte_val
        for _ in range(8):
            if crc & 1:
                crc = (crc >> 1) ^ CRC_POLYNOMIAL
            else:
                crc >>= 1
        table.append(crc)
    return tuple(table)


# Pre-computed CRC lookup table - generated once at import time
CRC_TABLE: Final[tuple[int, ...]] = _generate_crc_table()


# =============================================================================
# CRC Calculation
# =============================================================================

def crc32(data: bytes, initial: int = CRC_INITIAL) -> int:
    """
    Calculate the NVRAM CRC-32 of a byte sequence.

    Args:
        data: Input bytes. Any length is accepted, including empty.
        initial: Initial register value. Default is 0xFFFFFFFF as used by
                 the boot loader. Passing a previous result continues the
                 calculation over a following chunk.

    Returns:
        32-bit CRC value (0x00000000 to 0xFFFFFFFF).

    Example:
        >>> hex(crc32(b""))
        '0xffffffff'
        >>> hex(crc32(b"123456789"))
        '0x340bc6d9'
    """
    crc = initial & CRC_MASK

    for byte in data:
        crc = (crc >> 8) ^ CRC_TABLE[(crc ^ byte) & 0xFF]

    return crc


# =============================================================================
# Utility Functions
# =============================================================================

def crc_to_bytes(crc: int) -> bytes:
    """
    Convert a CRC value to the 4-byte big-endian form stored in the image.

    Example:
        >>> crc_to_bytes(0x340BC6D9)
        b'4\\x0b\\xc6\\xd9'
    """
    return bytes([
        (crc >> 24) & 0xFF,
        (crc >> 16) & 0xFF,
        (crc >> 8) & 0xFF,
        crc & 0xFF,
    ])


def crc_from_bytes(data: bytes) -> int:
    """
    Convert big-endian bytes to a CRC value.

    Args:
        data: Four bytes in big-endian order. If more are provided, only
              the first four are used.

    Returns:
        32-bit CRC value.

    Raises:
        ValueError: If data is less than 4 bytes.
    """
    if len(data) < CRC_SIZE:
        raise ValueError(f"CRC requires {CRC_SIZE} bytes, got {len(data)}")
    return (data[0] << 24) | (data[1] << 16) | (data[2] << 8) | data[3]


def verify_crc(data: bytes, expected_crc: int) -> bool:
    """Return True if the CRC of data equals expected_crc."""
    return crc32(data) == expected_crc


# =============================================================================
# Reference Values for Testing
# =============================================================================

# Known CRC values, pinned once and checked by the test suite
REFERENCE_CRC_VALUES: Final[dict[str, int]] = {
    "empty": 0xFFFFFFFF,
    "check": 0x340BC6D9,         # b"123456789"
    "zeros_1024": 0x104A50D1,    # 1024 x 0x00
    "sequence_1024": 0x48F4B3D9, # bytes 0..255 repeated four times
}
