"""
NVRAM Block Layout
==================

This module describes the fixed layout of the Broadcom NVRAM block found
in UFiber firmware images. Every offset is relative to the start of the
NVRAM region, which by default begins 0x580 bytes into the image dump
and spans 0x400 bytes.

Block Structure Overview
------------------------
    0x000  Version                 (u32)
    0x004  Boot line               (0x100 bytes, NUL-padded ASCII)
    0x104  Board id                (0x10 bytes, NUL-padded ASCII)
    0x114  Main thread             (u32)
    0x118  PSI size                (u32)
    0x11C  Number of MAC addresses (u32)
    0x120  Base MAC address        (6 bytes)
    0x128  Old checksum            (u32)
    0x12C  GPON vendor id          (4 bytes)
    0x130  GPON serial number      (9 bytes)
    0x139  GPON password (SLID)    (11 bytes, NUL-padded UTF-8)
    0x144  WPS device PIN          (8 bytes)
    0x14C  WLAN parameters         (0x100 bytes)
    0x24C  Syslog size             (u32)
    0x250  NAND partition offset   (u32, KB)
    0x264  NAND partition size     (u32, KB)
    0x278  Voice board id          (0x10 bytes)
    0x288  AFE id                  (8 bytes)
    0x3FC  CRC-32                  (u32)

All integers are big-endian. Gaps between fields are preserved untouched.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Final


# =============================================================================
# Region Constants
# =============================================================================

# Default location of the NVRAM block inside a mtdblock3 dump
NVRAM_OFFSET: Final[int] = 0x580
NVRAM_LENGTH: Final[int] = 0x400

# CRC slot, relative to the region base
NVRAM_CRC_OFFSET: Final[int] = 0x3FC
NVRAM_CRC_LENGTH: Final[int] = 4

# Smallest region that still contains the CRC slot
NVRAM_MIN_LENGTH: Final[int] = NVRAM_CRC_OFFSET + NVRAM_CRC_LENGTH


# =============================================================================
# Writable Slot Widths
# =============================================================================

MAC_LENGTH: Final[int] = 6
GPON_VENDOR_ID_LENGTH: Final[int] = 4
GPON_SERIAL_LENGTH: Final[int] = 8
GPON_PASSWORD_MAX_LENGTH: Final[int] = 10


# =============================================================================
# Field Definitions
# =============================================================================

class FieldKind(Enum):
    """How the bytes of a field are interpreted."""
    UINT32 = "u32"    # Big-endian unsigned 32-bit integer
    ASCII = "ascii"   # NUL-padded ASCII text
    BYTES = "bytes"   # Opaque raw bytes
    UTF8 = "utf8"     # NUL-padded UTF-8 text


@dataclass(frozen=True)
class NVRAMField:
    """
    One field of the NVRAM block.

    Attributes:
        name: Attribute name used by the NVRAM class
        offset: Offset relative to the region base
        length: Width in bytes
        kind: How the bytes are interpreted
        description: Human-readable label
    """
    name: str
    offset: int
    length: int
    kind: FieldKind
    description: str

    @property
    def end(self) -> int:
        """Offset one past the last byte of the field."""
        return self.offset + self.length


NVRAM_FIELDS: Final[tuple[NVRAMField, ...]] = (
    NVRAMField("version", 0x000, 4, FieldKind.UINT32, "NVRAM version"),
    NVRAMField("boot_line", 0x004, 0x100, FieldKind.ASCII, "Boot parameters"),
    NVRAMField("board_id", 0x104, 0x10, FieldKind.ASCII, "Board id"),
    NVRAMField("main_thread", 0x114, 4, FieldKind.UINT32, "Main thread number"),
    NVRAMField("psi_size", 0x118, 4, FieldKind.UINT32, "PSI size"),
    NVRAMField("num_mac_addr", 0x11C, 4, FieldKind.UINT32, "Total MAC addresses"),
    NVRAMField("base_mac_addr", 0x120, MAC_LENGTH, FieldKind.BYTES, "Base MAC address"),
    NVRAMField("old_checksum", 0x128, 4, FieldKind.UINT32, "Old checksum"),
    NVRAMField("gpon_vendor_id", 0x12C, GPON_VENDOR_ID_LENGTH, FieldKind.BYTES, "GPON vendor id"),
    NVRAMField("gpon_serial_number", 0x130, 9, FieldKind.BYTES, "GPON serial number"),
    NVRAMField("gpon_password", 0x139, 11, FieldKind.UTF8, "GPON SLID (password)"),
    NVRAMField("wps_dev_pin", 0x144, 8, FieldKind.BYTES, "WPS device PIN"),
    NVRAMField("wlan_params", 0x14C, 0x100, FieldKind.BYTES, "WLAN parameters"),
    NVRAMField("syslog_size", 0x24C, 4, FieldKind.UINT32, "Syslog size"),
    NVRAMField("nand_part_ofs_kb", 0x250, 4, FieldKind.UINT32, "NAND partition offset (KB)"),
    NVRAMField("nand_part_size_kb", 0x264, 4, FieldKind.UINT32, "NAND partition size (KB)"),
    NVRAMField("voice_board_id", 0x278, 0x10, FieldKind.BYTES, "Voice board id"),
    NVRAMField("afe_id", 0x288, 8, FieldKind.BYTES, "AFE id"),
    NVRAMField("checksum", NVRAM_CRC_OFFSET, NVRAM_CRC_LENGTH, FieldKind.UINT32, "Checksum"),
)

_FIELDS_BY_NAME: Final[dict[str, NVRAMField]] = {f.name: f for f in NVRAM_FIELDS}


def get_field(name: str) -> NVRAMField:
    """
    Look up a field definition by attribute name.

    Raises:
        KeyError: If no field has that name
    """
    try:
        return _FIELDS_BY_NAME[name]
    except KeyError:
        raise KeyError(f"Unknown NVRAM field: {name!r}") from None
