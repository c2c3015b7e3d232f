"""
UFiber NVRAM - Configuration Patcher for UFiber GPON Devices
=============================================================

This package reads and patches the Broadcom NVRAM block of UFiber firmware
images. The NVRAM block holds the device identity used on the GPON link:
base MAC address, GPON vendor id and serial number, and the SLID (PLOAM
password). Changing these lets a UFiber device replace an ISP-supplied ONT.

Main Components
---------------
- **nvram**: NVRAM block codec
    Parses the block, verifies and regenerates its CRC-32, applies patches

- **cli**: Command-line tool (ufnvram)
    Shows, validates and patches image dumps on disk

Quick Start
-----------
Patch an image dump:
    >>> from ufiber_nvram import NVRAM
    >>> nvram = NVRAM.from_file("fw.bin")
    >>> nvram.set_gpon_vendor_id("HWTC")
    >>> nvram.set_gpon_serial_number("01234567")
    >>> patched = nvram.finalize()

Or use the command-line tool:
    $ ufnvram info fw.bin
    $ ufnvram patch fw.bin -o patched.bin --vendor HWTC --serial 01234567

Obtaining the Image
-------------------
The image is the content of ``/dev/mtdblock3`` on the device:
    $ ssh ubnt@192.168.1.1 "cat /dev/mtdblock3 > /tmp/fw.bin"
    $ scp ubnt@192.168.1.1:/tmp/fw.bin .

and is written back with ``dd if=/tmp/patched.bin of=/dev/mtdblock3``.
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from ufiber_nvram.errors import (
    NVRAMError,
    IntegrityError,
    FieldError,
    RangeError,
    FormatError,
    NullError,
)

from ufiber_nvram.nvram import (
    NVRAM,
    NVRAMField,
    NVRAM_FIELDS,
    NVRAM_OFFSET,
    NVRAM_LENGTH,
    crc32,
    split_gpon_serial,
    parse_nvram,
    parse_nvram_file,
)

__all__ = [
    # Version info
    "__version__",
    # Exception hierarchy
    "NVRAMError",
    "IntegrityError",
    "FieldError",
    "RangeError",
    "FormatError",
    "NullError",
    # NVRAM codec
    "NVRAM",
    "NVRAMField",
    "NVRAM_FIELDS",
    "NVRAM_OFFSET",
    "NVRAM_LENGTH",
    "crc32",
    "split_gpon_serial",
    "parse_nvram",
    "parse_nvram_file",
]
