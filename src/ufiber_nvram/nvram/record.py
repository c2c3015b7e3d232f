"""
NVRAM Record Codec
==================

This module provides the NVRAM class, which parses the Broadcom NVRAM block
embedded in a UFiber image, exposes its fields, applies the supported
patches and re-serializes the image with a fresh CRC.

Lifecycle
---------
1. Construction copies the caller's bytes, reads every field and verifies
   the stored CRC. A mismatch raises IntegrityError and no object is
   returned.
2. Zero or more setters update the working copy. Each setter validates its
   input completely before writing, so a failed call changes nothing.
3. finalize() writes the recomputed CRC and returns the complete image,
   ready to be written back to the device. It may be called again after
   further changes.

Usage Examples
--------------
Inspecting a dump:
    >>> from ufiber_nvram.nvram import NVRAM
    >>> nvram = NVRAM.from_file("fw-17102026-101500.bin")
    >>> print(nvram)

Patching the GPON identity:
    >>> nvram.set_gpon_vendor_id("HWTC")
    >>> nvram.set_gpon_serial_number("01234567")
    >>> nvram.set_gpon_password("1234567890")
    >>> patched = nvram.finalize()

Terminator Quirk
----------------
The vendor id and serial number setters write one 0x00 byte directly after
the value. For the vendor id this byte is the first byte of the serial
number slot. The device firmware expects this layout, so it is kept as is.
"""

import hashlib
from pathlib import Path
from typing import Optional, Union
import logging
import string

from ufiber_nvram.errors import (
    FormatError,
    IntegrityError,
    NullError,
    RangeError,
)
from ufiber_nvram.nvram.checksum import crc32, crc_from_bytes, crc_to_bytes
from ufiber_nvram.nvram.layout import (
    GPON_PASSWORD_MAX_LENGTH,
    GPON_SERIAL_LENGTH,
    GPON_VENDOR_ID_LENGTH,
    MAC_LENGTH,
    NVRAM_CRC_LENGTH,
    NVRAM_CRC_OFFSET,
    NVRAM_FIELDS,
    NVRAM_LENGTH,
    NVRAM_MIN_LENGTH,
    NVRAM_OFFSET,
    FieldKind,
    NVRAMField,
    get_field,
)

# Logger for this module
logger = logging.getLogger(__name__)

# Bytes-like values accepted by the setters
BytesLike = Union[bytes, bytearray, memoryview]

# Separators tolerated in hex text (AA:BB:CC..., 41-4C-43-4C...)
_HEX_SEPARATORS = ":-"

# Hex form of a full GPON serial: 4 vendor bytes + 4 serial bytes
_HEX_SERIAL_DIGITS = 16


# =============================================================================
# Text Helpers
# =============================================================================

def ascii_z(data: bytes) -> str:
    """
    Decode a NUL-terminated ASCII slot.

    Reads up to the first NUL byte (or the end of the slot). Bytes outside
    the ASCII range are replaced rather than rejected, since the summary
    is diagnostic only.
    """
    return data.split(b"\x00", 1)[0].decode("ascii", errors="replace")


def format_mac(mac: bytes) -> str:
    """Format raw MAC bytes as colon-separated upper-case hex."""
    return ":".join(f"{b:02X}" for b in mac)


def hex_to_bytes(text: str, field: str) -> bytes:
    """
    Decode a hex string into bytes.

    Digits are case-insensitive; colon and dash separators are ignored.

    Args:
        text: The hex string
        field: Field name used in error messages

    Raises:
        NullError: If text is None
        FormatError: If there are no digits, the digit count is odd or a
            non-hex digit is found
    """
    if text is None:
        raise NullError(field)

    digits = "".join(c for c in text if c not in _HEX_SEPARATORS)

    if not digits:
        raise FormatError(field, f"no hex digits in {text!r}")

    if len(digits) % 2 != 0:
        raise FormatError(field, f"hex value must have an even number of digits: {text!r}")

    for c in digits:
        if c not in string.hexdigits:
            raise FormatError(field, f"invalid hex digit {c!r} in {text!r}")

    return bytes.fromhex(digits)


def split_gpon_serial(
    serial: str,
    vendor: Optional[Union[str, BytesLike]] = None,
) -> tuple[Optional[Union[str, BytesLike]], str]:
    """
    Split a GPON serial given on the command line into vendor id and serial.

    Two forms are accepted:
    - 8 characters (e.g. "01234567"): returned unchanged with vendor
    - 16 hex digits (e.g. "41-4C-43-4C-12-34-56-78"): the first 4 bytes
      become the vendor id (replacing vendor), the last 4 bytes are
      rendered as 8 upper-case hex characters

    Returns:
        Tuple of (vendor_id, serial_number)

    Raises:
        NullError: If serial is None
        FormatError: If serial matches neither form

    Example:
        >>> split_gpon_serial("414C434C12345678")
        (b'ALCL', '12345678')
    """
    if serial is None:
        raise NullError("gpon_serial_number")

    if len(serial) == GPON_SERIAL_LENGTH:
        return vendor, serial

    digits = "".join(c for c in serial if c not in _HEX_SEPARATORS)
    if len(digits) == _HEX_SERIAL_DIGITS:
        raw = hex_to_bytes(digits, "gpon_serial_number")
        return raw[:GPON_VENDOR_ID_LENGTH], raw[GPON_VENDOR_ID_LENGTH:].hex().upper()

    raise FormatError(
        "gpon_serial_number",
        f"expected 8 characters or 16 hex digits, got {serial!r}",
    )


def _as_bytes(value: Union[str, BytesLike], field: str) -> bytes:
    """Convert a setter argument to bytes, encoding strings as UTF-8."""
    if value is None:
        raise NullError(field)
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise FormatError(field, f"unsupported value type {type(value).__name__}")


# =============================================================================
# NVRAM Record
# =============================================================================

class NVRAM:
    """
    Parsed NVRAM block of a UFiber image.

    The instance owns a private copy of the image. Field attributes hold
    fresh copies of the bytes they were read from, so changing one never
    aliases the working buffer.

    Attributes:
        version, main_thread, psi_size, num_mac_addr, old_checksum,
        syslog_size, nand_part_ofs_kb, nand_part_size_kb, checksum: int
        boot_line, board_id, base_mac_addr, gpon_vendor_id,
        gpon_serial_number, wps_dev_pin, wlan_params, voice_board_id,
        afe_id: bytes
        gpon_password: str (full slot as parsed; the value given after a set)

    Example:
        >>> nvram = NVRAM(image)
        >>> nvram.set_base_mac_address("24:5A:4C:00:11:22")
        >>> patched = nvram.finalize()
    """

    version: int
    boot_line: bytes
    board_id: bytes
    main_thread: int
    psi_size: int
    num_mac_addr: int
    base_mac_addr: bytes
    old_checksum: int
    gpon_vendor_id: bytes
    gpon_serial_number: bytes
    gpon_password: str
    wps_dev_pin: bytes
    wlan_params: bytes
    syslog_size: int
    nand_part_ofs_kb: int
    nand_part_size_kb: int
    voice_board_id: bytes
    afe_id: bytes
    checksum: int

    def __init__(
        self,
        data: BytesLike,
        offset: int = NVRAM_OFFSET,
        length: int = NVRAM_LENGTH,
    ):
        """
        Parse and verify the NVRAM block.

        Args:
            data: The complete image (or at least the containing region)
            offset: Start of the NVRAM region within data
            length: Size of the region covered by the CRC

        Raises:
            NullError: If data is None
            RangeError: If the region does not fit inside data
            IntegrityError: If the stored CRC doesn't match
        """
        if data is None:
            raise NullError("data")

        self._data = bytearray(data)
        self._offset = offset
        self._length = length

        self._check_region()

        for nv_field in NVRAM_FIELDS:
            self._load(nv_field)

        # The CRC is calculated with its own slot zeroed
        self._clear_crc_slot()
        calculated = crc32(self._region_bytes())

        if calculated != self.checksum:
            raise IntegrityError(self.checksum, calculated)

        logger.debug(
            f"Parsed NVRAM at 0x{offset:X} (0x{length:X} bytes), "
            f"version {self.version}, CRC 0x{calculated:08X}"
        )

    @classmethod
    def from_bytes(
        cls,
        data: BytesLike,
        offset: int = NVRAM_OFFSET,
        length: int = NVRAM_LENGTH,
    ) -> "NVRAM":
        """Create an NVRAM record from raw image bytes."""
        return cls(data, offset=offset, length=length)

    @classmethod
    def from_file(
        cls,
        filepath: Union[str, Path],
        offset: int = NVRAM_OFFSET,
        length: int = NVRAM_LENGTH,
    ) -> "NVRAM":
        """
        Read an image dump from disk and parse its NVRAM block.

        Raises:
            FileNotFoundError: If the file doesn't exist
            IntegrityError: If the stored CRC doesn't match
        """
        filepath = Path(filepath)
        return cls(filepath.read_bytes(), offset=offset, length=length)

    # -------------------------------------------------------------------------
    # Region access
    # -------------------------------------------------------------------------

    @property
    def offset(self) -> int:
        """Start of the NVRAM region within the image."""
        return self._offset

    @property
    def length(self) -> int:
        """Size of the NVRAM region."""
        return self._length

    @property
    def data(self) -> bytes:
        """
        Copy of the complete working image.

        The CRC slot reads as zero from parsing until the first finalize().
        """
        return bytes(self._data)

    @property
    def region(self) -> bytes:
        """Copy of the NVRAM region of the working image."""
        return bytes(self._region_bytes())

    def _check_region(self) -> None:
        if self._offset < 0:
            raise RangeError(
                "offset", self._offset, 0,
                f"region offset cannot be negative: {self._offset}",
            )
        if self._length < NVRAM_MIN_LENGTH:
            raise RangeError(
                "length", self._length, NVRAM_MIN_LENGTH,
                f"region of 0x{self._length:X} bytes is smaller than the "
                f"NVRAM layout (0x{NVRAM_MIN_LENGTH:X} bytes)",
            )
        end = self._offset + self._length
        if end > len(self._data):
            raise RangeError(
                "data", len(self._data), end,
                f"image of {len(self._data)} bytes is too short for region "
                f"[0x{self._offset:X}, 0x{end:X})",
            )

    def _region_bytes(self) -> bytearray:
        return self._data[self._offset:self._offset + self._length]

    def _absolute(self, relative: int) -> int:
        return self._offset + relative

    def _slice(self, nv_field: NVRAMField) -> bytes:
        start = self._absolute(nv_field.offset)
        return bytes(self._data[start:start + nv_field.length])

    def _load(self, nv_field: NVRAMField) -> None:
        """Refresh one attribute from the working buffer."""
        raw = self._slice(nv_field)

        if nv_field.kind is FieldKind.UINT32:
            value: Union[int, bytes, str] = int.from_bytes(raw, "big")
        elif nv_field.kind is FieldKind.UTF8:
            value = raw.decode("utf-8", errors="replace")
        else:
            value = raw

        setattr(self, nv_field.name, value)

    def _write(self, name: str, payload: bytes, zero_terminate: bool) -> None:
        """
        Copy payload into a field slot and refresh the attribute.

        Callers must have validated payload; this never raises.
        """
        nv_field = get_field(name)
        start = self._absolute(nv_field.offset)
        end = start + len(payload)

        self._data[start:end] = payload
        if zero_terminate:
            self._data[end] = 0

        self._load(nv_field)
        logger.debug(f"Wrote {len(payload)} bytes to {name} at 0x{start:X}")

    def _clear_crc_slot(self) -> None:
        start = self._absolute(NVRAM_CRC_OFFSET)
        self._data[start:start + NVRAM_CRC_LENGTH] = bytes(NVRAM_CRC_LENGTH)

    # -------------------------------------------------------------------------
    # Setters
    # -------------------------------------------------------------------------

    def set_base_mac_address(self, mac: Union[str, BytesLike]) -> None:
        """
        Set the base MAC address.

        Args:
            mac: 6 raw bytes, or 12 hex digits (case-insensitive, colon or
                 dash separators allowed)

        Raises:
            NullError: If mac is None
            FormatError: If the hex text cannot be decoded
            RangeError: If the value is not exactly 6 bytes
        """
        if isinstance(mac, str):
            value = hex_to_bytes(mac, "base_mac_addr")
        else:
            value = _as_bytes(mac, "base_mac_addr")

        if len(value) != MAC_LENGTH:
            raise RangeError("base_mac_addr", len(value), MAC_LENGTH)

        self._write("base_mac_addr", value, zero_terminate=False)

    def set_gpon_vendor_id(self, vendor_id: Union[str, BytesLike]) -> None:
        """
        Set the 4-byte GPON vendor id (e.g. "HWTC", "ALCL").

        A 0x00 byte is written directly after the value, i.e. over the first
        byte of the serial number slot.

        Raises:
            NullError: If vendor_id is None
            RangeError: If the value is not exactly 4 bytes
        """
        value = _as_bytes(vendor_id, "gpon_vendor_id")

        if len(value) != GPON_VENDOR_ID_LENGTH:
            raise RangeError("gpon_vendor_id", len(value), GPON_VENDOR_ID_LENGTH)

        self._write("gpon_vendor_id", value, zero_terminate=True)
        # The terminator landed in the serial slot
        self._load(get_field("gpon_serial_number"))

    def set_gpon_serial_number(self, serial: Union[str, BytesLike]) -> None:
        """
        Set the 8-byte GPON serial number, followed by a 0x00 terminator.

        Raises:
            NullError: If serial is None
            RangeError: If the value is not exactly 8 bytes
        """
        value = _as_bytes(serial, "gpon_serial_number")

        if len(value) != GPON_SERIAL_LENGTH:
            raise RangeError("gpon_serial_number", len(value), GPON_SERIAL_LENGTH)

        self._write("gpon_serial_number", value, zero_terminate=True)

    def set_gpon_password(self, password: str) -> None:
        """
        Set the GPON password (SLID / PLOAM password).

        Up to 10 characters are stored as UTF-8 and terminated with 0x00.
        Bytes after the terminator are left as they were.

        Raises:
            NullError: If password is None
            FormatError: If password is not a string
            RangeError: If password is longer than 10 characters, or its
                UTF-8 form is longer than 10 bytes
        """
        if password is None:
            raise NullError("gpon_password")
        if not isinstance(password, str):
            raise FormatError(
                "gpon_password",
                f"expected a string, got {type(password).__name__}",
            )

        if len(password) > GPON_PASSWORD_MAX_LENGTH:
            raise RangeError(
                "gpon_password", len(password), GPON_PASSWORD_MAX_LENGTH,
                f"expected at most {GPON_PASSWORD_MAX_LENGTH} characters, "
                f"got {len(password)}",
            )

        value = password.encode("utf-8")
        if len(value) > GPON_PASSWORD_MAX_LENGTH:
            raise RangeError(
                "gpon_password", len(value), GPON_PASSWORD_MAX_LENGTH,
                f"UTF-8 form is {len(value)} bytes, slot holds "
                f"{GPON_PASSWORD_MAX_LENGTH}",
            )

        self._write("gpon_password", value, zero_terminate=True)
        # Bytes past the terminator are stale; read back what was set
        self.gpon_password = password

    # -------------------------------------------------------------------------
    # Finalize
    # -------------------------------------------------------------------------

    def finalize(self) -> bytes:
        """
        Recompute the CRC, store it and return the complete image.

        The returned bytes have the same length as the input. Only the NVRAM
        region (patched fields and CRC slot) can differ from the original.
        Calling this again without changes returns identical bytes.

        Returns:
            The patched image
        """
        self._clear_crc_slot()
        crc = crc32(self._region_bytes())

        start = self._absolute(NVRAM_CRC_OFFSET)
        self._data[start:start + NVRAM_CRC_LENGTH] = crc_to_bytes(crc)
        self.checksum = crc

        logger.debug(f"Finalized NVRAM, CRC 0x{crc:08X}")
        return bytes(self._data)

    def complete_patch(self) -> bytes:
        """Alias of finalize()."""
        return self.finalize()

    def verify(self) -> bool:
        """
        Check that the checksum attribute matches the current region.

        This is True right after parsing and after finalize(); any setter
        call makes it False until the next finalize().
        """
        region = bytearray(self._region_bytes())
        region[NVRAM_CRC_OFFSET:NVRAM_CRC_OFFSET + NVRAM_CRC_LENGTH] = bytes(NVRAM_CRC_LENGTH)
        return crc32(region) == self.checksum

    def stored_checksum(self) -> int:
        """CRC currently held in the slot of the working buffer."""
        start = self._absolute(NVRAM_CRC_OFFSET)
        return crc_from_bytes(self._data[start:start + NVRAM_CRC_LENGTH])

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def sha256(self) -> str:
        """Hex SHA-256 digest of the working image."""
        return hashlib.sha256(self._data).hexdigest()

    @property
    def gpon_password_text(self) -> str:
        """GPON password up to the first NUL."""
        return self.gpon_password.split("\x00", 1)[0]

    def to_dict(self) -> dict:
        """
        Get the decoded key fields.

        Returns:
            Dictionary with text and integer values
        """
        return {
            "offset": self._offset,
            "length": self._length,
            "sha256": self.sha256(),
            "version": self.version,
            "boot_line": ascii_z(self.boot_line),
            "board_id": ascii_z(self.board_id),
            "main_thread": self.main_thread,
            "psi_size": self.psi_size,
            "num_mac_addr": self.num_mac_addr,
            "base_mac_addr": format_mac(self.base_mac_addr),
            "gpon_vendor_id": self.gpon_vendor_id.decode("utf-8", errors="replace"),
            "gpon_serial_number": ascii_z(self.gpon_serial_number),
            "gpon_password": self.gpon_password_text,
            "syslog_size": self.syslog_size,
            "nand_part_ofs_kb": self.nand_part_ofs_kb,
            "nand_part_size_kb": self.nand_part_size_kb,
            "checksum": self.checksum,
        }

    def summary(self) -> str:
        """
        Render the human-readable report printed by the CLI.

        Example output:
            --- NVRAM Information --
            - mtdblock3 hash: 3b0c...
            - NVRAM Version: 6
            - Boot parameters: e=192.168.1.1:ffffff00 h=192.168.1.100 ...
            ...
            - Checksum: 1078616273
        """
        info = self.to_dict()
        lines = [
            "--- NVRAM Information --",
            f"- mtdblock3 hash: {info['sha256']}",
            f"- NVRAM Version: {info['version']}",
            f"- Boot parameters: {info['boot_line']}",
            f"- Board Id: {info['board_id']}",
            f"- PSI size: {info['psi_size']}",
            f"- Total MAC addresses: {info['num_mac_addr']}",
            f"- GPON MAC address: {info['base_mac_addr']}",
            f"- GPON Vendor Id: {info['gpon_vendor_id']}",
            f"- GPON Serial Number: {info['gpon_serial_number']}",
            f"- GPON SLID (password): {info['gpon_password']}",
            f"- Checksum: {info['checksum']}",
        ]
        return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        return self.summary()

    def __repr__(self) -> str:
        return (
            f"NVRAM(offset=0x{self._offset:X}, length=0x{self._length:X}, "
            f"version={self.version}, checksum=0x{self.checksum:08X})"
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_nvram(
    data: BytesLike,
    offset: int = NVRAM_OFFSET,
    length: int = NVRAM_LENGTH,
) -> NVRAM:
    """Parse the NVRAM block of an image held in memory."""
    return NVRAM.from_bytes(data, offset=offset, length=length)


def parse_nvram_file(
    filepath: Union[str, Path],
    offset: int = NVRAM_OFFSET,
    length: int = NVRAM_LENGTH,
) -> NVRAM:
    """Read an image dump from disk and parse its NVRAM block."""
    return NVRAM.from_file(filepath, offset=offset, length=length)
