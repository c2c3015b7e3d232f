"""
UFiber NVRAM Error Hierarchy
============================

This module defines the exception hierarchy for the NVRAM codec.
All exceptions inherit from NVRAMError, allowing callers to catch all
codec-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
NVRAMError (base)
├── IntegrityError - stored CRC does not match the recomputed CRC
└── FieldError (field mutation)
    ├── RangeError - value has the wrong length for its slot
    ├── FormatError - textual value cannot be decoded
    └── NullError - a required value was missing

Propagation
-----------
Every error is raised synchronously at the offending call. The codec never
logs its own failures; reporting is left to the caller (see the CLI's
handle_cli_exception). Field errors are always raised before any byte of
the working buffer is touched, so a failed mutation leaves the record
exactly as it was.
"""

from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class NVRAMError(Exception):
    """
    Base exception for all NVRAM codec errors.

        try:
            nvram = NVRAM.from_file("mtdblock3.bin")
        except NVRAMError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Integrity Exceptions
# =============================================================================

class IntegrityError(NVRAMError):
    """
    CRC verification failed while parsing an NVRAM block.

    Raised when the checksum stored at the end of the NVRAM region doesn't
    match the CRC calculated over the region with the checksum slot zeroed.
    The input is either corrupt or the region offset/length is wrong.

    Attributes:
        stored: Checksum read from the image
        calculated: Checksum computed from the region contents
    """

    def __init__(self, stored: int, calculated: int, message: str = ""):
        self.stored = stored
        self.calculated = calculated
        if not message:
            message = (
                f"Invalid data, CRC doesn't match: "
                f"stored 0x{stored:08X}, calculated 0x{calculated:08X}"
            )
        super().__init__(message)


# =============================================================================
# Field Mutation Exceptions
# =============================================================================

class FieldError(NVRAMError):
    """
    Base exception for errors while updating a single NVRAM field.

    Attributes:
        field: Name of the field being updated
        message: Description of the problem, without the field name
    """

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class RangeError(FieldError):
    """
    Value has the wrong byte or character length for its slot.

    Fixed-width fields (MAC address, GPON vendor id, GPON serial number)
    require an exact length; the GPON password has a maximum length.

    Attributes:
        actual: Length of the rejected value
        expected: Required (or maximum) length
    """

    def __init__(
        self,
        field: str,
        actual: int,
        expected: int,
        message: Optional[str] = None,
    ):
        self.actual = actual
        self.expected = expected
        if message is None:
            message = f"expected {expected} bytes, got {actual}"
        super().__init__(field, message)


class FormatError(FieldError):
    """
    Textual value could not be decoded into bytes.

    Examples:
        - Non-hex character in a MAC address string
        - Hex string with an odd number of digits
    """
    pass


class NullError(FieldError):
    """A required value was None."""

    def __init__(self, field: str):
        super().__init__(field, "value is required")
