"""
ufnvram Error Reporting
=======================

Turns codec exceptions into messages and exit codes for the ufnvram
commands. A rejected field value is reported against the option that
supplied it, and a CRC mismatch shows both checksums so a wrong
--offset can be told apart from a corrupt dump.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from ufiber_nvram.errors import FieldError, IntegrityError


class ExitCode(IntEnum):
    """Exit codes of the ufnvram command."""
    SUCCESS = 0
    NVRAM_ERROR = 1      # CRC mismatch, bad region or rejected field value
    INVALID_ARGS = 2     # Usage errors, unreadable image or unwritable output
    INTERNAL_ERROR = 3   # Unexpected internal error


# Codec field name -> command-line option (or argument) the value came from
FIELD_OPTIONS = {
    "base_mac_addr": "--mac",
    "gpon_vendor_id": "--vendor",
    "gpon_serial_number": "--serial",
    "gpon_password": "--slid",
    "offset": "--offset",
    "length": "--length",
    "data": "IMAGE",
}


def echo_crc_mismatch(error: IntegrityError) -> None:
    """Print the stored and calculated CRCs of a rejected image."""
    click.echo(f"  Stored CRC:     0x{error.stored:08X}", err=True)
    click.echo(f"  Calculated CRC: 0x{error.calculated:08X}", err=True)


def describe_field_error(error: FieldError) -> str:
    """
    Describe a field error in terms of the command line.

    Example:
        >>> describe_field_error(RangeError("gpon_password", 11, 10))
        '--slid: expected 10 bytes, got 11'
    """
    option = FIELD_OPTIONS.get(error.field, error.field)
    return f"{option}: {error.message}"


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    command: str | None = None
) -> NoReturn:
    """
    Report an exception raised by a ufnvram command and exit.

    Args:
        error: The exception that was raised
        verbose: If True, print the traceback of internal errors
        command: Optional command name used as message prefix (e.g., "Patch")

    Raises:
        SystemExit: Always
    """
    prefix = f"{command} error: " if command else "Error: "

    if isinstance(error, IntegrityError):
        click.echo(
            f"{prefix}NVRAM CRC doesn't match. The dump is corrupt or "
            "--offset/--length don't point at the NVRAM block.",
            err=True,
        )
        echo_crc_mismatch(error)
        sys.exit(ExitCode.NVRAM_ERROR)

    elif isinstance(error, FieldError):
        click.echo(f"{prefix}{describe_field_error(error)}", err=True)
        sys.exit(ExitCode.NVRAM_ERROR)

    elif isinstance(error, OSError):
        # Image or output path on the file system
        click.echo(f"{prefix}{error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
