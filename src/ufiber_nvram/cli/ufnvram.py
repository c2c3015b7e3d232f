"""
ufnvram - UFiber NVRAM Patcher Command-Line Interface
=====================================================

This module implements the command-line interface for the NVRAM codec.
It works on image dumps already copied from the device (the content of
``/dev/mtdblock3``).

Commands
--------
- **info**: Show the decoded NVRAM fields
- **validate**: Check the NVRAM CRC
- **patch**: Change MAC address, GPON identity or SLID and write a new image

Usage Examples
--------------
Show an image:
    $ ufnvram info fw.bin

Validate the CRC:
    $ ufnvram validate fw.bin

Clone an ONT's GPON identity:
    $ ufnvram patch fw.bin -o patched/fw.bin --vendor HWTC --serial 01234567 --slid 1234567890

Use the full hex serial (vendor id taken from its first 4 bytes):
    $ ufnvram patch fw.bin -o patched/fw.bin --serial 48-57-54-43-01-23-45-67

Clone a MAC address:
    $ ufnvram patch fw.bin -o patched/fw.bin --mac 24:5A:4C:00:11:22
"""

import logging
from pathlib import Path
from typing import Optional

import click

from ufiber_nvram import __version__
from ufiber_nvram.cli.errors import ExitCode, echo_crc_mismatch, handle_cli_exception
from ufiber_nvram.errors import IntegrityError
from ufiber_nvram.nvram import (
    NVRAM,
    NVRAM_LENGTH,
    NVRAM_OFFSET,
    split_gpon_serial,
)

# Configure logging
logger = logging.getLogger(__name__)


# =============================================================================
# Integer Parameter Type
# =============================================================================

class IntLiteral(click.ParamType):
    """
    Click parameter type for offsets and lengths.

    Accepts decimal (1408), hex (0x580) and octal/binary prefixes.
    """
    name = "integer"

    def convert(self, value, param: Optional[click.Parameter],
                ctx: Optional[click.Context]) -> int:
        """Convert string to int."""
        if isinstance(value, int):
            return value

        try:
            result = int(value, 0)
        except ValueError:
            self.fail(f"{value!r} is not a valid integer", param, ctx)

        if result < 0:
            self.fail(f"{value!r} cannot be negative", param, ctx)
        return result


INT_LITERAL = IntLiteral()


def _given(value: Optional[str]) -> Optional[str]:
    """Blank option values count as not given."""
    if value is None or not value.strip():
        return None
    return value


def region_options(func):
    """Add the --offset and --length options shared by all commands."""
    func = click.option(
        "--length",
        type=INT_LITERAL,
        default=NVRAM_LENGTH,
        show_default="0x400",
        help="Size of the NVRAM region",
    )(func)
    func = click.option(
        "--offset",
        type=INT_LITERAL,
        default=NVRAM_OFFSET,
        show_default="0x580",
        help="Offset of the NVRAM region in the image",
    )(func)
    return func


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.version_option(__version__, "--version", "-V", prog_name="ufnvram")
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """
    NVRAM patcher for UFiber GPON devices.

    Inspect and patch the NVRAM block of a /dev/mtdblock3 image dump.

    \b
    Commands:
      info      Show decoded NVRAM fields
      validate  Check the NVRAM CRC
      patch     Write a patched image

    \b
    Examples:
      ufnvram info fw.bin
      ufnvram patch fw.bin -o patched.bin --slid 1234567890
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# Info Command
# =============================================================================

@main.command("info")
@click.argument(
    "image",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@region_options
@click.pass_context
def cmd_info(ctx: click.Context, image: Path, offset: int, length: int) -> None:
    """
    Show the NVRAM fields of an image dump.

    \b
    Example:
      ufnvram info fw.bin
    """
    try:
        nvram = NVRAM.from_file(image, offset=offset, length=length)
        click.echo(nvram.summary(), nl=False)

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.obj["verbose"])


# =============================================================================
# Validate Command
# =============================================================================

@main.command("validate")
@click.argument(
    "image",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@region_options
@click.pass_context
def cmd_validate(ctx: click.Context, image: Path, offset: int, length: int) -> None:
    """
    Validate the NVRAM CRC of an image dump.

    Exits with status 1 if the stored CRC doesn't match.

    \b
    Example:
      ufnvram validate fw.bin
    """
    try:
        nvram = NVRAM.from_file(image, offset=offset, length=length)
        click.echo(f"Validation PASSED: {image}")
        click.echo(f"  CRC: 0x{nvram.checksum:08X}")

    except IntegrityError as e:
        click.echo(f"Validation FAILED: {image}")
        echo_crc_mismatch(e)
        ctx.exit(ExitCode.NVRAM_ERROR)

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.obj["verbose"])


# =============================================================================
# Patch Command
# =============================================================================

@main.command("patch")
@click.argument(
    "image",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Output image path (required)",
)
@click.option(
    "--slid",
    help="The SLID (or PLOAM password), up to 10 characters.",
)
@click.option(
    "--vendor",
    help="4-character vendor id (e.g. HWTC, MTSC). Requires --serial.",
)
@click.option(
    "--serial",
    help=(
        "8-character serial number (e.g. 01234567) or 16-digit hex GPON "
        "serial (e.g. 41-4C-43-4C-xx-xx-xx-xx). The hex form also sets the "
        "vendor id from its first 4 bytes, replacing --vendor."
    ),
)
@click.option(
    "--mac",
    help="Base MAC address to clone (e.g. 24:5A:4C:00:11:22).",
)
@region_options
@click.pass_context
def cmd_patch(
    ctx: click.Context,
    image: Path,
    output: Path,
    slid: Optional[str],
    vendor: Optional[str],
    serial: Optional[str],
    mac: Optional[str],
    offset: int,
    length: int,
) -> None:
    """
    Patch the NVRAM block of an image dump and write a new image.

    The original and patched fields are printed. The input file is never
    modified.

    \b
    Examples:
      ufnvram patch fw.bin -o patched.bin --vendor HWTC --serial 01234567
      ufnvram patch fw.bin -o patched.bin --mac 245A4C001122 --slid secret
    """
    slid, vendor, serial, mac = (
        _given(value) for value in (slid, vendor, serial, mac)
    )

    if not any((slid, vendor, serial, mac)):
        raise click.UsageError(
            "Nothing to patch: pass at least one of --slid, --vendor/--serial, --mac."
        )

    if vendor and not serial:
        raise click.UsageError(
            "To set the GPON Serial Number, you must pass both --vendor and "
            "--serial. You can skip --vendor if you provide the full serial "
            "as HEX to --serial."
        )

    try:
        nvram = NVRAM.from_file(image, offset=offset, length=length)
        click.echo("### Original Image ###")
        click.echo(nvram.summary())

        click.echo(f"### Patching {image.name}...")

        if serial:
            vendor_id, serial_number = split_gpon_serial(serial, vendor)
            if vendor_id:
                nvram.set_gpon_vendor_id(vendor_id)
            nvram.set_gpon_serial_number(serial_number)

        if mac:
            nvram.set_base_mac_address(mac)

        if slid:
            nvram.set_gpon_password(slid)

        patched = nvram.finalize()

        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(patched)
        logger.info(f"Wrote {len(patched)} bytes to {output}")

        click.echo(f"### Patched {image.name}!")
        click.echo(nvram.summary())
        click.echo(f"### The patched file can be found at '{output}'.")

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.obj["verbose"], command="Patch")


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
