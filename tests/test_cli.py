"""
ufnvram CLI Tests
=================

Tests for the command-line interface, run through click's CliRunner.
"""

import pytest
from click.testing import CliRunner

from ufiber_nvram.cli.errors import ExitCode, describe_field_error
from ufiber_nvram.errors import FormatError, RangeError
from ufiber_nvram.cli.ufnvram import main
from ufiber_nvram.nvram import NVRAM, NVRAM_OFFSET


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


class TestGeneral:
    """Help and version output."""

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "NVRAM patcher" in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "ufnvram" in result.output


class TestInfo:
    """Tests for the info command."""

    def test_info(self, runner, image_file):
        """Prints the decoded fields."""
        result = runner.invoke(main, ["info", str(image_file)])

        assert result.exit_code == 0
        assert "--- NVRAM Information --" in result.output
        assert "GPON MAC address: 24:5A:4C:AA:BB:CC" in result.output
        assert "GPON SLID (password): secret" in result.output

    def test_info_custom_offset(self, runner, tmp_path, build_sample):
        """--offset accepts hex literals."""
        path = tmp_path / "moved.bin"
        path.write_bytes(build_sample(offset=0x200))

        result = runner.invoke(main, ["info", str(path), "--offset", "0x200"])

        assert result.exit_code == 0
        assert "Board Id: 968380GERG" in result.output

    def test_info_bad_offset(self, runner, image_file):
        """Non-numeric offsets are usage errors."""
        result = runner.invoke(main, ["info", str(image_file), "--offset", "here"])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_info_corrupt(self, runner, tmp_path, sample_image):
        """A CRC mismatch is reported with exit code 1."""
        image = bytearray(sample_image)
        image[NVRAM_OFFSET + 0x10] ^= 0x01
        path = tmp_path / "corrupt.bin"
        path.write_bytes(bytes(image))

        result = runner.invoke(main, ["info", str(path)])

        assert result.exit_code == ExitCode.NVRAM_ERROR
        assert "CRC doesn't match" in result.output
        assert "Stored CRC" in result.output
        assert "Calculated CRC" in result.output

    def test_info_missing_file(self, runner, tmp_path):
        """Missing input files are rejected by click."""
        result = runner.invoke(main, ["info", str(tmp_path / "missing.bin")])
        assert result.exit_code == ExitCode.INVALID_ARGS


class TestValidate:
    """Tests for the validate command."""

    def test_valid(self, runner, image_file):
        result = runner.invoke(main, ["validate", str(image_file)])

        assert result.exit_code == 0
        assert "Validation PASSED" in result.output

    def test_invalid(self, runner, tmp_path, sample_image):
        image = bytearray(sample_image)
        image[NVRAM_OFFSET + 0x3FF] ^= 0x80
        path = tmp_path / "corrupt.bin"
        path.write_bytes(bytes(image))

        result = runner.invoke(main, ["validate", str(path)])

        assert result.exit_code == ExitCode.NVRAM_ERROR
        assert "Validation FAILED" in result.output
        assert "Stored CRC" in result.output

    def test_truncated(self, runner, tmp_path, sample_image):
        """An image too short for the region is an NVRAM error."""
        path = tmp_path / "short.bin"
        path.write_bytes(sample_image[:0x600])

        result = runner.invoke(main, ["validate", str(path)])

        assert result.exit_code == ExitCode.NVRAM_ERROR
        assert "too short" in result.output


class TestPatch:
    """Tests for the patch command."""

    def test_patch_all_fields(self, runner, image_file, tmp_path):
        """Every supported field is patched and the output is valid."""
        output = tmp_path / "patched" / "out.bin"

        result = runner.invoke(main, [
            "patch", str(image_file), "-o", str(output),
            "--vendor", "HWTC",
            "--serial", "01234567",
            "--mac", "00:11:22:33:44:55",
            "--slid", "1234567890",
        ])

        assert result.exit_code == 0, result.output
        assert "### Original Image ###" in result.output
        assert "### Patched" in result.output

        nvram = NVRAM.from_file(output)
        assert nvram.gpon_vendor_id == b"HWTC"
        assert nvram.gpon_serial_number == b"01234567\x00"
        assert nvram.base_mac_addr == b"\x00\x11\x22\x33\x44\x55"
        assert nvram.gpon_password_text == "1234567890"

    def test_patch_hex_serial(self, runner, image_file, tmp_path):
        """The hex serial form sets the vendor id as well."""
        output = tmp_path / "out.bin"

        result = runner.invoke(main, [
            "patch", str(image_file), "-o", str(output),
            "--serial", "41-4C-43-4C-1A-2B-3C-4D",
        ])

        assert result.exit_code == 0, result.output
        nvram = NVRAM.from_file(output)
        assert nvram.gpon_vendor_id == b"ALCL"
        assert nvram.gpon_serial_number == b"1A2B3C4D\x00"

    def test_patch_serial_keeps_vendor(self, runner, image_file, tmp_path):
        """An 8-character serial alone leaves the vendor id untouched."""
        output = tmp_path / "out.bin"

        result = runner.invoke(main, [
            "patch", str(image_file), "-o", str(output), "--serial", "87654321",
        ])

        assert result.exit_code == 0, result.output
        nvram = NVRAM.from_file(output)
        assert nvram.gpon_vendor_id == b"UBNT"
        assert nvram.gpon_serial_number == b"87654321\x00"

    def test_input_not_modified(self, runner, image_file, tmp_path, sample_image):
        """The source dump is left as it was."""
        runner.invoke(main, [
            "patch", str(image_file), "-o", str(tmp_path / "out.bin"), "--slid", "abc",
        ])
        assert image_file.read_bytes() == sample_image

    def test_vendor_without_serial(self, runner, image_file, tmp_path):
        """--vendor alone is a usage error."""
        output = tmp_path / "out.bin"

        result = runner.invoke(main, [
            "patch", str(image_file), "-o", str(output), "--vendor", "HWTC",
        ])

        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "--vendor and --serial" in result.output
        assert not output.exists()

    def test_nothing_to_patch(self, runner, image_file, tmp_path):
        """At least one field option is required."""
        result = runner.invoke(main, [
            "patch", str(image_file), "-o", str(tmp_path / "out.bin"),
        ])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_slid_too_long(self, runner, image_file, tmp_path):
        """A rejected value stops the patch before anything is written."""
        output = tmp_path / "out.bin"

        result = runner.invoke(main, [
            "patch", str(image_file), "-o", str(output), "--slid", "12345678901",
        ])

        assert result.exit_code == ExitCode.NVRAM_ERROR
        assert "Patch error" in result.output
        assert "--slid:" in result.output
        assert not output.exists()

    def test_bad_mac(self, runner, image_file, tmp_path):
        result = runner.invoke(main, [
            "patch", str(image_file), "-o", str(tmp_path / "out.bin"), "--mac", "00:11:22:33:44:ZZ",
        ])
        assert result.exit_code == ExitCode.NVRAM_ERROR
        assert "invalid hex digit" in result.output

    def test_verbose(self, runner, image_file, tmp_path):
        """-v is accepted on the group."""
        result = runner.invoke(main, [
            "-v", "patch", str(image_file), "-o", str(tmp_path / "out.bin"), "--slid", "abc",
        ])
        assert result.exit_code == 0, result.output

    def test_blank_options_are_ignored(self, runner, image_file, tmp_path):
        """Whitespace-only values count as not given."""
        result = runner.invoke(main, [
            "patch", str(image_file), "-o", str(tmp_path / "out.bin"), "--slid", "  ",
        ])
        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "Nothing to patch" in result.output

    def test_blank_mac_left_untouched(self, runner, image_file, tmp_path):
        output = tmp_path / "out.bin"

        result = runner.invoke(main, [
            "patch", str(image_file), "-o", str(output), "--mac", " ", "--slid", "abc",
        ])

        assert result.exit_code == 0, result.output
        nvram = NVRAM.from_file(output)
        assert nvram.base_mac_addr == bytes.fromhex("245A4CAABBCC")
        assert nvram.gpon_password_text == "abc"

    def test_unwritable_output(self, runner, image_file, tmp_path):
        """An output path below a regular file can't be created."""
        blocker = tmp_path / "blocker"
        blocker.write_bytes(b"")

        result = runner.invoke(main, [
            "patch", str(image_file), "-o", str(blocker / "out.bin"), "--slid", "abc",
        ])

        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "Patch error" in result.output


class TestErrorReporting:
    """Tests for mapping codec errors to command-line options."""

    @pytest.mark.parametrize("error, expected", [
        (RangeError("gpon_password", 11, 10), "--slid: expected 10 bytes, got 11"),
        (FormatError("base_mac_addr", "invalid hex digit 'Z'"), "--mac: invalid hex digit 'Z'"),
        (RangeError("gpon_vendor_id", 3, 4), "--vendor: expected 4 bytes, got 3"),
        (FormatError("gpon_serial_number", "bad"), "--serial: bad"),
    ])
    def test_option_names(self, error, expected):
        assert describe_field_error(error) == expected

    def test_unknown_field_kept(self):
        """Fields without an option keep their codec name."""
        assert describe_field_error(FormatError("wlan_params", "bad")) == "wlan_params: bad"
