"""
UFiber NVRAM - Test Configuration
=================================

Shared fixtures for the NVRAM test suite.

It provides:
- seal_image: write a valid CRC into an image
- sample_image: a realistic mtdblock3-style image with populated fields
- zero_image: an all-zero region whose CRC is a pinned reference value
"""

import pytest

from ufiber_nvram.nvram import (
    NVRAM_CRC_LENGTH,
    NVRAM_CRC_OFFSET,
    NVRAM_LENGTH,
    NVRAM_OFFSET,
    crc32,
    crc_to_bytes,
)

# Size of the synthetic images (the real partition is much larger, only the
# first few KB matter to the codec)
IMAGE_SIZE = 0x1000

# Pinned CRC of a 0x400-byte all-zero region
ZERO_REGION_CRC = 0x104A50D1

SAMPLE_BOOT_LINE = (
    b"e=192.168.1.1:ffffff00 h=192.168.1.100 g= r=f f=vmlinux "
    b"i=bcm963xx_fs_kernel d=1 p=0 c= a= "
)
SAMPLE_BOARD_ID = b"968380GERG"
SAMPLE_MAC = bytes([0x24, 0x5A, 0x4C, 0xAA, 0xBB, 0xCC])


def _seal(image: bytearray, offset: int = NVRAM_OFFSET, length: int = NVRAM_LENGTH) -> bytes:
    """Zero the CRC slot, compute the CRC and store it big-endian."""
    slot = offset + NVRAM_CRC_OFFSET
    image[slot:slot + NVRAM_CRC_LENGTH] = bytes(NVRAM_CRC_LENGTH)
    crc = crc32(image[offset:offset + length])
    image[slot:slot + NVRAM_CRC_LENGTH] = crc_to_bytes(crc)
    return bytes(image)


def _put(image: bytearray, offset: int, relative: int, value: bytes) -> None:
    start = offset + relative
    image[start:start + len(value)] = value


def _build_sample(offset: int = NVRAM_OFFSET, size: int = IMAGE_SIZE) -> bytes:
    image = bytearray(b"\xA5" * size)
    image[offset:offset + NVRAM_LENGTH] = bytes(NVRAM_LENGTH)

    _put(image, offset, 0x000, (6).to_bytes(4, "big"))
    _put(image, offset, 0x004, SAMPLE_BOOT_LINE)
    _put(image, offset, 0x104, SAMPLE_BOARD_ID)
    _put(image, offset, 0x114, (1).to_bytes(4, "big"))
    _put(image, offset, 0x118, (48).to_bytes(4, "big"))
    _put(image, offset, 0x11C, (10).to_bytes(4, "big"))
    _put(image, offset, 0x120, SAMPLE_MAC)
    _put(image, offset, 0x128, (0xDEADBEEF).to_bytes(4, "big"))
    _put(image, offset, 0x12C, b"UBNT")
    _put(image, offset, 0x130, b"12345678\x00")
    _put(image, offset, 0x139, b"secret\x00")
    _put(image, offset, 0x144, b"87654321")
    _put(image, offset, 0x14C, bytes(range(256)))
    _put(image, offset, 0x24C, (256).to_bytes(4, "big"))
    _put(image, offset, 0x250, (0x1000).to_bytes(4, "big"))
    _put(image, offset, 0x264, (0x2000).to_bytes(4, "big"))
    _put(image, offset, 0x278, b"LE9540WQC")
    _put(image, offset, 0x288, b"\x10\x20\x30\x40\x50\x60\x70\x80")

    return _seal(image, offset)


@pytest.fixture
def seal_image():
    """Return a function that writes a valid CRC into a bytearray image."""
    return _seal


@pytest.fixture
def build_sample():
    """Return a function that builds a sample image at a given region offset."""
    return _build_sample


@pytest.fixture
def sample_image() -> bytes:
    """
    A valid image with every field populated.

    Layout: 0x1000 bytes of 0xA5 filler, NVRAM region at 0x580 with
    version 6, a typical boot line, board id 968380GERG, MAC
    24:5A:4C:AA:BB:CC, vendor UBNT, serial 12345678 and SLID "secret".
    """
    return _build_sample()


@pytest.fixture
def zero_image() -> bytes:
    """
    An all-zero image whose only non-zero bytes are the pinned CRC.

    The CRC of 0x400 zero bytes is 0x104A50D1, so this image is valid
    without any help from the code under test.
    """
    image = bytearray(IMAGE_SIZE)
    slot = NVRAM_OFFSET + NVRAM_CRC_OFFSET
    image[slot:slot + NVRAM_CRC_LENGTH] = ZERO_REGION_CRC.to_bytes(4, "big")
    return bytes(image)


@pytest.fixture
def image_file(tmp_path, sample_image):
    """The sample image written to disk."""
    path = tmp_path / "fw-17102026-101500.bin"
    path.write_bytes(sample_image)
    return path
