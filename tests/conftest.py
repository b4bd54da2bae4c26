"""
Pytest configuration and fixtures for the bitmap filter tests
"""

import struct

import pytest

from pixel_buffer import PixelBuffer


def make_bmp_bytes(rows, bit_count=24, compression=0, magic=b"BM", top_down=False):
    """Hand-assemble a bitmap from bottom-up RGB rows (independent of the encoder)."""
    height = len(rows)
    width = len(rows[0])
    padding = (4 - (width * 3) % 4) % 4
    pixel_data = bytearray()
    for row in rows:
        for (r, g, b) in row:
            pixel_data += bytes((b, g, r))
        pixel_data += bytes(padding)
    file_header = magic + struct.pack("<IHHI", 54 + len(pixel_data), 0, 0, 54)
    info_header = struct.pack(
        "<IiiHHIIiiII",
        40, width, -height if top_down else height, 1, bit_count, compression,
        len(pixel_data), 2835, 2835, 0, 0,
    )
    return file_header + info_header + bytes(pixel_data)


@pytest.fixture
def solid_buffer():
    """4x4 image filled with (100, 150, 200)"""
    return PixelBuffer.filled(4, 4, (100, 150, 200))


@pytest.fixture
def gradient_buffer():
    """6x5 image with distinct values in every channel"""
    rows = [
        [((x * 40 + y) % 256, (y * 50 + x * 3) % 256, (x * y * 7) % 256) for x in range(6)]
        for y in range(5)
    ]
    return PixelBuffer.from_rows(rows)


@pytest.fixture
def checker_buffer():
    """5x5 black/white checkerboard"""
    rows = [
        [(255, 255, 255) if (x + y) % 2 else (0, 0, 0) for x in range(5)]
        for y in range(5)
    ]
    return PixelBuffer.from_rows(rows)


@pytest.fixture
def bmp_3x2_bytes():
    """3-pixel-wide, 2-row bitmap: three padding bytes per row"""
    rows = [
        [(255, 0, 0), (0, 255, 0), (0, 0, 255)],
        [(10, 20, 30), (40, 50, 60), (70, 80, 90)],
    ]
    return make_bmp_bytes(rows)


@pytest.fixture
def bmp_file(tmp_path):
    """A 20x20 gradient bitmap written to disk"""
    rows = [[(x * 12, y * 12, (x + y) * 6) for x in range(20)] for y in range(20)]
    path = tmp_path / "sample.bmp"
    path.write_bytes(make_bmp_bytes(rows))
    return path
