"""
Tests for format converters
"""

import io
import subprocess
from unittest.mock import patch

import pytest
from PIL import Image

from bmpdecoder import decode_bmp
from converters import MagickConverter, PillowConverter, buffer_to_image
from errors import ConversionError
from pixel_buffer import PixelBuffer


def png_bytes(size=(4, 3), color=(10, 200, 30), mode="RGB"):
    out = io.BytesIO()
    Image.new(mode, size, color).save(out, format="PNG")
    return out.getvalue()


class TestPillowConverter:
    def test_png_becomes_decodable_bitmap(self):
        data = PillowConverter().convert(png_bytes(), ".png")
        bmp = decode_bmp(data)
        assert (bmp.buffer.width, bmp.buffer.height) == (4, 3)
        assert all(px == (10, 200, 30) for px in bmp.buffer.iter_pixels())

    def test_alpha_is_dropped(self):
        data = PillowConverter().convert(png_bytes(color=(1, 2, 3, 128), mode="RGBA"), ".png")
        bmp = decode_bmp(data)
        assert bmp.info_header.bi_bit_count == 24
        assert bmp.buffer.get(0, 0) == (1, 2, 3)

    def test_garbage_raises(self):
        with pytest.raises(ConversionError):
            PillowConverter().convert(b"definitely not an image", ".jpg")


class TestMagickConverter:
    def test_command_names_source_format(self):
        conv = MagickConverter("magick")
        assert conv.command(".png") == [
            "magick", "PNG:-", "-depth", "8", "-type", "TrueColor", "BMP3:-",
        ]
        assert conv.command("")[1] == "-"

    def test_returns_stdout(self):
        completed = subprocess.CompletedProcess(args=[], returncode=0, stdout=b"BMDATA", stderr=b"")
        with patch("converters.subprocess.run", return_value=completed) as run:
            out = MagickConverter(timeout=5).convert(b"input", ".gif")
        assert out == b"BMDATA"
        args, kwargs = run.call_args
        assert args[0][1] == "GIF:-"
        assert kwargs["input"] == b"input"
        assert kwargs["timeout"] == 5

    def test_non_zero_exit(self):
        completed = subprocess.CompletedProcess(args=[], returncode=1, stdout=b"", stderr=b"no decode delegate")
        with patch("converters.subprocess.run", return_value=completed):
            with pytest.raises(ConversionError, match="no decode delegate"):
                MagickConverter().convert(b"input", ".xyz")

    def test_missing_binary(self):
        with patch("converters.subprocess.run", side_effect=FileNotFoundError("convert")):
            with pytest.raises(ConversionError):
                MagickConverter().convert(b"input", ".png")

    def test_timeout(self):
        err = subprocess.TimeoutExpired(cmd="convert", timeout=1)
        with patch("converters.subprocess.run", side_effect=err):
            with pytest.raises(ConversionError):
                MagickConverter(timeout=1).convert(b"input", ".png")


class TestBufferToImage:
    def test_orientation(self):
        buf = PixelBuffer.from_rows([
            [(255, 0, 0), (0, 255, 0)],      # bottom scanline
            [(0, 0, 255), (9, 9, 9)],        # top scanline
        ])
        image = buffer_to_image(buf)
        assert image.size == (2, 2)
        assert image.mode == "RGB"
        assert image.getpixel((0, 0)) == (0, 0, 255)
        assert image.getpixel((1, 1)) == (0, 255, 0)
