"""
Format conversion for inputs that are not 24-bit bitmaps.

The pipeline only knows the FormatConverter interface; the concrete
converters below are chosen by configuration:
- PillowConverter: in-process, via Pillow
- MagickConverter: the ImageMagick ``convert`` command
Also holds the PixelBuffer -> PIL image helper used by the preview window.
"""

import io
import logging
import subprocess
from typing import Optional, Protocol

import numpy as np
from PIL import Image, UnidentifiedImageError

from errors import ConversionError
from pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)


class FormatConverter(Protocol):
    def convert(self, data: bytes, source_ext: str) -> bytes:
        """Return 24-bit uncompressed BMP bytes or raise ConversionError."""
        ...


class PillowConverter:
    """Decode anything Pillow can open and re-save it as a 24-bit BMP."""

    def convert(self, data: bytes, source_ext: str) -> bytes:
        try:
            image = Image.open(io.BytesIO(data))
            rgb = image.convert("RGB")
        except (UnidentifiedImageError, OSError) as e:
            raise ConversionError(f"Pillow could not read {source_ext or 'input'}: {e}") from e

        buffer = io.BytesIO()
        rgb.save(buffer, format="BMP")
        logger.info(f"Image converted with Pillow: {image.format} -> BMP")
        return buffer.getvalue()


class MagickConverter:
    """Pipe the bytes through ImageMagick and read a BMP3 back."""

    def __init__(self, binary: str = "convert", timeout: Optional[float] = None):
        self.binary = binary
        self.timeout = timeout

    def command(self, source_ext: str):
        fmt = source_ext.lstrip(".").upper()
        source = f"{fmt}:-" if fmt else "-"
        return [self.binary, source, "-depth", "8", "-type", "TrueColor", "BMP3:-"]

    def convert(self, data: bytes, source_ext: str) -> bytes:
        cmd = self.command(source_ext)
        try:
            result = subprocess.run(cmd, input=data, capture_output=True, timeout=self.timeout)
        except (OSError, subprocess.SubprocessError) as e:
            raise ConversionError(f"Failed to run {self.binary}: {e}") from e

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            logger.error(f"Image conversion failed with code: {result.returncode}")
            raise ConversionError(
                f"{self.binary} exited with code {result.returncode}: {stderr}"
            )
        logger.info("Image converted successfully with ImageMagick")
        return result.stdout


def buffer_to_image(buffer: PixelBuffer) -> Image.Image:
    """PIL RGB image of the buffer, top row first."""
    arr = np.array(buffer.rows, dtype=np.uint8)
    # buffer row 0 is the bottom scanline
    return Image.fromarray(np.ascontiguousarray(arr[::-1]))
