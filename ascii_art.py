#!/usr/bin/env python3
"""
ascii_art.py

Downsample a bitmap and map each cell to a glyph:
1. box downsample to the requested width (height scaled for glyph aspect)
2. grayscale
3. contrast stretch using the observed min/max
4. intensity -> glyph ramp index
"""

import logging
from dataclasses import dataclass
from typing import List

from errors import InvalidParameterError
from image_processing import to_grayscale
from pixel_buffer import PixelBuffer, resize_box_downsample

logger = logging.getLogger(__name__)

# Sparse/light -> dense/dark
GLYPH_RAMP = " `.-':_,^=;><+!rc*/z?sLTv)J7(|Fi{C}fI31tlu[neoZ5Yxjya]2ESwqkP6h9d4VpOGbUAKXHm8RD#$Bg0MNWQ%&@"


@dataclass
class AsciiGrid:
    """One glyph per downsampled pixel, rows in buffer (bottom-up) order."""
    width: int
    height: int
    glyphs: List[List[str]]

    def lines(self) -> List[str]:
        """Rows top-to-bottom as they should be read."""
        return ["".join(row) for row in reversed(self.glyphs)]

    def to_text(self) -> str:
        return "".join(line + "\n" for line in self.lines())


def validate_ascii_width(image: PixelBuffer, width: int) -> None:
    if width <= 0 or width > image.width or width > image.height:
        raise InvalidParameterError(
            f"Invalid new size {width} for a {image.width}x{image.height} image"
        )


def contrast_stretch(image: PixelBuffer) -> PixelBuffer:
    """Spread grayscale values over 0-255; +1 keeps flat images defined."""
    values = [r for (r, _, _) in image.iter_pixels()]
    lo, hi = min(values), max(values)
    span = hi - lo + 1
    rows = []
    for row in image.rows:
        prow = []
        for (r, _, _) in row:
            s = 255 * (r - lo) // span
            prow.append((s, s, s))
        rows.append(prow)
    return PixelBuffer(image.width, image.height, rows)


def glyph_for(intensity: int, ramp: str = GLYPH_RAMP) -> str:
    return ramp[(intensity * (len(ramp) - 1)) // 255]


def to_ascii_grid(image: PixelBuffer) -> AsciiGrid:
    """Glyph grid at the image's own size (no downsampling)."""
    stretched = contrast_stretch(to_grayscale(image))
    glyphs = [[glyph_for(r) for (r, _, _) in row] for row in stretched.rows]
    return AsciiGrid(image.width, image.height, glyphs)


def render_ascii(image: PixelBuffer, width: int) -> AsciiGrid:
    validate_ascii_width(image, width)
    small = resize_box_downsample(image, width)
    grid = to_ascii_grid(small)
    logger.info(f"ASCII image created: {grid.width}x{grid.height} glyphs")
    return grid
