#!/usr/bin/env python3
"""
pixel_buffer.py

In-memory RGB image used by every filter:
- PixelBuffer: rows of (R, G, B) tuples plus width/height
- Whole-image arithmetic: subtract, multiply, add
- Box downsampling for the ASCII renderer

Row 0 is the bottom scanline of the bitmap (on-disk order).
"""

import logging
import math
from typing import Iterator, List, Sequence, Tuple

from errors import InvalidParameterError

logger = logging.getLogger(__name__)

# RGB row type alias
RGB = Tuple[int, int, int]
RGBRows = List[List[RGB]]

# Monospace glyph cells are taller than wide
ASCII_ASPECT_RATIO = 0.4


def clip8(x: int) -> int:
    return 0 if x < 0 else (255 if x > 255 else x)


def round_half_up(x: float) -> int:
    """Round halves away from zero for non-negative values (C ``round``)."""
    return int(math.floor(x + 0.5))


def _check_rgb(rgb: Sequence[int]) -> RGB:
    if len(rgb) != 3:
        raise ValueError(f"Expected an (R, G, B) triple, got {rgb!r}")
    r, g, b = rgb
    for v in (r, g, b):
        if not isinstance(v, int) or not 0 <= v <= 255:
            raise ValueError(f"Channel value out of range [0, 255]: {rgb!r}")
    return (r, g, b)


class PixelBuffer:
    """Bounds-checked 2-D grid of RGB samples.

    Filters never write into a buffer they are reading from; they build a
    fresh one with :meth:`deep_copy` or :meth:`from_rows`.
    """

    def __init__(self, width: int, height: int, rows: RGBRows):
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid buffer dimensions: {width}x{height}")
        if len(rows) != height or any(len(row) != width for row in rows):
            raise ValueError(f"Row data does not match {width}x{height}")
        self._width = width
        self._height = height
        self._rows = rows

    @classmethod
    def filled(cls, width: int, height: int, rgb: RGB = (0, 0, 0)) -> "PixelBuffer":
        rgb = _check_rgb(rgb)
        return cls(width, height, [[rgb] * width for _ in range(height)])

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Sequence[int]]]) -> "PixelBuffer":
        """Build a buffer from nested rows, validating every channel."""
        height = len(rows)
        width = len(rows[0]) if height else 0
        checked = [[_check_rgb(px) for px in row] for row in rows]
        return cls(width, height, checked)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def rows(self) -> RGBRows:
        return self._rows

    def _check_bounds(self, x: int, y: int) -> None:
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise IndexError(
                f"Pixel ({x}, {y}) outside {self._width}x{self._height} buffer"
            )

    def get(self, x: int, y: int) -> RGB:
        self._check_bounds(x, y)
        return self._rows[y][x]

    def set(self, x: int, y: int, rgb: Sequence[int]) -> None:
        self._check_bounds(x, y)
        self._rows[y][x] = _check_rgb(rgb)

    def iter_pixels(self) -> Iterator[RGB]:
        for row in self._rows:
            yield from row

    def deep_copy(self) -> "PixelBuffer":
        """New buffer with identical samples and no shared row storage."""
        return PixelBuffer(self._width, self._height, [list(row) for row in self._rows])

    def __eq__(self, other):
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (
            self._width == other._width
            and self._height == other._height
            and self._rows == other._rows
        )

    def __repr__(self):
        return f"PixelBuffer({self._width}x{self._height})"


# ---------------------------------------------------------------------
# Image arithmetic
# ---------------------------------------------------------------------

def _check_same_size(a: PixelBuffer, b: PixelBuffer) -> None:
    if a.width != b.width or a.height != b.height:
        raise InvalidParameterError(
            f"Image sizes differ: {a.width}x{a.height} vs {b.width}x{b.height}"
        )


def subtract_images(a: PixelBuffer, b: PixelBuffer) -> PixelBuffer:
    """Per-channel ``a - b`` in wrapping 8-bit arithmetic (no clamping)."""
    _check_same_size(a, b)
    rows = []
    for row_a, row_b in zip(a.rows, b.rows):
        rows.append([
            ((ra - rb) & 0xFF, (ga - gb) & 0xFF, (ba - bb) & 0xFF)
            for (ra, ga, ba), (rb, gb, bb) in zip(row_a, row_b)
        ])
    return PixelBuffer(a.width, a.height, rows)


def multiply_image(image: PixelBuffer, scalar: float) -> None:
    """Scale every channel in place, rounding and clamping to [0, 255]."""
    for row in image.rows:
        for x, (r, g, b) in enumerate(row):
            row[x] = (
                clip8(round_half_up(r * scalar)),
                clip8(round_half_up(g * scalar)),
                clip8(round_half_up(b * scalar)),
            )


def add_images(a: PixelBuffer, b: PixelBuffer) -> PixelBuffer:
    """Per-channel ``a + b`` clamped to [0, 255]."""
    _check_same_size(a, b)
    rows = []
    for row_a, row_b in zip(a.rows, b.rows):
        rows.append([
            (clip8(ra + rb), clip8(ga + gb), clip8(ba + bb))
            for (ra, ga, ba), (rb, gb, bb) in zip(row_a, row_b)
        ])
    return PixelBuffer(a.width, a.height, rows)


# ---------------------------------------------------------------------
# Resizing
# ---------------------------------------------------------------------

def downsample_height(image: PixelBuffer, new_width: int) -> int:
    """Output height for a box downsample to ``new_width`` glyph columns."""
    return round_half_up(image.height * (new_width / image.width) * ASCII_ASPECT_RATIO)


def resize_box_downsample(image: PixelBuffer, new_width: int) -> PixelBuffer:
    """Shrink by averaging boxes of source pixels.

    Returns a new buffer; ``image`` is never modified. Raises
    InvalidParameterError when the target is larger than the source or a
    box would be empty.
    """
    if new_width <= 0:
        raise InvalidParameterError(f"New width must be positive, got {new_width}")
    new_height = downsample_height(image, new_width)
    if new_width > image.width or new_height > image.height:
        raise InvalidParameterError(
            f"New size {new_width}x{new_height} is larger than "
            f"{image.width}x{image.height}"
        )
    if new_height <= 0:
        raise InvalidParameterError(
            f"Width {new_width} leaves no rows for a {image.width}x{image.height} image"
        )

    kernel_x = image.width // new_width
    kernel_y = image.height // new_height
    if kernel_x <= 0 or kernel_y <= 0:
        raise InvalidParameterError("Kernel size is zero or negative")

    src = image.rows
    rows = []
    for y in range(new_height):
        out_row = []
        for x in range(new_width):
            sum_r = sum_g = sum_b = count = 0
            for ky in range(kernel_y):
                sy = y * kernel_y + ky
                if sy >= image.height:
                    break
                for kx in range(kernel_x):
                    sx = x * kernel_x + kx
                    if sx >= image.width:
                        break
                    r, g, b = src[sy][sx]
                    sum_r += r
                    sum_g += g
                    sum_b += b
                    count += 1
            if count == 0:
                count = 1
            out_row.append((sum_r // count, sum_g // count, sum_b // count))
        rows.append(out_row)

    logger.debug(
        f"Downsampled {image.width}x{image.height} -> {new_width}x{new_height} "
        f"(box {kernel_x}x{kernel_y})"
    )
    return PixelBuffer(new_width, new_height, rows)
