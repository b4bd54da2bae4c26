# image_processing.py
"""
Point-processing methods for the bitmap filter tool.
Every function returns a new PixelBuffer and leaves its input untouched.
"""

from typing import Optional

from filter_options import check_strength
from pixel_buffer import PixelBuffer, round_half_up

# ---------------------------------------------------------------------
# 1. Grayscale Transformation
# ---------------------------------------------------------------------
def to_grayscale(image: PixelBuffer) -> PixelBuffer:
    """Convert to grayscale using s = (R + G + B) / 3 (floor)."""
    gray_rows = []
    for row in image.rows:
        prow = []
        for (r, g, b) in row:
            s = (r + g + b) // 3
            prow.append((s, s, s))
        gray_rows.append(prow)
    return PixelBuffer(image.width, image.height, gray_rows)

# ---------------------------------------------------------------------
# 2. Sepia Tone
# ---------------------------------------------------------------------
SEPIA_MATRIX = (
    (0.393, 0.769, 0.189),
    (0.349, 0.686, 0.168),
    (0.272, 0.534, 0.131),
)

def apply_sepia(image: PixelBuffer, strength: Optional[int] = None) -> PixelBuffer:
    """Fixed sepia matrix, capped at 255.

    ``strength`` is range-checked like the other
    parametrised filters but does not change the result.
    """
    if strength is not None:
        check_strength(strength)
    (rr, rg, rb), (gr, gg, gb), (br, bg, bb) = SEPIA_MATRIX
    sepia_rows = []
    for row in image.rows:
        prow = []
        for (r, g, b) in row:
            # weights are non-negative, so only the top needs a cap
            nr = min(255, round_half_up(r * rr + g * rg + b * rb))
            ng = min(255, round_half_up(r * gr + g * gg + b * gb))
            nb = min(255, round_half_up(r * br + g * bg + b * bb))
            prow.append((nr, ng, nb))
        sepia_rows.append(prow)
    return PixelBuffer(image.width, image.height, sepia_rows)

# ---------------------------------------------------------------------
# 3. Horizontal Flip
# ---------------------------------------------------------------------
def flip_horizontal(image: PixelBuffer) -> PixelBuffer:
    """Mirror left/right: column x swaps with column width-1-x."""
    flipped = image.deep_copy()
    w = image.width
    for row in flipped.rows:
        for x in range(w // 2):
            row[x], row[w - 1 - x] = row[w - 1 - x], row[x]
    return flipped
