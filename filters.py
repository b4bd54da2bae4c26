#!/usr/bin/env python3
"""
filters.py

Neighbourhood filters for 24-bit bitmaps:
- Gaussian blur (3x3, 1/16 weights)
- Sharpen (unsharp masking built from blur + image arithmetic)
- Edge detection (Sobel gradient magnitude on a grayscale copy)
- Noise reduction (per-channel median over a strength-sized window)

Each pass reads from an untouched copy of the input and writes into a new
buffer, so neighbourhoods always see pre-filter values.
"""

import logging
import math
from typing import List

from filter_options import check_strength
from image_processing import to_grayscale
from pixel_buffer import (
    PixelBuffer,
    add_images,
    clip8,
    multiply_image,
    round_half_up,
    subtract_images,
)

logger = logging.getLogger(__name__)

# sigma ~ 1, weights in sixteenths
GAUSSIAN_KERNEL = [
    [1, 2, 1],
    [2, 4, 2],
    [1, 2, 1],
]
GAUSSIAN_DIVISOR = 16

SOBEL_GX = [
    [-1, 0, 1],
    [-2, 0, 2],
    [-1, 0, 1],
]
SOBEL_GY = [
    [1, 2, 1],
    [0, 0, 0],
    [-1, -2, -1],
]

# ------------------ Gaussian blur ------------------

def gaussian_blur_pass(image: PixelBuffer) -> PixelBuffer:
    """One 3x3 Gaussian pass. The 1-pixel border is copied unchanged."""
    offset = len(GAUSSIAN_KERNEL) // 2
    src = image.rows
    out = image.deep_copy()
    for y in range(offset, image.height - offset):
        out_row = out.rows[y]
        for x in range(offset, image.width - offset):
            sum_r = sum_g = sum_b = 0
            for ky in range(-offset, offset + 1):
                src_row = src[y + ky]
                weights = GAUSSIAN_KERNEL[ky + offset]
                for kx in range(-offset, offset + 1):
                    w = weights[kx + offset]
                    r, g, b = src_row[x + kx]
                    sum_r += r * w
                    sum_g += g * w
                    sum_b += b * w
            # weighted sum truncates toward zero
            out_row[x] = (
                clip8(sum_r // GAUSSIAN_DIVISOR),
                clip8(sum_g // GAUSSIAN_DIVISOR),
                clip8(sum_b // GAUSSIAN_DIVISOR),
            )
    return out


def apply_gaussian_blur(image: PixelBuffer, passes: int = 1) -> PixelBuffer:
    """Blur ``passes`` times; each pass starts from the previous result."""
    check_strength(passes)
    out = image.deep_copy()
    for _ in range(passes):
        out = gaussian_blur_pass(out)
    return out

# ------------------ Sharpen ------------------

def apply_sharpen(image: PixelBuffer, strength: int) -> PixelBuffer:
    """Unsharp masking: image + strength * (image - blur(image)).

    The high-pass mask wraps in 8 bits before scaling; only the scaling and
    the final add clamp.
    """
    check_strength(strength)
    blurred = gaussian_blur_pass(image)
    mask = subtract_images(image, blurred)
    multiply_image(mask, strength)
    return add_images(image, mask)

# ------------------ Edge detection ------------------

def apply_edge_detection(image: PixelBuffer) -> PixelBuffer:
    """Sobel magnitude of the grayscale intensity; border left as is."""
    gray = to_grayscale(image).rows
    out = image.deep_copy()
    for y in range(1, image.height - 1):
        out_row = out.rows[y]
        for x in range(1, image.width - 1):
            gx = gy = 0
            for ky in range(3):
                src_row = gray[y + ky - 1]
                for kx in range(3):
                    intensity = src_row[x + kx - 1][0]
                    gx += intensity * SOBEL_GX[ky][kx]
                    gy += intensity * SOBEL_GY[ky][kx]
            magnitude = clip8(round_half_up(math.sqrt(gx * gx + gy * gy)))
            out_row[x] = (magnitude, magnitude, magnitude)
    return out

# ------------------ Noise reduction (median) ------------------

def noise_kernel_size(strength: int) -> int:
    """Window size for a 1-100 strength; odd strengths are halved first."""
    if strength % 2 != 0:
        strength = (strength + 1) // 2
    return 3 + strength


def _median(values: List[int]) -> int:
    values.sort()
    return values[len(values) // 2]


def apply_noise_reduction(image: PixelBuffer, strength: int) -> PixelBuffer:
    """Per-channel median over the window; out-of-image samples are skipped.

    For even sample counts the upper of the two middle values is taken
    (index ``count // 2`` of the sorted list).
    """
    check_strength(strength)
    kernel_size = noise_kernel_size(strength)
    offset = kernel_size // 2
    logger.debug(f"Noise reduction: strength {strength}, window {2 * offset + 1}")

    src = image.rows
    h, w = image.height, image.width
    rows = []
    for y in range(h):
        y0, y1 = max(0, y - offset), min(h, y + offset + 1)
        out_row = []
        for x in range(w):
            x0, x1 = max(0, x - offset), min(w, x + offset + 1)
            reds, greens, blues = [], [], []
            for sy in range(y0, y1):
                for (r, g, b) in src[sy][x0:x1]:
                    reds.append(r)
                    greens.append(g)
                    blues.append(b)
            out_row.append((_median(reds), _median(greens), _median(blues)))
        rows.append(out_row)
    return PixelBuffer(w, h, rows)
