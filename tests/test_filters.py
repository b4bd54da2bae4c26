"""
Tests for neighbourhood filters: blur, sharpen, edge detection, noise reduction
"""

import pytest

from errors import InvalidParameterError
from filters import (
    apply_edge_detection,
    apply_gaussian_blur,
    apply_noise_reduction,
    apply_sharpen,
    gaussian_blur_pass,
    noise_kernel_size,
)
from pixel_buffer import PixelBuffer


def spot(centre, background=(0, 0, 0), size=3):
    """size x size image with a single different centre pixel"""
    rows = [[background] * size for _ in range(size)]
    rows[size // 2][size // 2] = centre
    return PixelBuffer.from_rows(rows)


def border(buf):
    h, w = buf.height, buf.width
    return [buf.get(x, y) for y in range(h) for x in range(w) if x in (0, w - 1) or y in (0, h - 1)]


class TestGaussianBlur:
    def test_centre_weight(self):
        out = gaussian_blur_pass(spot((160, 80, 16)))
        assert out.get(1, 1) == (40, 20, 4)

    def test_weighted_sum_truncates(self):
        out = gaussian_blur_pass(spot((3, 3, 3)))
        assert out.get(1, 1) == (0, 0, 0)

    def test_neighbours_contribute(self):
        buf = spot((0, 0, 0), background=(100, 100, 100))
        # 100 * 12 / 16
        assert gaussian_blur_pass(buf).get(1, 1) == (75, 75, 75)

    def test_dimensions_and_border_preserved(self, gradient_buffer):
        out = gaussian_blur_pass(gradient_buffer)
        assert (out.width, out.height) == (gradient_buffer.width, gradient_buffer.height)
        assert border(out) == border(gradient_buffer)

    def test_uniform_image_unchanged(self, solid_buffer):
        assert apply_gaussian_blur(solid_buffer, 5) == solid_buffer

    def test_passes_compose(self, gradient_buffer):
        twice = gaussian_blur_pass(gaussian_blur_pass(gradient_buffer))
        assert apply_gaussian_blur(gradient_buffer, 2) == twice

    def test_reads_pre_filter_values(self):
        # a row of spots: each output depends only on the original neighbours
        rows = [[(0, 0, 0)] * 4 for _ in range(3)]
        rows[1][1] = (160, 160, 160)
        buf = PixelBuffer.from_rows(rows)
        out = gaussian_blur_pass(buf)
        assert out.get(1, 1) == (40, 40, 40)
        assert out.get(2, 1) == (20, 20, 20)

    def test_input_untouched(self, gradient_buffer):
        before = gradient_buffer.deep_copy()
        apply_gaussian_blur(gradient_buffer, 3)
        assert gradient_buffer == before

    def test_tiny_image_has_no_interior(self):
        buf = PixelBuffer.from_rows([[(1, 2, 3), (4, 5, 6)]])
        assert gaussian_blur_pass(buf) == buf

    @pytest.mark.parametrize("passes", [0, 101, -2])
    def test_pass_count_range(self, gradient_buffer, passes):
        with pytest.raises(InvalidParameterError):
            apply_gaussian_blur(gradient_buffer, passes)


class TestSharpen:
    def test_boosts_high_frequency(self):
        out = apply_sharpen(spot((20, 20, 20)), 1)
        # blur centre 5, mask 15, 20 + 15
        assert out.get(1, 1) == (35, 35, 35)

    def test_strength_scales_mask_and_clamps(self):
        assert apply_sharpen(spot((20, 20, 20)), 2).get(1, 1) == (50, 50, 50)
        assert apply_sharpen(spot((160, 160, 160)), 1).get(1, 1) == (255, 255, 255)

    def test_negative_mask_wraps(self):
        buf = spot((0, 0, 0), background=(100, 100, 100))
        # 0 - 75 wraps to 181 before the clamped add
        assert apply_sharpen(buf, 1).get(1, 1) == (181, 181, 181)

    def test_uniform_image_unchanged(self, solid_buffer):
        assert apply_sharpen(solid_buffer, 100) == solid_buffer

    @pytest.mark.parametrize("strength", [0, 101, -1])
    def test_strength_range(self, gradient_buffer, strength):
        before = gradient_buffer.deep_copy()
        with pytest.raises(InvalidParameterError):
            apply_sharpen(gradient_buffer, strength)
        assert gradient_buffer == before

    def test_border_unchanged(self, gradient_buffer):
        assert border(apply_sharpen(gradient_buffer, 10)) == border(gradient_buffer)


class TestEdgeDetection:
    def test_flat_interior_is_black(self, solid_buffer):
        out = apply_edge_detection(solid_buffer)
        assert out.get(1, 1) == (0, 0, 0)
        assert out.get(2, 2) == (0, 0, 0)
        assert border(out) == border(solid_buffer)

    def test_vertical_edge_uses_grayscale(self):
        rows = [[(0, 0, 0), (0, 0, 0), (0, 15, 15)] for _ in range(3)]
        out = apply_edge_detection(PixelBuffer.from_rows(rows))
        # gray 10 on the right column, Gx = 10 * (1 + 2 + 1)
        assert out.get(1, 1) == (40, 40, 40)

    def test_magnitude_combines_both_gradients(self):
        rows = [
            [(0, 0, 0), (0, 0, 0), (0, 0, 0)],
            [(0, 0, 0), (0, 0, 0), (0, 0, 0)],
            [(0, 0, 0), (0, 0, 0), (30, 30, 30)],
        ]
        out = apply_edge_detection(PixelBuffer.from_rows(rows))
        # Gx = 30, Gy = -30, sqrt(1800) = 42.43
        assert out.get(1, 1) == (42, 42, 42)

    def test_clamps_to_255(self, checker_buffer):
        out = apply_edge_detection(checker_buffer)
        assert all(0 <= v <= 255 for px in out.iter_pixels() for v in px)

    def test_input_untouched(self, gradient_buffer):
        before = gradient_buffer.deep_copy()
        apply_edge_detection(gradient_buffer)
        assert gradient_buffer == before


class TestNoiseReduction:
    @pytest.mark.parametrize(
        "strength, size",
        [(1, 4), (2, 5), (3, 5), (4, 7), (5, 6), (99, 53), (100, 103)],
    )
    def test_kernel_size(self, strength, size):
        assert noise_kernel_size(strength) == size

    def test_removes_outlier(self):
        buf = spot((255, 0, 255), background=(50, 60, 70), size=5)
        out = apply_noise_reduction(buf, 2)
        assert all(px == (50, 60, 70) for px in out.iter_pixels())

    def test_even_count_takes_upper_middle(self):
        buf = PixelBuffer.from_rows([[(10, 10, 10), (20, 20, 20)]])
        out = apply_noise_reduction(buf, 2)
        assert out.rows[0] == [(20, 20, 20), (20, 20, 20)]

    def test_channels_are_independent(self):
        buf = PixelBuffer.from_rows([[(1, 7, 5), (2, 9, 5), (3, 8, 5)]])
        out = apply_noise_reduction(buf, 2)
        assert all(px == (2, 8, 5) for px in out.iter_pixels())

    def test_borders_are_filtered(self):
        rows = [[(0, 0, 0)] * 3 for _ in range(3)]
        rows[0][0] = (200, 200, 200)
        out = apply_noise_reduction(PixelBuffer.from_rows(rows), 2)
        assert out.get(0, 0) == (0, 0, 0)

    @pytest.mark.parametrize("strength", [0, 101, -3])
    def test_strength_range(self, gradient_buffer, strength):
        with pytest.raises(InvalidParameterError):
            apply_noise_reduction(gradient_buffer, strength)

    def test_input_untouched(self, gradient_buffer):
        before = gradient_buffer.deep_copy()
        apply_noise_reduction(gradient_buffer, 3)
        assert gradient_buffer == before
