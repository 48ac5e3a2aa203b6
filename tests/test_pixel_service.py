import numpy as np
import pytest

from conftest import make_buffer, random_buffer
from imagemanip.models.color import Color, PixelFormat
from imagemanip.models.errors import InvalidParameterError
from imagemanip.models.image_buffer import ImageBuffer
from imagemanip.services.pixel_service import PixelService


@pytest.fixture
def service():
    return PixelService()


def rgb(buffer: ImageBuffer, x: int, y: int):
    return buffer.get(x, y).as_tuple()[:3]


class TestRecolor:

    def test_invert_is_involution(self, service):
        buffer = random_buffer(7, 5, PixelFormat.RGBA)
        original = buffer.copy()
        service.invert_colors(buffer)
        assert buffer != original
        service.invert_colors(buffer)
        assert buffer == original

    def test_invert_keeps_alpha(self, service):
        buffer = make_buffer([[(0, 100, 255, 90)]], PixelFormat.RGBA)
        service.invert_colors(buffer)
        assert buffer.get(0, 0) == Color(255, 155, 0, 90)

    def test_grayscale_uses_luma(self, service):
        buffer = make_buffer([[(100, 150, 200), (255, 255, 255)]])
        service.grayscale(buffer)
        assert rgb(buffer, 0, 0) == (140, 140, 140)
        assert rgb(buffer, 1, 0) == (255, 255, 255)

    def test_replace_color_preserves_shading(self, service):
        buffer = make_buffer([[(105, 95, 100), (0, 0, 0), (111, 100, 100)]])
        service.replace_color(buffer, (100, 100, 100), (200, 50, 0), 10)
        assert rgb(buffer, 0, 0) == (205, 45, 0)
        assert rgb(buffer, 1, 0) == (0, 0, 0)
        assert rgb(buffer, 2, 0) == (111, 100, 100)

    def test_replace_color_clamps(self, service):
        buffer = make_buffer([[(110, 90, 100)]])
        service.replace_color(buffer, (100, 100, 100), (250, 5, 0), 10)
        assert rgb(buffer, 0, 0) == (255, 0, 0)

    def test_replace_color_zero_tolerance_is_exact(self, service):
        buffer = make_buffer([[(100, 100, 100), (100, 100, 101)]])
        service.replace_color(buffer, (100, 100, 100), (1, 2, 3), 0)
        assert rgb(buffer, 0, 0) == (1, 2, 3)
        assert rgb(buffer, 1, 0) == (100, 100, 101)

    @pytest.mark.parametrize("tolerance", [0, 5, 40, 255])
    def test_replace_color_leaves_far_pixels(self, service, tolerance):
        buffer = random_buffer(9, 9, seed=3)
        original = buffer.copy()
        target = np.array([128, 128, 128])
        service.replace_color(buffer, tuple(target), (0, 0, 0), tolerance)
        far = np.any(np.abs(original.pixels[..., :3].astype(int) - target) > tolerance, axis=-1)
        assert np.array_equal(buffer.pixels[far], original.pixels[far])

    def test_negative_tolerance_rejected(self, service):
        buffer = make_buffer([[(1, 2, 3)]])
        with pytest.raises(InvalidParameterError):
            service.replace_color(buffer, (1, 2, 3), (0, 0, 0), -1)
        with pytest.raises(InvalidParameterError):
            service.selective_desaturate(buffer, (1, 2, 3), -1)

    def test_colorize_clamps_tint(self, service):
        buffer = make_buffer([[(250, 0, 100)]])
        service.colorize(buffer, 10, 20, 30)
        assert rgb(buffer, 0, 0) == (255, 20, 130)
        service.colorize(buffer, -50, 300, 0)
        assert rgb(buffer, 0, 0) == (255, 255, 130)

    def test_duotone_endpoints(self, service):
        buffer = make_buffer([[(0, 0, 0), (255, 255, 255)]])
        service.duotone(buffer, (10, 20, 30), (200, 180, 160))
        assert rgb(buffer, 0, 0) == (10, 20, 30)
        assert np.allclose(rgb(buffer, 1, 0), (200, 180, 160), atol=1)

    def test_selective_desaturate(self, service):
        buffer = make_buffer([[(230, 20, 10), (0, 0, 255)]])
        service.selective_desaturate(buffer, (255, 0, 0), 50)
        assert rgb(buffer, 0, 0) == (230, 20, 10)
        assert rgb(buffer, 1, 0) == (28, 28, 28)

    def test_selective_desaturate_zero_tolerance(self, service):
        buffer = make_buffer([[(255, 0, 0), (254, 0, 0)]])
        service.selective_desaturate(buffer, (255, 0, 0), 0)
        assert rgb(buffer, 0, 0) == (255, 0, 0)
        assert rgb(buffer, 1, 0) == (76, 76, 76)

    def test_posterize_256_is_identity(self, service):
        buffer = random_buffer(8, 8, seed=5)
        original = buffer.copy()
        service.posterize(buffer, 256)
        assert buffer == original

    def test_posterize_levels(self, service):
        buffer = make_buffer([[(100, 31, 32), (255, 0, 63)]])
        service.posterize(buffer, 4)
        assert rgb(buffer, 0, 0) == (128, 0, 64)
        assert rgb(buffer, 1, 0) == (255, 0, 64)

    def test_posterize_clamps_levels(self, service):
        buffer = make_buffer([[(200, 63, 64)]])
        service.posterize(buffer, 1)
        assert rgb(buffer, 0, 0) == (255, 0, 128)


class TestTone:

    def test_brightness(self, service):
        buffer = make_buffer([[(250, 10, 0)]])
        service.adjust_brightness(buffer, 50)
        assert rgb(buffer, 0, 0) == (255, 60, 50)
        service.adjust_brightness(buffer, -255)
        assert rgb(buffer, 0, 0) == (0, 0, 0)

    @pytest.mark.parametrize("level", [-256, 256])
    def test_brightness_range(self, service, level):
        buffer = make_buffer([[(1, 2, 3)]])
        with pytest.raises(InvalidParameterError):
            service.adjust_brightness(buffer, level)
        assert rgb(buffer, 0, 0) == (1, 2, 3)

    def test_contrast_extremes(self, service):
        flat = make_buffer([[(0, 90, 255)]])
        service.adjust_contrast(flat, 100)
        assert rgb(flat, 0, 0) == (127, 127, 127)

        steep = make_buffer([[(200, 50, 128)]])
        service.adjust_contrast(steep, -100)
        assert rgb(steep, 0, 0) == (255, 0, 129)

    @pytest.mark.parametrize("level", [-101, 101])
    def test_contrast_range(self, service, level):
        with pytest.raises(InvalidParameterError):
            service.adjust_contrast(make_buffer([[(1, 2, 3)]]), level)

    def test_vignette_zero_strength_is_identity(self, service):
        buffer = random_buffer(6, 4, PixelFormat.RGBA, seed=9)
        original = buffer.copy()
        service.vignette(buffer, 0.0)
        assert buffer == original

    def test_vignette_darkens_corners(self, service):
        buffer = ImageBuffer.blank(3, 3, PixelFormat.RGB, Color(255, 255, 255))
        service.vignette(buffer, 1.0)
        assert rgb(buffer, 0, 0) == (0, 0, 0)
        center = buffer.get(1, 1).red
        assert 0 < center < 255

    def test_vignette_strength_out_of_range_is_clamped(self, service):
        buffer = ImageBuffer.blank(4, 4, PixelFormat.RGB, Color(200, 200, 200))
        service.vignette(buffer, 5.0)
        assert buffer.pixels[..., :3].min() >= 0
        service.vignette(buffer, -1.0)


class TestConvolution:

    def test_edge_detect_flat_image(self, service):
        buffer = ImageBuffer.blank(4, 4, PixelFormat.RGB, Color(80, 80, 80))
        service.edge_detect(buffer)
        assert np.all(buffer.pixels[..., :3] == 127)

    def test_blur_flat_image_unchanged(self, service):
        buffer = ImageBuffer.blank(5, 5, PixelFormat.RGB, Color(33, 66, 99))
        original = buffer.copy()
        service.blur(buffer, 3)
        assert buffer == original

    def test_blur_spreads_single_pixel(self, service):
        buffer = ImageBuffer.blank(3, 3, PixelFormat.RGB)
        buffer.set(1, 1, Color(255, 255, 255))
        service.blur(buffer)
        assert buffer.get(1, 1).red == 63
        assert buffer.get(1, 0).red == 31
        assert buffer.get(0, 0).red == 15

    def test_blur_passes_compound_and_clamp(self, service):
        once = ImageBuffer.blank(5, 5, PixelFormat.RGB)
        once.set(2, 2, Color(255, 255, 255))
        zero = once.copy()
        twice = once.copy()
        service.blur(once, 1)
        service.blur(zero, 0)
        service.blur(twice, 2)
        assert once == zero
        assert twice != once
