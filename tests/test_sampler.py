"""Tests for pixel sampling module."""

import numpy as np
import pytest
from PIL import Image

from pigments.sampler import PixelSampler, sample, target_size
from pigments.types import EmptyInputError, ImageProcessError

from conftest import make_split_image


class TestTargetSize:
    """Test cases for target_size function."""

    def test_within_bound_unchanged(self):
        assert target_size(400, 300, 500) == (400, 300)

    def test_exact_bound_unchanged(self):
        assert target_size(500, 200, 500) == (500, 200)

    def test_landscape_downscale(self):
        assert target_size(2000, 1000, 500) == (500, 250)

    def test_portrait_downscale(self):
        assert target_size(1000, 2000, 500) == (250, 500)

    def test_extreme_aspect_keeps_one_pixel(self):
        """Test that the short side never collapses to zero."""
        assert target_size(10000, 1, 100) == (100, 1)

    def test_no_bound(self):
        assert target_size(5000, 4000, None) == (5000, 4000)


class TestSample:
    """Test cases for sample function."""

    def test_native_resolution(self, red_blue_image):
        """Test that small images are sampled one observation per pixel."""
        result = sample(red_blue_image, max_dimension=500)

        assert result.observations.shape == (100 * 100, 3)
        assert result.observations.dtype == np.float64
        assert result.total == 10000
        assert not result.downsampled

    def test_row_major_order(self):
        """Test that observations follow row-major pixel order."""
        image = np.zeros((2, 3, 3), dtype=np.uint8)
        image[0, 1] = [1, 2, 3]
        image[1, 0] = [4, 5, 6]

        result = sample(image)

        np.testing.assert_array_equal(result.observations[1], [1, 2, 3])
        np.testing.assert_array_equal(result.observations[3], [4, 5, 6])

    def test_downsampling(self):
        """Test that a 2000x1000 image is sampled from a 500x250 grid."""
        image = make_split_image(2000, 1000)

        result = sample(image, max_dimension=500)

        assert (result.width, result.height) == (500, 250)
        assert (result.original_width, result.original_height) == (2000, 1000)
        assert result.total == 500 * 250
        assert result.downsampled

    def test_observations_in_channel_range(self):
        """Test that Lanczos ringing never leaves the channel range."""
        image = make_split_image(1200, 800, left=(255, 255, 255), right=(0, 0, 0))

        result = sample(image, max_dimension=300)

        assert result.observations.min() >= 0
        assert result.observations.max() <= 255

    def test_observations_read_only(self, red_blue_image):
        result = sample(red_blue_image)

        with pytest.raises(ValueError):
            result.observations[0, 0] = 1.0

    def test_pil_input(self, red_blue_image):
        """Test that PIL images in other modes are converted to RGB."""
        rgba = Image.fromarray(red_blue_image).convert("RGBA")

        result = sample(rgba)

        assert result.observations.shape == (10000, 3)
        np.testing.assert_array_equal(result.observations[0], [255, 0, 0])

    def test_grayscale_array(self):
        image = np.full((4, 4), 128, dtype=np.uint8)

        result = sample(image)

        np.testing.assert_array_equal(result.observations, np.full((16, 3), 128.0))

    def test_rgba_array_drops_alpha(self):
        image = np.zeros((2, 2, 4), dtype=np.uint8)
        image[..., :3] = [10, 20, 30]
        image[..., 3] = 0

        result = sample(image)

        np.testing.assert_array_equal(result.observations, np.tile([10, 20, 30], (4, 1)))

    def test_deterministic(self):
        image = np.random.RandomState(3).randint(0, 256, (800, 600, 3), dtype=np.uint8)

        first = sample(image, max_dimension=200)
        second = sample(image, max_dimension=200)

        np.testing.assert_array_equal(first.observations, second.observations)

    def test_empty_image(self):
        """Test that an image without pixels raises EmptyInputError."""
        with pytest.raises(EmptyInputError):
            sample(np.zeros((0, 10, 3), dtype=np.uint8))

    def test_empty_pil_image(self):
        with pytest.raises(EmptyInputError):
            sample(Image.new("RGB", (0, 0)))

    def test_bad_channel_count(self):
        with pytest.raises(ImageProcessError, match="Expected 3 or 4 channels"):
            sample(np.zeros((5, 5, 2), dtype=np.uint8))

    def test_unsupported_type(self):
        with pytest.raises(ImageProcessError):
            sample([[0, 0, 0]])

    def test_invalid_max_dimension(self, red_blue_image):
        with pytest.raises(ValueError, match="max_dimension"):
            sample(red_blue_image, max_dimension=0)

    def test_float_values_kept_at_native_size(self):
        """Test that fractional channel values survive when no resize is needed."""
        image = np.full((4, 4, 3), 10.7)

        result = sample(image, max_dimension=500)

        np.testing.assert_allclose(result.observations, np.full((16, 3), 10.7))

    def test_float_values_rounded_before_resize(self):
        """Test that a resized float image is rounded, not truncated, to 8 bits."""
        image = np.full((20, 20, 3), 10.7)

        result = sample(image, max_dimension=10)

        assert result.total == 100
        np.testing.assert_array_equal(result.observations, np.full((100, 3), 11.0))

    def test_float_values_clipped(self):
        image = np.full((2, 2, 3), 300.5)
        image[0, 0] = -4.0

        result = sample(image)

        assert result.observations.max() == 255.0
        assert result.observations.min() == 0.0

    def test_input_array_not_modified(self):
        image = np.full((3, 3, 3), 300.0)

        sample(image)

        assert image[0, 0, 0] == 300.0

    @pytest.mark.parametrize("bad", [np.nan, np.inf, -np.inf])
    def test_non_finite_pixels(self, bad):
        """Test that NaN or infinite pixels raise ImageProcessError."""
        image = np.full((4, 4, 3), 10.0)
        image[1, 2, 0] = bad

        with pytest.raises(ImageProcessError, match="non-finite"):
            sample(image)


class TestPixelSampler:
    """Test cases for PixelSampler class."""

    def test_uses_configured_bound(self):
        sampler = PixelSampler(max_dimension=50)

        result = sampler.sample(make_split_image(200, 100))

        assert (result.width, result.height) == (50, 25)

    def test_unbounded(self):
        sampler = PixelSampler(max_dimension=None)

        result = sampler.sample(make_split_image(600, 20))

        assert result.total == 600 * 20

    def test_invalid_bound(self):
        with pytest.raises(ValueError):
            PixelSampler(max_dimension=-1)
