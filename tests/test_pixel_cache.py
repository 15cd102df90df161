"""Tests for per-pixel accumulation, convergence and propagation."""

import math

import numpy as np
import pytest

from anytrace.core.pixel_cache import (
    STABILITY_THRESHOLD,
    PixelCache,
    PixelColor,
    PixelPosition,
    PixelStatus,
    resolve_color,
)
from anytrace.core.ray import Vector3

GRAY = Vector3(0.25, 0.25, 0.25)


class TestResolveColor:
    """Tests for the tone mapping from radiance to 8-bit."""

    def test_gamma_two(self):
        """Channels are sqrt-encoded and truncated."""
        assert resolve_color(Vector3(0.25, 1.0, 0.0), 1) == (127, 255, 0)

    def test_averages_by_count(self):
        """The sum is divided by the sample count."""
        assert resolve_color(Vector3(1.0, 1.0, 1.0), 4) == (127, 127, 127)

    def test_clamps(self):
        """Out-of-range radiance is clamped; NaN becomes 0."""
        assert resolve_color(Vector3(5.0, -1.0, math.nan), 1) == (255, 0, 0)


class TestPixelCacheBasics:
    """Tests for construction and indexing."""

    def test_starts_not_started(self):
        """Fresh pixels have no samples and no color."""
        cache = PixelCache(4, 3)
        entry = cache.entry(0)
        assert entry.status == PixelStatus.NOT_STARTED
        assert entry.sample_count == 0
        assert entry.accumulated_radiance is None
        assert entry.last_resolved_color is None
        assert cache.resolve(0) is None

    def test_rejects_bad_dimensions(self):
        """Zero or negative sizes are rejected."""
        with pytest.raises(ValueError, match="at least 1x1"):
            PixelCache(0, 3)
        with pytest.raises(ValueError):
            PixelCache(3, -1)

    def test_index_round_trip(self):
        """index = y * width + x."""
        cache = PixelCache(4, 3)
        assert cache.index_of(1, 2) == 9
        assert cache.position_of(9) == PixelPosition(1, 2)

    def test_rejects_non_positive_samples(self):
        """samples_taken must be positive."""
        with pytest.raises(ValueError):
            PixelCache(2, 2).accumulate(0, GRAY, 0)


class TestAccumulation:
    """Tests for accumulate/resolve."""

    def test_first_sample_is_unstable(self):
        """The first resolution moves the pixel to UNSTABLE."""
        cache = PixelCache(2, 2)
        color = cache.accumulate(0, GRAY, 1)
        assert color == PixelColor(127, 127, 127, PixelStatus.UNSTABLE)
        entry = cache.entry(0)
        assert entry.sample_count == 1
        assert entry.accumulated_radiance == GRAY
        assert entry.same_color_streak == 0

    def test_resolve_is_idempotent(self):
        """Resolving twice gives the same color and changes nothing."""
        cache = PixelCache(2, 2)
        cache.accumulate(1, Vector3(0.3, 0.6, 0.9), 3)
        before = cache.entry(1)
        assert cache.resolve(1) == cache.resolve(1)
        assert cache.entry(1) == before

    def test_changing_color_resets_streak(self):
        """A different resolved color starts the streak over."""
        cache = PixelCache(2, 2)
        cache.accumulate(0, GRAY, 1)
        cache.accumulate(0, GRAY, 1)
        assert cache.entry(0).same_color_streak == 1
        cache.accumulate(0, Vector3(1.0, 1.0, 1.0), 1)
        assert cache.entry(0).same_color_streak == 0
        assert cache.entry(0).status == PixelStatus.UNSTABLE

    def test_converges_after_threshold_plus_one_identical_resolutions(self):
        """Streak must exceed the threshold before the pixel freezes."""
        cache = PixelCache(2, 2)
        cache.accumulate(0, GRAY, 1)
        for _ in range(STABILITY_THRESHOLD):
            color = cache.accumulate(0, GRAY, 1)
            assert color.status == PixelStatus.UNSTABLE
        color = cache.accumulate(0, GRAY, 1)
        assert color.status == PixelStatus.FINAL
        assert cache.entry(0).same_color_streak == STABILITY_THRESHOLD + 1

    def test_final_is_sticky(self):
        """FINAL pixels ignore further samples."""
        cache = PixelCache(2, 2, stability_threshold=0)
        cache.accumulate(0, GRAY, 1)
        assert cache.accumulate(0, GRAY, 1).status == PixelStatus.FINAL
        before = cache.entry(0)

        assert cache.accumulate(0, Vector3(1.0, 0.0, 0.0), 5) is None
        assert cache.entry(0) == before

    def test_clear(self):
        """clear returns every pixel to NOT_STARTED."""
        cache = PixelCache(2, 2, stability_threshold=0)
        for index in range(4):
            cache.accumulate(index, GRAY, 1)
            cache.accumulate(index, GRAY, 1)
        assert cache.is_complete()
        cache.clear()
        assert cache.status_counts()[PixelStatus.NOT_STARTED] == 4
        assert cache.entry(3).sample_count == 0

    def test_image_is_top_row_first(self):
        """Row 0 of the image is the top row (y = height - 1)."""
        cache = PixelCache(2, 2)
        cache.accumulate(cache.index_of(0, 1), Vector3(1.0, 1.0, 1.0), 1)
        image = cache.get_image_uint8()
        assert image.shape == (2, 2, 3)
        assert image.dtype == np.uint8
        assert tuple(image[0, 0]) == (255, 255, 255)
        assert tuple(image[1, 0]) == (0, 0, 0)


class TestPropagation:
    """Tests for the near-pixel guess pass."""

    def test_paints_within_radius(self):
        """Unsampled pixels within the rectilinear radius copy the color."""
        cache = PixelCache(9, 1)
        center = cache.index_of(4, 0)
        cache.accumulate(center, Vector3(1.0, 1.0, 1.0), 1)

        painted = set(cache.propagate(radius=3).tolist())

        assert painted == {1, 2, 3, 5, 6, 7}
        for x in (1, 2, 3, 5, 6, 7):
            entry = cache.entry(x)
            assert entry.status == PixelStatus.COPY_NEAR_PIXEL
            assert entry.copy_distance == abs(x - 4)
            assert entry.display_color == (255, 255, 255)
            assert entry.sample_count == 0
            assert entry.accumulated_radiance is None
        assert cache.status(0) == PixelStatus.NOT_STARTED

    def test_manhattan_distance(self):
        """Diagonal neighbours are at distance 2."""
        cache = PixelCache(3, 3)
        cache.accumulate(cache.index_of(1, 1), GRAY, 1)
        cache.propagate(radius=1)
        assert cache.status(cache.index_of(0, 0)) == PixelStatus.NOT_STARTED
        assert cache.entry(cache.index_of(1, 0)).copy_distance == 1

    def test_closer_source_wins(self):
        """A strictly closer source replaces an existing guess."""
        cache = PixelCache(5, 1)
        cache.accumulate(0, Vector3(1.0, 0.0, 0.0), 1)
        cache.propagate(radius=3)
        assert cache.entry(3).copy_distance == 3
        assert cache.entry(3).display_color == (255, 0, 0)

        cache.accumulate(4, Vector3(0.0, 0.0, 1.0), 1)
        cache.propagate(radius=3)
        assert cache.entry(3).copy_distance == 1
        assert cache.entry(3).display_color == (0, 0, 255)

    def test_ties_are_not_overwritten(self):
        """An equally distant source does not replace the guess."""
        cache = PixelCache(3, 1)
        cache.accumulate(0, Vector3(1.0, 0.0, 0.0), 1)
        cache.propagate(radius=1)
        cache.accumulate(2, Vector3(0.0, 0.0, 1.0), 1)
        assert cache.propagate(radius=1).size == 0
        assert cache.entry(1).display_color == (255, 0, 0)

    def test_never_touches_sampled_pixels(self):
        """UNSTABLE and FINAL pixels keep their own colors."""
        cache = PixelCache(2, 1)
        cache.accumulate(0, Vector3(1.0, 0.0, 0.0), 1)
        cache.accumulate(1, Vector3(0.0, 1.0, 0.0), 1)
        assert cache.propagate().size == 0
        assert cache.entry(1).last_resolved_color == (0, 255, 0)

    def test_sampling_a_guess_makes_it_unstable(self):
        """The first real sample replaces the guess."""
        cache = PixelCache(2, 1)
        cache.accumulate(0, Vector3(1.0, 0.0, 0.0), 1)
        cache.propagate()
        color = cache.accumulate(1, Vector3(0.0, 0.0, 1.0), 1)
        assert color.status == PixelStatus.UNSTABLE
        assert cache.entry(1).copy_distance is None
        assert cache.entry(1).same_color_streak == 0
