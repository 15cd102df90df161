"""Tests for the shuffled pixel scheduler."""

import numpy as np
import pytest

from anytrace.core.pixel_cache import PixelStatus
from anytrace.core.ray import Vector3
from anytrace.core.scheduler import PixelScheduler


class TestSchedulerTraversal:
    """Tests for pass traversal."""

    def test_full_pass_visits_every_pixel_once(self, rng):
        """One pass is a permutation of all pixel indices."""
        scheduler = PixelScheduler(5, 4, rng)
        visited = []
        for _ in range(20):
            visited.append(scheduler.current_index())
            scheduler.next()
        assert sorted(visited) == list(range(20))
        assert scheduler.progress() == (1, 0)

    def test_positions_in_range(self, rng):
        """current() returns coordinates inside the image."""
        scheduler = PixelScheduler(5, 4, rng)
        for _ in range(20):
            position = scheduler.current()
            assert 0 <= position.x < 5
            assert 0 <= position.y < 4
            scheduler.next()

    def test_order_is_shuffled(self):
        """The visitation order is not scanline order."""
        scheduler = PixelScheduler(32, 32, np.random.default_rng(0))
        assert list(scheduler.visitation_order) != list(range(32 * 32))

    def test_same_order_each_pass_by_default(self, rng):
        """Without reshuffling every pass repeats the order."""
        scheduler = PixelScheduler(4, 4, rng)
        first = scheduler.visitation_order.copy()
        for _ in range(16):
            scheduler.next()
        np.testing.assert_array_equal(scheduler.visitation_order, first)

    def test_reshuffle_each_pass(self):
        """With reshuffling each pass draws a new permutation."""
        scheduler = PixelScheduler(16, 16, np.random.default_rng(1), reshuffle_each_pass=True)
        first = scheduler.visitation_order.copy()
        for _ in range(256):
            scheduler.next()
        second = scheduler.visitation_order
        assert sorted(second.tolist()) == list(range(256))
        assert not np.array_equal(first, second)

    def test_progress(self, rng):
        """progress reports (passes, cursor)."""
        scheduler = PixelScheduler(3, 3, rng)
        for _ in range(11):
            scheduler.next()
        assert scheduler.progress() == (1, 2)

    def test_single_pixel(self, rng):
        """A 1x1 target completes a pass on every step."""
        scheduler = PixelScheduler(1, 1, rng)
        scheduler.next()
        scheduler.next()
        assert scheduler.progress() == (2, 0)


class TestSchedulerInvalidation:
    """Tests for invalidate."""

    def test_invalidate_resets_everything(self, rng):
        """Counters and cache are cleared."""
        scheduler = PixelScheduler(3, 3, rng)
        for _ in range(12):
            scheduler.cache.accumulate(scheduler.current_index(), Vector3(0.5, 0.5, 0.5), 1)
            scheduler.next()
        scheduler.invalidate()
        assert scheduler.progress() == (0, 0)
        assert scheduler.cache.status_counts()[PixelStatus.NOT_STARTED] == 9

    def test_invalidate_resizes(self, rng):
        """New dimensions reallocate the cache and the permutation."""
        scheduler = PixelScheduler(3, 3, rng)
        scheduler.invalidate(width=4, height=2)
        assert (scheduler.width, scheduler.height) == (4, 2)
        assert sorted(scheduler.visitation_order.tolist()) == list(range(8))

    def test_invalidate_rejects_bad_size(self, rng):
        """Zero-sized targets are rejected."""
        with pytest.raises(ValueError):
            PixelScheduler(3, 3, rng).invalidate(width=0)


class TestSchedulerPropagation:
    """Tests for propagate_pixels."""

    def test_propagation_reaches_sink(self, rng, recording_sink):
        """Every painted pixel is sent to the sink as COPY_NEAR_PIXEL."""
        scheduler = PixelScheduler(7, 1, rng)
        scheduler.cache.accumulate(3, Vector3(1.0, 1.0, 1.0), 1)

        painted = scheduler.propagate_pixels(recording_sink, radius=2)

        assert painted == 4
        xs = sorted(position.x for position, _ in recording_sink.pixels)
        assert xs == [1, 2, 4, 5]
        for position, color in recording_sink.pixels:
            assert color.status == PixelStatus.COPY_NEAR_PIXEL
            assert color.distance == abs(position.x - 3)
            assert color.rgb == (255, 255, 255)
