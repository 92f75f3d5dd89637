"""Tests for the rolling jitter window."""

import pytest

from helpers import ms

from shutterguide.motion import JitterWindow


class TestJitterWindow:
    def setup_method(self):
        self.window = JitterWindow(window_ns=ms(500), max_jitter_deg=2.0, min_frames=3)

    def test_empty_window(self):
        assert self.window.jitter() == 0.0
        assert not self.window.is_stable()

    def test_mean_delta(self):
        self.window.add(ms(0), 0.0, 0.0, 0.0)
        self.window.add(ms(20), 3.0, 0.0, 0.0)
        self.window.add(ms(40), 3.0, 3.0, 3.0)
        # (3/3 + 6/3) / 2
        assert self.window.jitter() == pytest.approx(1.5)
        assert self.window.is_stable()

    def test_yaw_wrap_is_not_a_jump(self):
        self.window.add(ms(0), 179.0, 0.0, 0.0)
        self.window.add(ms(20), -179.0, 0.0, 0.0)
        self.window.add(ms(40), 179.0, 0.0, 0.0)
        assert self.window.jitter() == pytest.approx(2.0 / 3.0)
        assert self.window.is_low()

    def test_old_entries_dropped(self):
        self.window.add(ms(0), 90.0, 0.0, 0.0)
        self.window.add(ms(600), 0.0, 0.0, 0.0)
        self.window.add(ms(620), 0.0, 0.0, 0.0)
        assert self.window.jitter() == 0.0

    def test_out_of_order_sample_restarts(self):
        self.window.add(ms(100), 0.0, 0.0, 0.0)
        self.window.add(ms(120), 30.0, 0.0, 0.0)
        self.window.add(ms(50), 0.0, 0.0, 0.0)
        assert self.window.jitter() == 0.0
        assert not self.window.is_stable()
