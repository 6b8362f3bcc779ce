"""Tests for the scroll / dwell classification rules and VelocityTracker."""

import pytest

from readload.inference.signal_classifier import (
    DwellBucket,
    ScrollIntensity,
    VelocityTracker,
    classify_dwell_ratio,
    classify_scroll_up,
    dwell_ratio,
    is_skim_override,
    is_smooth_forward,
)


class TestScrollClassification:
    @pytest.mark.parametrize("px, expected", [
        (1, ScrollIntensity.SMALL),
        (39.9, ScrollIntensity.SMALL),
        (40, ScrollIntensity.MEDIUM),
        (119, ScrollIntensity.MEDIUM),
        (120, ScrollIntensity.LARGE),
        (5000, ScrollIntensity.LARGE),
    ])
    def test_reverse_scroll_buckets(self, px, expected):
        assert classify_scroll_up(px) == expected

    def test_forward_and_zero_not_classified(self):
        assert classify_scroll_up(0) is None
        assert classify_scroll_up(-250) is None

    def test_smooth_forward_needs_short_slow_scroll(self):
        assert is_smooth_forward(120, 400)
        assert not is_smooth_forward(120, 100)      # too quick
        assert not is_smooth_forward(300, 400)      # too far
        assert not is_smooth_forward(-50, 400)      # backwards


class TestDwellClassification:
    @pytest.mark.parametrize("ratio, bucket", [
        (0.0, DwellBucket.SKIMMED),
        (0.59, DwellBucket.SKIMMED),
        (0.6, DwellBucket.STEADY),
        (1.2, DwellBucket.STEADY),
        (1.21, DwellBucket.HIGH_EFFORT),
        (1.6, DwellBucket.HIGH_EFFORT),
        (1.61, DwellBucket.POSSIBLE_STRAIN),
    ])
    def test_ratio_buckets(self, ratio, bucket):
        assert classify_dwell_ratio(ratio) == bucket

    def test_ratio_undefined_without_expected(self):
        assert dwell_ratio(10, 0) is None
        assert dwell_ratio(10, None) is None
        assert dwell_ratio(15, 10) == 1.5

    def test_skim_override_requires_both_conditions(self):
        assert is_skim_override(0.2, 1.3)
        assert not is_skim_override(0.2, 1.0)
        assert not is_skim_override(0.35, 2.0)


class TestVelocityTracker:
    def test_first_sample_has_no_velocity(self, clock):
        vt = VelocityTracker(clock=clock)
        vt.push(500, 10.0)
        assert vt.velocity == 0.0

    def test_first_sample_is_only_a_baseline(self, clock):
        vt = VelocityTracker(clock=clock)
        assert vt.push(3000, 10.0) == (0.0, 0.0)
        delta, _ = vt.push(2950, 10.5)
        assert delta == -50

    def test_exponential_smoothing(self, clock):
        vt = VelocityTracker(clock=clock)
        vt.push(0, 10.0)
        vt.push(100, 10.1)            # 100 px / 100 ms = 1.0 px/ms
        assert vt.velocity == pytest.approx(0.2)
        vt.push(200, 10.2)
        assert vt.velocity == pytest.approx(0.2 * 0.8 + 0.2)

    def test_push_returns_signed_delta_and_interval(self, clock):
        vt = VelocityTracker(clock=clock)
        vt.push(400, 10.0)
        delta, interval = vt.push(350, 10.5)
        assert delta == -50
        assert interval == pytest.approx(500.0)

    def test_skimming_signal_decays_after_two_seconds(self, clock):
        vt = VelocityTracker(clock=clock)
        vt.push(0, 10.0)
        t = 10.0
        for i in range(1, 6):          # 10 px/ms bursts push the EMA past 1.5
            t += 0.1
            vt.push(i * 1000, t)
        assert vt.velocity > 1.5
        assert vt.skimming
        clock.advance(1.9)
        assert vt.skimming
        clock.advance(0.2)
        assert not vt.skimming

    def test_reset(self, clock):
        vt = VelocityTracker(clock=clock)
        vt.push(0, 1.0)
        vt.push(1000, 1.1)
        vt.reset()
        assert vt.velocity == 0.0
        assert not vt.skimming

    def test_reset_keeps_position_baseline(self, clock):
        vt = VelocityTracker(clock=clock)
        vt.push(3000, 10.0)
        vt.reset()
        delta, interval = vt.push(2950, 10.5)
        assert delta == -50
        assert interval == pytest.approx(500.0)
