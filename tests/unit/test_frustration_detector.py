"""Tests for rage-click detection."""

from __future__ import annotations

import pytest

from smartswap.tracking.dom import ElementNode
from smartswap.tracking.frustration import FrustrationDetector, element_key


@pytest.fixture
def detector(clock):
    return FrustrationDetector(threshold=3, window_ms=1000, clock=clock)


class TestDetection:
    def test_third_click_in_window_is_friction(self, detector, clock):
        assert detector.record("buy") is False
        clock.advance(200)
        assert detector.record("buy") is False
        clock.advance(200)
        assert detector.record("buy") is True

    def test_window_resets_after_detection(self, detector, clock):
        for _ in range(3):
            detector.record("buy")
        clock.advance(10)
        assert detector.record("buy") is False
        assert detector.record("buy") is False
        assert detector.record("buy") is True

    def test_old_clicks_fall_out_of_window(self, detector, clock):
        detector.record("buy")
        clock.advance(500)
        detector.record("buy")
        clock.advance(500)
        # first click is exactly window_ms old and no longer counts
        assert detector.record("buy") is False

    def test_keys_are_independent(self, detector):
        detector.record("a")
        detector.record("b")
        detector.record("a")
        assert detector.record("b") is False
        assert detector.size == 2

    def test_clear(self, detector):
        detector.record("a")
        detector.clear()
        assert detector.size == 0

    def test_threshold_must_be_positive(self, clock):
        with pytest.raises(ValueError):
            FrustrationDetector(threshold=0, clock=clock)

    def test_threshold_one_fires_every_time(self, clock):
        single = FrustrationDetector(threshold=1, window_ms=1000, clock=clock)
        assert single.record("x") is True
        assert single.record("x") is True


class TestElementKey:
    def test_prefers_id(self):
        assert element_key(ElementNode(tag="button", id="checkout", text="Go")) == "checkout"

    def test_falls_back_to_test_id(self):
        node = ElementNode(tag="button", attributes={"data-testid": "add-btn"})
        assert element_key(node) == "add-btn"

    def test_tag_and_text_prefix(self):
        node = ElementNode(tag="button", text="Add to cart for this monitor")
        assert element_key(node) == "BUTTON-Add to cart for this"
