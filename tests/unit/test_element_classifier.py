"""Tests for semantic element scoring and event-type classification."""

from __future__ import annotations

import pytest

from smartswap.intent.categories import Category
from smartswap.tracking.classifier import ElementClassifier
from smartswap.tracking.dom import ElementNode
from smartswap.tracking.models import ElementDescriptor, SmartEventType


@pytest.fixture
def classifier():
    return ElementClassifier()


def button(text: str = "", **kwargs) -> ElementNode:
    return ElementNode(tag="BUTTON", text=text, **kwargs)


class TestFindActionElement:
    def test_walks_up_to_button(self, classifier):
        btn = button("Compare Specs")
        icon = ElementNode(tag="span", text="", parent=btn)
        assert classifier.find_action_element(icon) is btn

    def test_role_button_counts(self, classifier):
        div = ElementNode(tag="div", text="Shop now", attributes={"role": "button"})
        assert classifier.find_action_element(div) is div

    def test_depth_limit(self, classifier):
        node = button("Buy now")
        for _ in range(5):
            node = ElementNode(tag="span", parent=node)
        assert classifier.find_action_element(node) is None

    def test_native_input_fallback(self):
        strict = ElementClassifier(max_depth=0)
        field = ElementNode(tag="input", attributes={"type": "submit"})
        assert strict.find_action_element(field) is field

    def test_plain_text_has_no_action_element(self, classifier):
        assert classifier.find_action_element(ElementNode(tag="p", text="hello")) is None


class TestScoring:
    def test_text_matches_accumulate(self, classifier):
        score = classifier.score(ElementDescriptor(tag="button", text="Add to Cart"))
        assert score.text_score == 10 + 5 + 8
        assert score.total == score.text_score

    def test_class_and_id_are_scored(self, classifier):
        score = classifier.score(ElementDescriptor(tag="button", class_list=("btn-cta",), id="hero-cta"))
        # btn-cta, cta, hero-cta
        assert score.class_score == 5 + 5 + 5

    def test_aria_label_is_scored(self, classifier):
        score = classifier.score(ElementDescriptor(tag="button", aria_label="Add to cart"))
        assert score.aria_score == 5 + 8

    def test_category_guess(self, classifier):
        assert classifier.score(ElementDescriptor(tag="a", text="Shop Gaming Monitors")).category_guess == (
            Category.GAMING
        )
        assert classifier.guess_category("Student discount") == Category.STUDENT
        assert classifier.guess_category("Contact us") is None


class TestClassify:
    def test_cart_action(self, classifier):
        result = classifier.classify(button("Add to Cart"))
        assert result.event_type == SmartEventType.CART_ACTION

    def test_compare_click_from_nested_target(self, classifier):
        btn = button("Compare Specs")
        result = classifier.classify(ElementNode(tag="svg", parent=btn))
        assert result.element is btn
        assert result.event_type == SmartEventType.COMPARE_CLICK

    def test_link_is_navigation(self, classifier):
        nav = ElementNode(tag="nav")
        link = ElementNode(tag="a", text="Explore", classes=("nav-link",), parent=nav)
        result = classifier.classify(link)
        assert result.event_type == SmartEventType.NAV_CLICK

    def test_product_card_survives_low_score(self, classifier):
        card = ElementNode(tag="div", attributes={"data-product-card": "", "data-sku": "MON-27"})
        result = classifier.classify(card)
        assert result.event_type == SmartEventType.PRODUCT_CLICK
        assert result.score.total == 0
        assert result.descriptor.data_attributes == {"data-product-card": "", "data-sku": "MON-27"}

    def test_cart_wording_beats_product_card(self, classifier):
        card = ElementNode(tag="div", attributes={"data-product-card": ""})
        result = classifier.classify(button("Buy", parent=card))
        assert result.event_type == SmartEventType.CART_ACTION

    def test_generic_cta(self, classifier):
        result = classifier.classify(button("Get Started", classes=("btn-cta",)))
        assert result.event_type == SmartEventType.CTA_CLICK

    def test_low_signal_button_is_dropped(self, classifier):
        assert classifier.classify(button("OK")) is None

    def test_non_actionable_target_is_dropped(self, classifier):
        assert classifier.classify(ElementNode(tag="div", text="Free shipping")) is None


class TestDescriptor:
    def test_text_is_trimmed_and_capped(self, classifier):
        descriptor = classifier.describe(button("  " + "x" * 150))
        assert descriptor.text == "x" * 100

    def test_class_list_is_capped(self, classifier):
        classes = tuple(f"c{i}" for i in range(15))
        assert len(classifier.describe(button("Buy", classes=classes)).class_list) == 10

    def test_tag_is_lower_case(self, classifier):
        assert classifier.describe(button("Buy")).tag == "button"
