# ==============================================================================
# HELPER TESTS
# ==============================================================================
# Pure functions: money rounding, pagination, order numbers and pricing rules
# ==============================================================================

import re

import pytest

from storefront.services.order_service import can_transition, shipping_cost_for
from storefront.services.product_service import discount_percentage
from storefront.utils.helpers import (
    calculate_offset,
    generate_order_number,
    paginate_results,
    round_half_up,
    round_money,
    to_cents,
)


class TestOrderNumber:
    """Tests for order number generation."""

    def test_format(self):
        """Test ORD prefix, 8 timestamp digits and 4 random digits."""
        number = generate_order_number()
        assert re.fullmatch(r"ORD\d{12}", number)

    def test_uses_last_timestamp_digits(self):
        """Test the timestamp part is the tail of the millisecond clock."""
        number = generate_order_number(now_ms=1712345678901)
        assert number.startswith("ORD45678901")
        assert len(number) == 15


class TestMoney:
    """Tests for currency rounding."""

    @pytest.mark.parametrize("value,expected", [(10.005, 10.01), (2.675, 2.68), (1.004, 1.0), (0.1 + 0.2, 0.3)])
    def test_round_money(self, value, expected):
        """Test cents rounding with halves away from zero."""
        assert round_money(value) == expected

    def test_round_half_up(self):
        """Test whole-unit rounding."""
        assert round_half_up(36.5) == 37
        assert round_half_up(36.49) == 36

    def test_to_cents(self):
        """Test conversion to integer cents."""
        assert to_cents(19.99) == 1999
        assert to_cents(0.5) == 50
        assert to_cents(300) == 30000


class TestPagination:
    """Tests for pagination metadata."""

    def test_offset(self):
        assert calculate_offset(1, 20) == 0
        assert calculate_offset(3, 20) == 40

    def test_middle_page(self):
        """Test navigation flags on a middle page."""
        meta = paginate_results(page=2, page_size=10, total=25)
        assert meta["total_pages"] == 3
        assert meta["has_next"] is True
        assert meta["has_prev"] is True

    def test_empty(self):
        """Test an empty result set has zero pages."""
        meta = paginate_results(page=1, page_size=10, total=0)
        assert meta["total_pages"] == 0
        assert meta["has_next"] is False
        assert meta["has_prev"] is False


class TestPricingRules:
    """Tests for shipping, discount and status rules."""

    def test_shipping(self):
        """Test free shipping strictly above the threshold."""
        assert shipping_cost_for(1000.01) == 0.0
        assert shipping_cost_for(1000.0) == 100.0
        assert shipping_cost_for(0) == 100.0

    def test_discount_percentage(self):
        assert discount_percentage(120.0, 90.0) == 25
        assert discount_percentage(0, 0) == 0
        assert discount_percentage(100.0, 100.0) == 0

    @pytest.mark.parametrize("current,requested", [
        ("pending", "confirmed"),
        ("pending", "cancelled"),
        ("confirmed", "processing"),
        ("processing", "shipped"),
        ("shipped", "delivered"),
    ])
    def test_allowed_transitions(self, current, requested):
        assert can_transition(current, requested)

    @pytest.mark.parametrize("current,requested", [
        ("pending", "shipped"),
        ("shipped", "cancelled"),
        ("delivered", "cancelled"),
        ("cancelled", "confirmed"),
        ("unknown", "confirmed"),
    ])
    def test_rejected_transitions(self, current, requested):
        assert not can_transition(current, requested)
