# ==============================================================================
# UTILITIES PACKAGE
# ==============================================================================

"""
Utilities
=========

Helper functions for timestamps, money rounding, order numbers and pagination.
"""

from storefront.utils.helpers import (
    utc_now,
    generate_order_number,
    round_money,
    round_half_up,
    to_cents,
    calculate_offset,
    paginate_results,
)

__all__ = [
    "utc_now",
    "generate_order_number",
    "round_money",
    "round_half_up",
    "to_cents",
    "calculate_offset",
    "paginate_results",
]
