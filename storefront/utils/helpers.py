# ==============================================================================
# HELPER UTILITIES
# ==============================================================================
# Common utility functions used across the application
# ==============================================================================

from __future__ import annotations

import math
import random
import time
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

from storefront.core.constants import OrderConstants


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def generate_order_number(now_ms: Optional[int] = None) -> str:
    """
    Generate a human-readable order number.

    Format is ``ORD`` + last 8 digits of the millisecond timestamp
    + 4 zero-padded random digits, e.g. ``ORD123456780042``.

    Args:
        now_ms: Timestamp override in milliseconds

    Returns:
        Order number string
    """
    timestamp = str(now_ms if now_ms is not None else int(time.time() * 1000))
    suffix = str(random.randint(0, 9999)).zfill(4)
    return f"{OrderConstants.NUMBER_PREFIX}{timestamp[-8:]}{suffix}"


def round_money(value: float) -> float:
    """Round a currency amount to cents, halves away from zero."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def round_half_up(value: float) -> int:
    """Round to the nearest whole unit, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_cents(amount: float) -> int:
    """Convert a currency amount to integer cents."""
    return round_half_up(amount * 100)


def calculate_offset(page: int, page_size: int) -> int:
    """Calculate database offset from page number."""
    return (page - 1) * page_size


def paginate_results(
    page: int,
    page_size: int,
    total: int,
) -> Dict[str, Any]:
    """
    Create pagination metadata.

    Args:
        page: Current page number (1-indexed)
        page_size: Items per page
        total: Total item count

    Returns:
        Pagination metadata dict
    """
    pages = math.ceil(total / page_size) if total > 0 else 0

    return {
        "current_page": page,
        "total_pages": pages,
        "total_items": total,
        "page_size": page_size,
        "has_next": page < pages,
        "has_prev": page > 1,
    }
