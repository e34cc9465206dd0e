# ==============================================================================
# POST-COMMIT EFFECTS - Best-Effort Side Effects
# ==============================================================================
# Secondary effects (analytics, notifications, cart clearing) that run
# after the primary write and must never fail the request
# ==============================================================================

from __future__ import annotations

import logging
from functools import partial
from typing import Any, Awaitable, Callable, List, Tuple

logger = logging.getLogger(__name__)


class PostCommitEffects:
    """
    Ordered list of named async callables run after a primary write.

    Each effect is isolated: a failure is logged with its traceback
    and the remaining effects still run.

    Example:
        >>> effects = PostCommitEffects("order ORD123")
        >>> effects.add("clear_cart", cart_service.clear, user_id)
        >>> await effects.run()
    """

    def __init__(self, label: str) -> None:
        self._label = label
        self._effects: List[Tuple[str, Callable[[], Awaitable[Any]]]] = []

    def add(
        self,
        name: str,
        func: Callable[..., Awaitable[Any]],
        *args: Any,
        **kwargs: Any,
    ) -> "PostCommitEffects":
        """Queue an effect; arguments are bound now and awaited on run."""
        self._effects.append((name, partial(func, *args, **kwargs)))
        return self

    def __len__(self) -> int:
        return len(self._effects)

    async def run(self) -> int:
        """
        Run every queued effect in order.

        Returns:
            Number of effects that failed
        """
        failures = 0
        for name, effect in self._effects:
            try:
                await effect()
            except Exception:
                failures += 1
                logger.exception(f"Post-commit effect '{name}' failed for {self._label}")
        self._effects.clear()
        return failures
