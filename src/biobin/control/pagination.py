import logging
from typing import Callable, Sequence

logger = logging.getLogger(__name__)

LIMIT_OPTIONS: tuple[int, ...] = (10, 25, 50, 100)
DEFAULT_LIMIT = 10


class LimitController:
    """Holds the number of rows requested for a table view.

    Changing it calls ``on_change`` with the new limit, which re-runs
    ingestion. Nothing is sliced here: the backend bounds the rows.
    """

    def __init__(self, on_change: Callable[[int], None], options: Sequence[int] = LIMIT_OPTIONS,
                 initial: int = DEFAULT_LIMIT):
        if not options:
            raise ValueError("limit options must not be empty")
        if any(isinstance(n, bool) or not isinstance(n, int) or n < 1 for n in options):
            raise ValueError(f"limit options must be positive integers, got {list(options)}")
        self.options: tuple[int, ...] = tuple(options)
        if initial not in self.options:
            raise ValueError(f"initial limit {initial} is not one of {list(self.options)}")
        self.on_change = on_change
        self.limit = initial

    def select(self, limit: int) -> bool:
        """Switch to ``limit``; returns True when that re-triggered ingestion."""
        if limit not in self.options:
            raise ValueError(f"limit {limit} is not one of {list(self.options)}")
        if limit == self.limit:
            return False
        logger.debug("Row limit %d -> %d", self.limit, limit)
        self.limit = limit
        self.on_change(limit)
        return True
