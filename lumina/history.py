"""
Bounded log of completed calculations.
"""
import itertools
import logging
import time
from dataclasses import dataclass
from typing import List, Optional

from .config import HISTORY_CAPACITY, HISTORY_SIGNIFICANT_DIGITS
from .engine import Calculation
from .numerals import format_number, round_significant

logger = logging.getLogger(__name__)

_sequence = itertools.count()


def new_entry_id() -> str:
    """Time-based id with a sequence suffix so ids never repeat within a process."""
    return f"{time.time_ns()}-{next(_sequence)}"


@dataclass(frozen=True)
class HistoryEntry:
    """One completed calculation."""
    id: str
    expression: str
    result: str

    @classmethod
    def from_calculation(
        cls,
        calculation: Calculation,
        significant_digits: int = HISTORY_SIGNIFICANT_DIGITS
    ) -> "HistoryEntry":
        def show(value: float) -> str:
            return format_number(round_significant(value, significant_digits))

        expression = (
            f"{show(calculation.left)} {calculation.operator.symbol} "
            f"{show(calculation.right)}"
        )
        return cls(
            id=new_entry_id(),
            expression=expression,
            result=show(calculation.result),
        )


class HistoryLog:
    """Completed calculations, newest first, capped at a fixed capacity."""

    def __init__(self, capacity: int = HISTORY_CAPACITY):
        """
        Initialize an empty log.

        Args:
            capacity: Maximum number of entries kept; older ones are evicted
        """
        if capacity < 1:
            raise ValueError(f"History capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._entries: List[HistoryEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> List[HistoryEntry]:
        """A copy of the entries, newest first."""
        return list(self._entries)

    def append(self, entry: HistoryEntry) -> None:
        self._entries.insert(0, entry)
        if len(self._entries) > self.capacity:
            evicted = self._entries.pop()
            logger.debug(f"History full, evicted entry {evicted.id}")

    def clear(self) -> None:
        self._entries.clear()

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def restore(self, entry: HistoryEntry) -> str:
        """Return the result of a past entry, to be loaded as the new display."""
        return entry.result
