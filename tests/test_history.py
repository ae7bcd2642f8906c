"""
Tests for the history log.
"""
import pytest

from lumina.engine import Calculation, Operator
from lumina.history import HistoryEntry, HistoryLog


def make_entry(n: int) -> HistoryEntry:
    return HistoryEntry(id=f"entry-{n}", expression=f"{n} + 0", result=str(n))


class TestHistoryLog:
    """Tests for HistoryLog."""

    def test_starts_empty(self):
        assert HistoryLog().entries == []

    def test_newest_first(self):
        log = HistoryLog()
        log.append(make_entry(1))
        log.append(make_entry(2))
        assert [e.id for e in log.entries] == ["entry-2", "entry-1"]

    def test_capacity_evicts_oldest(self):
        """Appending 51 entries keeps 50 and drops the first appended."""
        log = HistoryLog()
        for n in range(51):
            log.append(make_entry(n))

        assert len(log) == 50
        assert log.get("entry-0") is None
        assert log.entries[0].id == "entry-50"
        assert log.entries[-1].id == "entry-1"

    def test_custom_capacity(self):
        log = HistoryLog(capacity=2)
        for n in range(3):
            log.append(make_entry(n))
        assert [e.id for e in log.entries] == ["entry-2", "entry-1"]

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            HistoryLog(capacity=0)

    def test_clear(self):
        log = HistoryLog()
        log.append(make_entry(1))
        log.clear()
        assert len(log) == 0

    def test_entries_is_a_copy(self):
        log = HistoryLog()
        log.append(make_entry(1))
        log.entries.clear()
        assert len(log) == 1

    def test_get_and_restore(self):
        log = HistoryLog()
        log.append(make_entry(7))
        entry = log.get("entry-7")
        assert log.restore(entry) == "7"
        assert log.get("missing") is None


class TestHistoryEntry:
    """Tests for building entries from calculations."""

    def test_from_calculation(self):
        entry = HistoryEntry.from_calculation(Calculation(2.0, 3.0, Operator.MULTIPLY, 6.0))
        assert entry.expression == "2 × 3"
        assert entry.result == "6"

    def test_rounds_to_ten_significant_digits(self):
        entry = HistoryEntry.from_calculation(
            Calculation(1 / 3, 3.0, Operator.MULTIPLY, 0.1 + 0.2)
        )
        assert entry.expression == "0.3333333333 × 3"
        assert entry.result == "0.3"

    def test_ids_are_unique(self):
        calculation = Calculation(1.0, 1.0, Operator.ADD, 2.0)
        ids = {HistoryEntry.from_calculation(calculation).id for _ in range(100)}
        assert len(ids) == 100

    def test_entry_is_immutable(self):
        entry = make_entry(1)
        with pytest.raises(AttributeError):
            entry.result = "2"
