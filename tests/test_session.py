"""
Tests for calculator sessions and the session store.
"""
import pytest

from lumina.engine import Operator
from lumina.session import CalculatorSession, SessionStore


@pytest.fixture
def session():
    return CalculatorSession()


def add(session, left: str, right: str):
    for digit in left:
        session.input_digit(digit)
    session.perform_operation(Operator.ADD)
    for digit in right:
        session.input_digit(digit)
    return session.perform_operation(None)


class TestCalculatorSession:
    """Tests for CalculatorSession."""

    def test_fold_is_recorded(self, session):
        entry = add(session, "2", "3")
        assert entry.expression == "2 + 3"
        assert entry.result == "5"
        assert session.get_history() == [entry]

    def test_no_entry_without_fold(self, session):
        session.input_digit("4")
        assert session.perform_operation(Operator.ADD) is None
        assert session.get_history() == []

    def test_chained_operations_record_each_fold(self, session):
        for key in ["2", Operator.ADD, "3", Operator.MULTIPLY, "4", None]:
            if isinstance(key, str):
                session.input_digit(key)
            else:
                session.perform_operation(key)

        expressions = [e.expression for e in session.get_history()]
        assert expressions == ["5 × 4", "2 + 3"]

    def test_display_text_is_rendered(self, session):
        for digit in "1234567":
            session.input_digit(digit)
        assert session.get_display_text() == "1,234,567"

    def test_restore_from_history(self, session):
        """Restoring a result loads it and drops any pending operation."""
        entry = add(session, "2", "3")
        session.input_digit("9")
        session.perform_operation(Operator.MULTIPLY)

        assert session.restore_from_history(entry.id) is True
        state = session.state
        assert state.display == "5"
        assert state.previous_operand is None
        assert state.pending_operator is None
        assert state.awaiting_operand is False

    def test_restore_unknown_entry(self, session):
        session.input_digit("8")
        assert session.restore_from_history("nope") is False
        assert session.state.display == "8"

    def test_clear_history_keeps_display(self, session):
        add(session, "2", "3")
        session.clear_history()
        assert session.get_history() == []
        assert session.state.display == "5"

    def test_pending_expression(self, session):
        assert session.pending_expression == ""
        session.input_digit("2")
        session.perform_operation(Operator.ADD)
        assert session.pending_expression == "2 +"
        session.input_digit("3")
        session.perform_operation(None)
        assert session.pending_expression == "5"

    def test_clear_label(self, session):
        assert session.clear_label == "AC"
        session.input_digit("1")
        assert session.clear_label == "C"
        session.clear()
        assert session.clear_label == "AC"

    def test_snapshot(self, session):
        session.input_digit("2")
        session.perform_operation(Operator.DIVIDE)
        snapshot = session.snapshot()
        assert snapshot == {
            "session_id": session.id,
            "display": "2",
            "display_text": "2",
            "pending_expression": "2 ÷",
            "pending_operator": "divide",
            "awaiting_operand": True,
            "clear_label": "C",
        }


class TestSessionStore:
    """Tests for SessionStore."""

    def test_create_and_get(self):
        store = SessionStore()
        session = store.create()
        assert store.get(session.id) is session
        assert len(store) == 1

    def test_get_unknown(self):
        assert SessionStore().get("missing") is None

    def test_evicts_least_recently_used(self):
        store = SessionStore(max_sessions=2)
        first = store.create()
        second = store.create()
        store.get(first.id)
        store.create()

        assert store.get(second.id) is None
        assert store.get(first.id) is first
        assert len(store) == 2

    def test_delete(self):
        store = SessionStore()
        session = store.create()
        assert store.delete(session.id) is True
        assert store.delete(session.id) is False
