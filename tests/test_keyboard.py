"""
Tests for the keyboard input adapter.
"""
import pytest

from lumina.engine import Operator
from lumina.keyboard import handle_key
from lumina.session import CalculatorSession


@pytest.fixture
def session():
    return CalculatorSession()


def type_keys(session, keys):
    return [handle_key(session, key) for key in keys]


class TestHandleKey:
    """Tests for handle_key()."""

    def test_digits_and_point(self, session):
        type_keys(session, ["1", ".", "5"])
        assert session.state.display == "1.5"

    def test_operators_and_enter(self, session):
        type_keys(session, ["9", "/", "3", "Enter"])
        assert session.state.display == "3"
        assert len(session.get_history()) == 1

    @pytest.mark.parametrize("key,operator", [
        ("+", Operator.ADD),
        ("-", Operator.SUBTRACT),
        ("*", Operator.MULTIPLY),
        ("/", Operator.DIVIDE),
    ])
    def test_operator_keys(self, session, key, operator):
        handle_key(session, key)
        assert session.state.pending_operator is operator

    def test_equals_without_pending_operator_does_nothing(self, session):
        """Enter and = only act while an operator is pending."""
        type_keys(session, ["4", "="])
        assert session.state.display == "4"
        assert session.state.awaiting_operand is False

    def test_backspace_and_escape(self, session):
        type_keys(session, ["1", "2", "Backspace"])
        assert session.state.display == "1"
        type_keys(session, ["+", "Escape"])
        assert session.state.display == "0"
        assert session.state.pending_operator is None

    def test_unbound_keys_ignored(self, session):
        session.input_digit("6")
        assert type_keys(session, ["x", "%", "Shift", "²"]) == [False] * 4
        assert session.state.display == "6"

    def test_bound_keys_reported(self, session):
        assert all(type_keys(session, ["1", ".", "+", "2", "=", "Backspace", "Escape"]))
