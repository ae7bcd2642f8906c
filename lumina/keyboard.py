"""
Keyboard input adapter: translates key names into session operations.
"""
import logging

from .engine import Operator
from .session import CalculatorSession

logger = logging.getLogger(__name__)

OPERATOR_KEYS = {
    "+": Operator.ADD,
    "-": Operator.SUBTRACT,
    "*": Operator.MULTIPLY,
    "/": Operator.DIVIDE,
}

EQUALS_KEYS = ("Enter", "=")


def handle_key(session: CalculatorSession, key: str) -> bool:
    """
    Apply one key press to a session.

    Args:
        session: Target calculator session
        key: Key name as reported by the keyboard, e.g. "7", "Enter", "Escape"

    Returns:
        True if the key is bound to an operation, False if it was ignored
    """
    if len(key) == 1 and key.isdigit() and key.isascii():
        session.input_digit(key)
    elif key == ".":
        session.input_decimal_point()
    elif key == "Backspace":
        session.backspace()
    elif key in EQUALS_KEYS:
        # Equals only resolves a pending operator from the keyboard
        if session.state.pending_operator is not None:
            session.perform_operation(None)
    elif key == "Escape":
        session.clear()
    elif key in OPERATOR_KEYS:
        session.perform_operation(OPERATOR_KEYS[key])
    else:
        logger.debug(f"Ignoring unbound key {key!r}")
        return False
    return True
