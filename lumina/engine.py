"""
Calculator state machine.

The state is an immutable CalculatorState value. Each input is a pure
transition from one state to the next; CalculationEngine holds the current
state of one calculator and applies transitions to it.

Input is evaluated strictly left to right: every operator press folds the
operator already pending before recording the new one, so 2 + 3 × 4 = 20.
"""
import logging
import math
import string
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from .config import ERROR_TEXT
from .numerals import format_number, parse_numeral

logger = logging.getLogger(__name__)


class Operator(Enum):
    """Binary operators. Equals is represented by None."""
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]


_SYMBOLS = {
    Operator.ADD: "+",
    Operator.SUBTRACT: "-",
    Operator.MULTIPLY: "×",
    Operator.DIVIDE: "÷",
}


@dataclass(frozen=True)
class CalculatorState:
    """Complete state of one calculator."""
    display: str = "0"
    previous_operand: Optional[str] = None
    pending_operator: Optional[Operator] = None
    awaiting_operand: bool = False

    @property
    def is_error(self) -> bool:
        return self.display == ERROR_TEXT


@dataclass(frozen=True)
class Calculation:
    """A completed fold, reported so it can be recorded in history."""
    left: float
    right: float
    operator: Operator
    result: float


def fold(left: float, right: float, operator: Operator) -> float:
    """
    Reduce two operands under one operator.

    Division by zero yields 0 rather than an error or infinity.
    """
    if operator is Operator.ADD:
        return left + right
    if operator is Operator.SUBTRACT:
        return left - right
    if operator is Operator.MULTIPLY:
        return left * right
    if operator is Operator.DIVIDE:
        return 0.0 if right == 0 else left / right
    raise ValueError(f"Unknown operator: {operator!r}")


def _error_state(reason: str) -> CalculatorState:
    logger.warning(f"Calculator entered error state: {reason}")
    return CalculatorState(display=ERROR_TEXT)


def _is_computed(display: str) -> bool:
    """Exponent-form numerals only come from results and are not editable."""
    return "e" in display


def input_digit(state: CalculatorState, digit: str) -> CalculatorState:
    if state.is_error:
        return state
    if not isinstance(digit, str) or len(digit) != 1 or digit not in string.digits:
        logger.debug(f"Ignoring non-digit input: {digit!r}")
        return state

    if state.awaiting_operand or _is_computed(state.display):
        return replace(state, display=digit, awaiting_operand=False)
    if state.display == "0":
        return replace(state, display=digit)
    return replace(state, display=state.display + digit)


def input_decimal_point(state: CalculatorState) -> CalculatorState:
    if state.is_error:
        return state
    if state.awaiting_operand or _is_computed(state.display):
        return replace(state, display="0.", awaiting_operand=False)
    if "." in state.display:
        return state
    return replace(state, display=state.display + ".")


def toggle_sign(state: CalculatorState) -> CalculatorState:
    if state.is_error:
        return state
    value = parse_numeral(state.display)
    if value is None:
        return _error_state(f"cannot negate {state.display!r}")
    return replace(state, display=format_number(-value))


def input_percent(state: CalculatorState) -> CalculatorState:
    if state.is_error:
        return state
    value = parse_numeral(state.display)
    if value is None:
        return _error_state(f"cannot take percent of {state.display!r}")
    return replace(state, display=format_number(value / 100))


def backspace(state: CalculatorState) -> CalculatorState:
    """Remove the last character typed; never leaves an empty or partial numeral."""
    if state.is_error or state.awaiting_operand:
        return state
    if len(state.display) == 1 or _is_computed(state.display):
        return replace(state, display="0")

    trimmed = state.display[:-1]
    if parse_numeral(trimmed) is None:
        trimmed = "0"
    return replace(state, display=trimmed)


def clear(state: CalculatorState) -> CalculatorState:
    return CalculatorState()


def perform_operation(
    state: CalculatorState,
    next_operator: Optional[Operator]
) -> Tuple[CalculatorState, Optional[Calculation]]:
    """
    Press an operator key, or equals when next_operator is None.

    Folds the pending operator (if any) against the operand on display,
    then records next_operator as the new pending operator.

    Returns:
        The next state, and the Calculation performed if a fold happened
    """
    if state.is_error:
        return state, None

    value = parse_numeral(state.display)
    if value is None:
        return _error_state(f"cannot parse operand {state.display!r}"), None

    display = state.display
    calculation = None

    if state.previous_operand is None:
        previous = format_number(value)
    elif state.pending_operator is None:
        # After equals the result stays the left operand
        previous = state.previous_operand
    else:
        left = parse_numeral(state.previous_operand)
        if left is None:
            return _error_state(f"cannot parse operand {state.previous_operand!r}"), None

        result = fold(left, value, state.pending_operator)
        if not math.isfinite(result):
            return _error_state(
                f"{left} {state.pending_operator.symbol} {value} is not finite"
            ), None

        previous = display = format_number(result)
        calculation = Calculation(left, value, state.pending_operator, result)
        logger.debug(
            f"Folded {left} {state.pending_operator.symbol} {value} = {result}"
        )

    next_state = CalculatorState(
        display=display,
        previous_operand=previous,
        pending_operator=next_operator,
        awaiting_operand=True,
    )
    return next_state, calculation


class CalculationEngine:
    """Holds the state of one calculator and applies inputs to it."""

    def __init__(self, state: Optional[CalculatorState] = None):
        self.state = state or CalculatorState()

    @property
    def display(self) -> str:
        return self.state.display

    def input_digit(self, digit: str) -> None:
        self.state = input_digit(self.state, digit)

    def input_decimal_point(self) -> None:
        self.state = input_decimal_point(self.state)

    def toggle_sign(self) -> None:
        self.state = toggle_sign(self.state)

    def input_percent(self) -> None:
        self.state = input_percent(self.state)

    def backspace(self) -> None:
        self.state = backspace(self.state)

    def clear(self) -> None:
        self.state = clear(self.state)

    def perform_operation(
        self,
        next_operator: Optional[Operator] = None
    ) -> Optional[Calculation]:
        """
        Press an operator key (or equals, when next_operator is None).

        Returns:
            The completed Calculation if the press folded two operands
        """
        self.state, calculation = perform_operation(self.state, next_operator)
        return calculation

    def load(self, display: str) -> None:
        """Start a fresh calculation with the given numeral on display."""
        self.clear()
        if parse_numeral(display) is None:
            self.state = _error_state(f"cannot load {display!r}")
        else:
            self.state = replace(self.state, display=display)
