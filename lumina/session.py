"""
Calculator sessions: one engine, one history log and the display formatter
behind the operations an input adapter calls.
"""
import logging
import uuid
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from .config import HISTORY_CAPACITY, MAX_SESSIONS
from .engine import CalculationEngine, CalculatorState, Operator
from .formatter import render
from .history import HistoryEntry, HistoryLog

logger = logging.getLogger(__name__)


class CalculatorSession:
    """A single calculator with its own history."""

    def __init__(self, session_id: Optional[str] = None, history_capacity: int = HISTORY_CAPACITY):
        self.id = session_id or uuid.uuid4().hex
        self.engine = CalculationEngine()
        self.history = HistoryLog(capacity=history_capacity)

    @property
    def state(self) -> CalculatorState:
        return self.engine.state

    def input_digit(self, digit: str) -> None:
        self.engine.input_digit(digit)

    def input_decimal_point(self) -> None:
        self.engine.input_decimal_point()

    def toggle_sign(self) -> None:
        self.engine.toggle_sign()

    def input_percent(self) -> None:
        self.engine.input_percent()

    def backspace(self) -> None:
        self.engine.backspace()

    def clear(self) -> None:
        self.engine.clear()

    def perform_operation(self, next_operator: Optional[Operator] = None) -> Optional[HistoryEntry]:
        """
        Press an operator, or equals when next_operator is None.

        Returns:
            The history entry recorded for the fold, if one happened
        """
        calculation = self.engine.perform_operation(next_operator)
        if calculation is None:
            return None

        entry = HistoryEntry.from_calculation(calculation)
        self.history.append(entry)
        logger.info(
            f"[{self.id[:8]}] {entry.expression} = {entry.result}",
            extra={"session_id": self.id, "entry_id": entry.id},
        )
        return entry

    def restore_from_history(self, entry_id: str) -> bool:
        """
        Load a past result onto the display and start a fresh calculation.

        Returns:
            False if no entry with that id is in the history
        """
        entry = self.history.get(entry_id)
        if entry is None:
            return False
        self.engine.load(self.history.restore(entry))
        return True

    def get_display_text(self) -> str:
        return render(self.engine.display)

    def get_history(self) -> List[HistoryEntry]:
        return self.history.entries

    def clear_history(self) -> None:
        self.history.clear()

    @property
    def pending_expression(self) -> str:
        """The previous operand and pending operator, as shown above the display."""
        state = self.engine.state
        if state.previous_operand is None:
            return ""
        if state.pending_operator is None:
            return state.previous_operand
        return f"{state.previous_operand} {state.pending_operator.symbol}"

    @property
    def clear_label(self) -> str:
        """'AC' when there is nothing to clear but the zero display, else 'C'."""
        state = self.engine.state
        if state.display == "0" and state.previous_operand is None:
            return "AC"
        return "C"

    def snapshot(self) -> Dict[str, Any]:
        state = self.engine.state
        return {
            "session_id": self.id,
            "display": state.display,
            "display_text": self.get_display_text(),
            "pending_expression": self.pending_expression,
            "pending_operator": state.pending_operator.value if state.pending_operator else None,
            "awaiting_operand": state.awaiting_operand,
            "clear_label": self.clear_label,
        }


class SessionStore:
    """In-memory sessions, evicting the least recently used past a maximum."""

    def __init__(self, max_sessions: int = MAX_SESSIONS):
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, CalculatorSession]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> CalculatorSession:
        session = CalculatorSession()
        self._sessions[session.id] = session
        while len(self._sessions) > self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info(f"Evicted idle session {evicted_id[:8]}",
                        extra={"session_id": evicted_id})
        return session

    def get(self, session_id: str) -> Optional[CalculatorSession]:
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        return session

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def clear(self) -> None:
        self._sessions.clear()


# Global session store instance
_session_store: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    """Get or create the global session store."""
    global _session_store
    if _session_store is None:
        _session_store = SessionStore()
    return _session_store
