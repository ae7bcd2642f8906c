"""
FastAPI entrypoint for the Lumina calculator service.
"""
import json
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import List, Optional
from pydantic import BaseModel, Field
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from .config import (
    RATE_LIMIT, MAX_KEY_LENGTH, HISTORY_CAPACITY, MAX_SESSIONS,
    SLOW_REQUEST_THRESHOLD_MS, LOG_FILE, LOG_MAX_BYTES, LOG_BACKUP_COUNT,
    HOST, PORT,
)
from .engine import Operator
from .keyboard import handle_key
from .session import CalculatorSession, get_session_store

# Attributes present on every LogRecord, excluded from the JSON extras dict
_LOG_RECORD_BUILTIN_ATTRS = {
    'args', 'asctime', 'created', 'exc_info', 'exc_text', 'filename',
    'funcName', 'levelname', 'levelno', 'lineno', 'message', 'module',
    'msecs', 'msg', 'name', 'pathname', 'process', 'processName',
    'relativeCreated', 'stack_info', 'thread', 'threadName', 'taskName',
}


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON for machine-readable file output."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        # Merge any extra={} fields passed by the caller
        for key, val in record.__dict__.items():
            if key not in _LOG_RECORD_BUILTIN_ATTRS and key not in entry:
                entry[key] = val
        return json.dumps(entry, default=str)


# Console handler, human-readable
_console_handler = logging.StreamHandler()
_console_handler.setFormatter(
    logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
)

# File handler, JSON, rotated at LOG_MAX_BYTES
_file_handler = RotatingFileHandler(
    LOG_FILE, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding='utf-8'
)
_file_handler.setFormatter(JSONFormatter())

logging.basicConfig(level=logging.INFO, handlers=[_console_handler, _file_handler])
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown."""
    logger.info(
        f"Starting Lumina calculator (history capacity {HISTORY_CAPACITY}, "
        f"max sessions {MAX_SESSIONS})"
    )
    yield
    store = get_session_store()
    logger.info(f"Shutting down, discarding {len(store)} sessions")
    store.clear()


# Rate limiter
limiter = Limiter(key_func=get_remote_address)

# Initialize FastAPI app
app = FastAPI(
    title="Lumina Calculator",
    description="Left-to-right calculator sessions with display formatting and history",
    version="1.0.0",
    lifespan=lifespan
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Log unexpected failures and answer with a 500."""
    logger.exception(f"{request.method} {request.url.path} failed",
                     extra={"method": request.method, "path": request.url.path})
    return JSONResponse(status_code=500, content={"detail": f"Request failed: {exc}"})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every HTTP request with method, path, status code, and duration."""
    start_time = time.time()
    response = await call_next(request)
    duration_ms = round((time.time() - start_time) * 1000, 2)
    extra = {
        "method": request.method,
        "path": request.url.path,
        "status_code": response.status_code,
        "duration_ms": duration_ms,
    }
    if duration_ms > SLOW_REQUEST_THRESHOLD_MS:
        logger.warning(
            f"Slow request: {request.method} {request.url.path} took {duration_ms}ms "
            f"(threshold: {SLOW_REQUEST_THRESHOLD_MS}ms)",
            extra=extra,
        )
    else:
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms}ms)",
            extra=extra,
        )
    return response


# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request/Response models
class DigitRequest(BaseModel):
    """Request model for digit entry."""
    digit: str = Field(..., pattern=r"^[0-9]$", description="A single decimal digit")


class OperatorRequest(BaseModel):
    """Request model for operator selection."""
    operator: Operator = Field(..., description="add, subtract, multiply or divide")


class KeyRequest(BaseModel):
    """Request model for a keyboard key press."""
    key: str = Field(..., min_length=1, max_length=MAX_KEY_LENGTH, description="Key name, e.g. '7' or 'Enter'")


class SessionResponse(BaseModel):
    """Current state of a calculator session."""
    session_id: str
    display: str
    display_text: str
    pending_expression: str
    pending_operator: Optional[str]
    awaiting_operand: bool
    clear_label: str


class KeyResponse(SessionResponse):
    """Session state after a key press."""
    handled: bool


class HistoryEntryModel(BaseModel):
    """One completed calculation."""
    id: str
    expression: str
    result: str


class HistoryResponse(BaseModel):
    """History of a session, newest first."""
    session_id: str
    entries: List[HistoryEntryModel]


class HealthResponse(BaseModel):
    """Response model for health check."""
    status: str
    sessions_active: int


def _get_session(session_id: str) -> CalculatorSession:
    session = get_session_store().get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return session


def _history_response(session: CalculatorSession) -> HistoryResponse:
    return HistoryResponse(
        session_id=session.id,
        entries=[
            HistoryEntryModel(id=e.id, expression=e.expression, result=e.result)
            for e in session.get_history()
        ]
    )


# Endpoints
@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy", sessions_active=len(get_session_store()))


@app.post("/sessions", response_model=SessionResponse, status_code=201)
@limiter.limit(RATE_LIMIT)
async def create_session(request: Request):
    """Start a new calculator session."""
    session = get_session_store().create()
    logger.info(f"[{session.id[:8]}] Session created", extra={"session_id": session.id})
    return session.snapshot()


@app.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str):
    """Get the current display and pending state of a session."""
    return _get_session(session_id).snapshot()


@app.delete("/sessions/{session_id}")
async def delete_session(session_id: str):
    """Discard a session and its history."""
    if not get_session_store().delete(session_id):
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    logger.info(f"[{session_id[:8]}] Session deleted", extra={"session_id": session_id})
    return {"message": f"Session '{session_id}' deleted"}


@app.post("/sessions/{session_id}/digit", response_model=SessionResponse)
@limiter.limit(RATE_LIMIT)
async def digit_endpoint(request: Request, session_id: str, body: DigitRequest):
    """Enter one digit."""
    session = _get_session(session_id)
    session.input_digit(body.digit)
    return session.snapshot()


@app.post("/sessions/{session_id}/decimal", response_model=SessionResponse)
@limiter.limit(RATE_LIMIT)
async def decimal_endpoint(request: Request, session_id: str):
    """Enter a decimal point."""
    session = _get_session(session_id)
    session.input_decimal_point()
    return session.snapshot()


@app.post("/sessions/{session_id}/sign", response_model=SessionResponse)
@limiter.limit(RATE_LIMIT)
async def sign_endpoint(request: Request, session_id: str):
    """Negate the value on display."""
    session = _get_session(session_id)
    session.toggle_sign()
    return session.snapshot()


@app.post("/sessions/{session_id}/percent", response_model=SessionResponse)
@limiter.limit(RATE_LIMIT)
async def percent_endpoint(request: Request, session_id: str):
    """Divide the value on display by 100."""
    session = _get_session(session_id)
    session.input_percent()
    return session.snapshot()


@app.post("/sessions/{session_id}/backspace", response_model=SessionResponse)
@limiter.limit(RATE_LIMIT)
async def backspace_endpoint(request: Request, session_id: str):
    """Remove the last character typed."""
    session = _get_session(session_id)
    session.backspace()
    return session.snapshot()


@app.post("/sessions/{session_id}/clear", response_model=SessionResponse)
@limiter.limit(RATE_LIMIT)
async def clear_endpoint(request: Request, session_id: str):
    """Reset the calculator, keeping its history."""
    session = _get_session(session_id)
    session.clear()
    return session.snapshot()


@app.post("/sessions/{session_id}/operator", response_model=SessionResponse)
@limiter.limit(RATE_LIMIT)
async def operator_endpoint(request: Request, session_id: str, body: OperatorRequest):
    """
    Press an operator key.

    Any operator already pending is folded first, left to right.
    """
    session = _get_session(session_id)
    session.perform_operation(body.operator)
    return session.snapshot()


@app.post("/sessions/{session_id}/equals", response_model=SessionResponse)
@limiter.limit(RATE_LIMIT)
async def equals_endpoint(request: Request, session_id: str):
    """Resolve the pending operator."""
    session = _get_session(session_id)
    session.perform_operation(None)
    return session.snapshot()


@app.post("/sessions/{session_id}/keys", response_model=KeyResponse)
@limiter.limit(RATE_LIMIT)
async def key_endpoint(request: Request, session_id: str, body: KeyRequest):
    """Apply a keyboard key press."""
    session = _get_session(session_id)
    handled = handle_key(session, body.key)
    return {**session.snapshot(), "handled": handled}


@app.get("/sessions/{session_id}/history", response_model=HistoryResponse)
async def history_endpoint(session_id: str):
    """List completed calculations, newest first."""
    return _history_response(_get_session(session_id))


@app.delete("/sessions/{session_id}/history", response_model=HistoryResponse)
async def clear_history_endpoint(session_id: str):
    """Wipe the history of a session."""
    session = _get_session(session_id)
    session.clear_history()
    logger.info(f"[{session_id[:8]}] History cleared", extra={"session_id": session_id})
    return _history_response(session)


@app.post("/sessions/{session_id}/history/{entry_id}/restore", response_model=SessionResponse)
@limiter.limit(RATE_LIMIT)
async def restore_endpoint(request: Request, session_id: str, entry_id: str):
    """Load a past result onto the display and start a fresh calculation."""
    session = _get_session(session_id)
    if not session.restore_from_history(entry_id):
        raise HTTPException(
            status_code=404,
            detail=f"History entry '{entry_id}' not found in session '{session_id}'"
        )
    return session.snapshot()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT)
