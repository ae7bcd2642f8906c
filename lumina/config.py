"""
Configuration constants for the Lumina calculator service.
"""
import os
from dotenv import load_dotenv

load_dotenv()

# History configuration
HISTORY_CAPACITY = int(os.getenv("HISTORY_CAPACITY", "50"))
HISTORY_SIGNIFICANT_DIGITS = int(os.getenv("HISTORY_SIGNIFICANT_DIGITS", "10"))

# Display formatting
EXPONENT_UPPER_BOUND = float(os.getenv("EXPONENT_UPPER_BOUND", "999999999"))
EXPONENT_LOWER_BOUND = float(os.getenv("EXPONENT_LOWER_BOUND", "0.0000001"))
EXPONENT_FRACTION_DIGITS = int(os.getenv("EXPONENT_FRACTION_DIGITS", "4"))
ERROR_TEXT = "Error"

# Session store
MAX_SESSIONS = int(os.getenv("MAX_SESSIONS", "1000"))

# Guardrails
RATE_LIMIT = os.getenv("RATE_LIMIT", "600/minute")
MAX_KEY_LENGTH = int(os.getenv("MAX_KEY_LENGTH", "16"))

# Logging
LOG_FILE = os.getenv("LOG_FILE", "calculator.log")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", str(10 * 1024 * 1024)))  # 10MB
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "3"))
SLOW_REQUEST_THRESHOLD_MS = float(os.getenv("SLOW_REQUEST_THRESHOLD_MS", "250"))

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
