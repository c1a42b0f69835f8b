import json
import logging
import os
import sys
import time
import uuid
from typing import Dict, Optional

class _C:
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"
    MAGENTA = "\033[35m"


def _use_color() -> bool:
    # Color only if explicitly enabled and terminal supports it.
    return os.getenv("LOG_COLOR", "0") == "1" and sys.stdout.isatty()

def _event_color(event_type: str, levelno: int) -> str:
    if levelno >= logging.ERROR or event_type.endswith("_FAILED"):
        return _C.RED
    if levelno >= logging.WARNING:
        return _C.YELLOW
    if event_type.endswith(("_STARTED", "_COMPLETED")):
        return _C.GREEN
    if event_type.startswith("SQL_"):
        return _C.CYAN
    return _C.MAGENTA


class JsonEventFormatter(logging.Formatter):
    """
    One JSON object per event: event_type, level, then the event payload.
    Records logged without log_event() fall back to the plain message.
    """

    def format(self, record: logging.LogRecord) -> str:
        event_type = getattr(record, "event_type", None)
        if event_type is None:
            return super().format(record)

        body = {"event_type": event_type, "level": record.levelname, **record.payload}
        text = json.dumps(body, default=str)
        if _use_color():
            return f"{_event_color(event_type, record.levelno)}{text}{_C.RESET}"
        return text


def get_logger():
    logger = logging.getLogger("csvload")
    if logger.handlers:
        return logger

    logger.setLevel(os.getenv("CSVLOAD_LOG_LEVEL", "INFO").upper())
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonEventFormatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger

logger = get_logger()

# Request ID Generator: "<operation>-<12 hex chars>", e.g. "profile-3f2a..."
def generate_request_id(operation: str = "profile") -> str:
    return f"{operation}-{uuid.uuid4().hex[:12]}"

# Structured Log Event
def log_event(event_type: str, payload: dict, level: int = logging.INFO):
    logger.log(level, event_type, extra={"event_type": event_type, "payload": payload})

# Timer Utility
class RequestTimer:
    """
    Execution timer with named phases.

    mark("parse") records the seconds since the previous mark (or start);
    the phases end up in the *_COMPLETED events.
    """
    def __init__(self):
        self.start_time = time.perf_counter()
        self._last = self.start_time
        self.phases: Dict[str, float] = {}

    def mark(self, phase: str) -> float:
        now = time.perf_counter()
        elapsed = round(now - self._last, 4)
        self.phases[phase] = elapsed
        self._last = now
        return elapsed

    def duration(self, phase: Optional[str] = None) -> float:
        if phase is not None:
            return self.phases[phase]
        return round(time.perf_counter() - self.start_time, 4)
