"""
api/session.py — per-browser in-memory sessions (cookie based)

Each browser gets a UUID session ID and its own QuizController.
The controller's snapshot lives in a file slot keyed by the session ID,
so a server restart with the same cookie resumes the run.
Sessions expire after SESSION_TTL; expiry stops the countdown.
"""

import threading
import time
import uuid
from typing import Any

from config import SESSION_TTL, STATE_DIR, STORAGE_KEY
from timed_quiz.services.persistence import SnapshotStore
from timed_quiz.services.quiz_controller import QuizController
from timed_quiz.services.storage import FileStorage

_lock = threading.Lock()
_sessions: dict[str, dict[str, Any]] = {}
_timestamps: dict[str, float] = {}

_storage = FileStorage(STATE_DIR)


def use_storage(storage) -> None:
    """Swap the snapshot slot backend (tests use MemoryStorage)."""
    global _storage
    _storage = storage


def _new_state(sid: str) -> dict[str, Any]:
    store = SnapshotStore(_storage, f"{STORAGE_KEY}_{sid}")
    return {"controller": QuizController(store)}


def _drop(sid: str) -> None:
    state = _sessions.pop(sid, None)
    _timestamps.pop(sid, None)
    if state is not None:
        state["controller"].shutdown()


def create_session(sid: str | None = None) -> str:
    """Create a session (optionally reusing a known cookie value) and return its ID."""
    sid = sid or uuid.uuid4().hex
    with _lock:
        _sessions[sid] = _new_state(sid)
        _timestamps[sid] = time.time()
    return sid


def get_session(sid: str) -> dict[str, Any] | None:
    """Session data by ID. None when missing or expired."""
    with _lock:
        if sid not in _sessions:
            return None
        if time.time() - _timestamps[sid] > SESSION_TTL:
            _drop(sid)
            return None
        _timestamps[sid] = time.time()  # refresh on access
        return _sessions[sid]


def get_controller(sid: str) -> QuizController | None:
    session = get_session(sid)
    if session is None:
        return None
    return session["controller"]


def reset(sid: str) -> None:
    """Throw away the controller and its snapshot, keep the session ID."""
    with _lock:
        if sid in _sessions:
            controller: QuizController = _sessions[sid]["controller"]
            controller.shutdown()
            controller.store.clear()
            _sessions[sid] = _new_state(sid)
            _timestamps[sid] = time.time()


def cleanup_expired() -> int:
    """Drop expired sessions. Returns how many were removed."""
    now = time.time()
    with _lock:
        expired = [sid for sid, ts in _timestamps.items() if now - ts > SESSION_TTL]
        for sid in expired:
            _drop(sid)
    return len(expired)
