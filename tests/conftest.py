import random

import pytest

from timed_quiz.errors import StorageUnavailableError
from timed_quiz.services.persistence import SnapshotStore
from timed_quiz.services.quiz_controller import QuizController, QuizListener
from timed_quiz.services.storage import MemoryStorage

STORAGE_KEY = "quiz_state_test"


class _Handle:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Collects scheduled callbacks; ``advance`` fires whatever is due, one interval at a time."""

    def __init__(self):
        self.pending = []

    def call_later(self, delay, callback):
        handle = _Handle(delay, callback)
        self.pending.append(handle)
        return handle

    @property
    def active(self):
        return [h for h in self.pending if not h.cancelled]

    def advance(self, ticks=1):
        for _ in range(ticks):
            due, self.pending = self.active, []
            for h in due:
                h.callback()


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class RecordingListener(QuizListener):
    def __init__(self):
        self.renders = []
        self.times = []
        self.results = []
        self.errors = []

    def on_render(self, view):
        self.renders.append(view)

    def on_time(self, remaining_seconds, text):
        self.times.append((remaining_seconds, text))

    def on_finish(self, result):
        self.results.append(result)

    def on_error(self, message):
        self.errors.append(message)


class BrokenStorage:
    """Slot whose every operation fails, like a full or disabled browser storage."""

    def get(self, key):
        raise StorageUnavailableError("storage disabled")

    def set(self, key, value):
        raise StorageUnavailableError("quota exceeded")

    def delete(self, key):
        raise StorageUnavailableError("storage disabled")


def make_document(correct=(0, 1), time_limit=None, threshold=0.5, shuffle_questions=False):
    """One question per entry of ``correct``, three options each."""
    doc = {
        "title": "Sample",
        "shuffleQuestions": shuffle_questions,
        "passThreshold": threshold,
        "questions": [
            {
                "id": f"q{i + 1}",
                "text": f"Question {i + 1}",
                "options": [f"q{i + 1}-a", f"q{i + 1}-b", f"q{i + 1}-c"],
                "correctIndex": c,
            }
            for i, c in enumerate(correct)
        ],
    }
    if time_limit is not None:
        doc["timeLimitSec"] = time_limit
    return doc


def correct_position(question):
    """Presentation index of the correct option."""
    return next(i for i, o in enumerate(question.options_in_order()) if o.is_correct)


def wrong_position(question):
    return next(i for i, o in enumerate(question.options_in_order()) if not o.is_correct)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return SnapshotStore(storage, STORAGE_KEY)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def listener():
    return RecordingListener()


@pytest.fixture
def make_controller(storage, scheduler, clock, listener):
    def _make(seed=7, **kwargs):
        kwargs.setdefault("listener", listener)
        return QuizController(
            SnapshotStore(storage, STORAGE_KEY),
            scheduler=scheduler,
            rng=random.Random(seed),
            clock=clock,
            **kwargs,
        )

    return _make
