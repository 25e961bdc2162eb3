"""
models/session_state.py

Authoritative state of one quiz run and its persisted projection.
Pydantic BaseModel based, for serialization and type safety.
No UI code.
"""

import time
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from config import DEFAULT_PASS_THRESHOLD, DEFAULT_TITLE
from timed_quiz.models.question_model import Question


class AnalyticsEntry(BaseModel):
    """Correctness and time spent for one question. Serialized as camelCase."""

    model_config = ConfigDict(populate_by_name=True)

    question_id: Union[int, str] = Field(..., alias="questionId")
    time_spent_sec: int = Field(0, ge=0, alias="timeSpentSec")
    correct: bool = False


class SessionState(BaseModel):
    """
    Mutable state of a single quiz run.

    Attributes:
        questions:         question order, fixed for the lifetime of the run.
        current_index:     position in ``questions``. Always in range (0 when empty).
        answers:           per question, the chosen *presentation* index or None.
        analytics:         per question, an AnalyticsEntry or None.
        remaining_seconds: countdown value. Stays 0 when there is no time limit.
        time_limit_sec:    configured countdown length, None for untimed runs.
        pass_threshold:    fraction of correct answers needed to pass, in (0, 1].
        is_finished:       True once the run was scored.

    ``answers``, ``analytics`` and ``questions`` always have the same length,
    and a set answer always has an analytics entry.
    """

    title: str = DEFAULT_TITLE
    questions: List[Question] = Field(default_factory=list)
    current_index: int = Field(default=0, ge=0)
    answers: List[Optional[int]] = Field(default_factory=list)
    analytics: List[Optional[AnalyticsEntry]] = Field(default_factory=list)
    remaining_seconds: int = Field(default=0, ge=0)
    time_limit_sec: Optional[int] = None
    pass_threshold: float = Field(default=DEFAULT_PASS_THRESHOLD, gt=0, le=1)
    is_finished: bool = False

    model_config = {"arbitrary_types_allowed": True}

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def is_timed(self) -> bool:
        return self.time_limit_sec is not None

    def current_question(self) -> Optional[Question]:
        if not self.questions:
            return None
        return self.questions[self.current_index]

    def clamp_index(self, index: int) -> int:
        return max(0, min(index, self.total - 1)) if self.questions else 0

    def reset_progress(self) -> None:
        """Empty answers/analytics, first question, full countdown."""
        self.current_index = 0
        self.answers = [None] * self.total
        self.analytics = [None] * self.total
        self.remaining_seconds = self.time_limit_sec or 0
        self.is_finished = False


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class Snapshot(BaseModel):
    """
    Serialized subset of SessionState used to resume after a reload.

    ``questions_order`` holds, per question, the ``original_index`` values in
    presentation order. Lengths are not validated here; restoration reconciles
    them against the live question set.
    A malformed slot (non-int answer, invalid analytics entry) reads as unset
    instead of invalidating the whole snapshot.
    """

    model_config = ConfigDict(populate_by_name=True)

    saved_at: float = Field(default_factory=time.time, alias="savedAt")
    current_index: int = Field(0, alias="currentIndex")
    answers: Optional[List[Optional[int]]] = None
    analytics: Optional[List[Optional[AnalyticsEntry]]] = None
    remaining_seconds: Optional[int] = Field(None, alias="remainingSeconds")
    questions_order: Optional[List[Any]] = Field(None, alias="questionsOrder")

    @field_validator("saved_at", mode="before")
    @classmethod
    def lenient_saved_at(cls, v: Any) -> float:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return v
        return time.time()

    @field_validator("current_index", mode="before")
    @classmethod
    def lenient_current_index(cls, v: Any) -> int:
        return v if _is_int(v) else 0

    @field_validator("remaining_seconds", mode="before")
    @classmethod
    def lenient_remaining(cls, v: Any) -> Optional[int]:
        # None falls back to the configured limit
        return v if _is_int(v) and v >= 0 else None

    @field_validator("answers", mode="before")
    @classmethod
    def lenient_answers(cls, v: Any) -> Optional[List[Optional[int]]]:
        if not isinstance(v, list):
            return None
        return [a if _is_int(a) else None for a in v]

    @field_validator("analytics", mode="before")
    @classmethod
    def lenient_analytics(cls, v: Any) -> Optional[List[Optional[AnalyticsEntry]]]:
        if not isinstance(v, list):
            return None
        entries = []
        for item in v:
            try:
                entries.append(None if item is None else AnalyticsEntry.model_validate(item))
            except ValidationError:
                entries.append(None)
        return entries

    @field_validator("questions_order", mode="before")
    @classmethod
    def lenient_orders(cls, v: Any) -> Optional[List[Any]]:
        return v if isinstance(v, list) else None

    @classmethod
    def from_state(cls, state: SessionState) -> "Snapshot":
        return cls(
            current_index=state.current_index,
            answers=list(state.answers),
            analytics=list(state.analytics),
            remaining_seconds=state.remaining_seconds,
            questions_order=[q.order for q in state.questions],
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
