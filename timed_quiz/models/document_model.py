"""
models/document_model.py

Shape of the question source document:

    { title?, shuffleQuestions?, timeLimitSec?, passThreshold?,
      questions: [{ id, text, options: [string], correctIndex }] }

Structural problems (not a mapping, options not a list, ...) fail validation.
Numeric settings that are absent or non-numeric fall back to defaults instead.
"""

import math
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config import DEFAULT_PASS_THRESHOLD, DEFAULT_TITLE


def _as_number(value: Any) -> Optional[float]:
    """Lenient numeric coercion. Returns None for anything that is not a finite number."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        return None
    return float(value)


class RawQuestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[Union[int, str]] = None
    text: str
    options: List[str] = Field(default_factory=list)
    correct_index: Optional[int] = Field(None, alias="correctIndex")

    @field_validator("options", mode="before")
    @classmethod
    def stringify_options(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [opt if isinstance(opt, str) else str(opt) for opt in v]
        return v

    @field_validator("correct_index", mode="before")
    @classmethod
    def lenient_correct_index(cls, v: Any) -> Optional[int]:
        # a bad index only means "no option is correct"
        if isinstance(v, bool):
            return None
        if isinstance(v, int):
            return v
        if isinstance(v, float) and v.is_integer():
            return int(v)
        return None


class QuizDocument(BaseModel):
    """Parsed quiz document with defaults applied."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = DEFAULT_TITLE
    shuffle_questions: bool = Field(True, alias="shuffleQuestions")
    time_limit_sec: Optional[int] = Field(
        None,
        alias="timeLimitSec",
        description="Countdown length in seconds. None disables the countdown.",
    )
    pass_threshold: float = Field(DEFAULT_PASS_THRESHOLD, alias="passThreshold")
    questions: List[RawQuestion] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def default_title(cls, v: Any) -> str:
        return v if isinstance(v, str) and v.strip() else DEFAULT_TITLE

    @field_validator("shuffle_questions", mode="before")
    @classmethod
    def only_false_disables(cls, v: Any) -> bool:
        return v is not False

    @field_validator("time_limit_sec", mode="before")
    @classmethod
    def positive_limit_or_none(cls, v: Any) -> Optional[int]:
        number = _as_number(v)
        if number is None:
            return None
        seconds = int(number)
        return seconds if seconds > 0 else None

    @field_validator("pass_threshold", mode="before")
    @classmethod
    def threshold_in_range(cls, v: Any) -> float:
        number = _as_number(v)
        if number is None or not 0 < number <= 1:
            return DEFAULT_PASS_THRESHOLD
        return number

    @field_validator("questions", mode="before")
    @classmethod
    def missing_questions_is_empty(cls, v: Any) -> Any:
        return [] if v is None else v
