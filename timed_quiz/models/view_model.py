"""
models/view_model.py

Read-only projections handed to the presentation layer.
Nothing here is persisted or fed back into SessionState.
"""

from typing import List, Optional, Union

from pydantic import BaseModel, Field

from timed_quiz.models.session_state import AnalyticsEntry


class ViewState(BaseModel):
    """Everything needed to draw the current question screen."""

    title: str
    question_id: Optional[Union[int, str]] = None
    question_text: str = ""
    options: List[str] = Field(default_factory=list, description="Option texts in presentation order")
    selected: Optional[int] = Field(None, description="Saved presentation index for this question")
    index: int = 0
    position: int = Field(0, description="1-based question number, 0 when the quiz is empty")
    total: int = 0
    is_first: bool = True
    is_last: bool = True
    remaining_seconds: int = 0
    remaining_text: str = ""
    is_timed: bool = False
    is_finished: bool = False


class ScoreResult(BaseModel):
    """Frozen outcome of a finished run."""

    correct_count: int
    total: int
    percent: int
    passed: bool
    pass_threshold: float
    unanswered_count: int = 0
    total_time_sec: int = 0
    analytics: List[AnalyticsEntry] = Field(default_factory=list)


class ReviewOption(BaseModel):
    text: str
    is_correct: bool
    is_selected: bool
    is_selected_incorrect: bool


class ReviewRow(BaseModel):
    number: int
    question_id: Union[int, str]
    text: str
    options: List[ReviewOption]
    answered_correctly: bool
