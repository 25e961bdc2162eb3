"""
services/scoring_service.py

Scoring and review logic for a finished run.
Plain Python functions: no UI code, no persistence.
"""

from typing import List, Optional

from timed_quiz.models.question_model import Question
from timed_quiz.models.session_state import AnalyticsEntry, SessionState
from timed_quiz.models.view_model import ReviewOption, ReviewRow, ScoreResult


def is_answer_correct(question: Question, answer: Optional[int]) -> bool:
    """
    An answer is correct when it is set and the option shown at that
    presentation index is the correct one. Unanswered counts as incorrect.
    """
    if answer is None:
        return False
    try:
        return question.option_at(answer).is_correct
    except IndexError:
        return False


def fill_missing_analytics(state: SessionState) -> None:
    """Give every question without an analytics entry one with ``time_spent_sec = 0``."""
    for i, q in enumerate(state.questions):
        if state.analytics[i] is None:
            state.analytics[i] = AnalyticsEntry(
                question_id=q.id,
                time_spent_sec=0,
                correct=is_answer_correct(q, state.answers[i]),
            )


def round_percent(correct_count: int, total: int) -> int:
    """``100 * correct_count / total`` rounded half-up, in integer arithmetic."""
    if total <= 0:
        return 0
    return (200 * correct_count + total) // (2 * total)


def is_passed(correct_count: int, total: int, pass_threshold: float) -> bool:
    """
    Pass check on the raw fraction, not on the rounded percent.

    An empty quiz never passes.
    """
    if total <= 0:
        return False
    return correct_count / total >= pass_threshold


def calculate_score(state: SessionState) -> ScoreResult:
    """
    Score the run from its answers.

    Args:
        state: session state at finish time. Analytics may contain gaps;
               gaps show up as zero time in ``total_time_sec``.

    Returns:
        ScoreResult with count, percent, pass flag and the analytics list.
    """
    total = state.total
    correct_count = sum(
        1 for q, ans in zip(state.questions, state.answers) if is_answer_correct(q, ans)
    )
    analytics = [a for a in state.analytics if a is not None]

    return ScoreResult(
        correct_count=correct_count,
        total=total,
        percent=round_percent(correct_count, total),
        passed=is_passed(correct_count, total, state.pass_threshold),
        pass_threshold=state.pass_threshold,
        unanswered_count=sum(1 for ans in state.answers if ans is None),
        total_time_sec=sum(a.time_spent_sec for a in analytics),
        analytics=analytics,
    )


def build_review(state: SessionState) -> List[ReviewRow]:
    """Per question and per option in presentation order: correct and/or selected. Non-destructive."""
    rows: List[ReviewRow] = []
    for i, q in enumerate(state.questions):
        answer = state.answers[i]
        options = []
        for oi, opt in enumerate(q.options_in_order()):
            selected = answer == oi
            options.append(
                ReviewOption(
                    text=opt.text,
                    is_correct=opt.is_correct,
                    is_selected=selected,
                    is_selected_incorrect=selected and not opt.is_correct,
                )
            )
        rows.append(
            ReviewRow(
                number=i + 1,
                question_id=q.id,
                text=q.text,
                options=options,
                answered_correctly=is_answer_correct(q, answer),
            )
        )
    return rows
