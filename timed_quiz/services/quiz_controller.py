"""
services/quiz_controller.py

Session controller: the only entry point for the presentation layer.

Every public operation runs to completion under one re-entrant lock; timer
ticks take the same lock. State is re-persisted after each mutation and the
snapshot is erased exactly once, when the run is scored.
"""

import logging
import random
import threading
import time
from typing import Any, Callable, List, Optional

from timed_quiz.errors import (
    InvalidAnswerError,
    NoActiveSessionError,
    SessionFinishedError,
    SourceUnavailableError,
)
from timed_quiz.models.document_model import QuizDocument
from timed_quiz.models.question_model import Question
from timed_quiz.models.session_state import AnalyticsEntry, SessionState
from timed_quiz.models.view_model import ReviewRow, ScoreResult, ViewState
from timed_quiz.services.document_source import parse_document, read_document
from timed_quiz.services.persistence import SnapshotStore, apply_snapshot
from timed_quiz.services.randomizer import shuffle
from timed_quiz.services.scoring_service import (
    build_review,
    calculate_score,
    fill_missing_analytics,
)
from timed_quiz.services.timer import CountdownTimer, format_remaining

logger = logging.getLogger(__name__)


class QuizListener:
    """Presentation-layer callbacks. Override what you need; the defaults do nothing."""

    def on_render(self, view: ViewState) -> None:
        pass

    def on_time(self, remaining_seconds: int, text: str) -> None:
        pass

    def on_finish(self, result: ScoreResult) -> None:
        pass

    def on_error(self, message: str) -> None:
        pass


class QuizController:
    """
    Orchestrates one quiz run: load, navigate, answer, finish, restart, review.

    Args:
        store:     snapshot persistence for this run.
        listener:  presentation callbacks.
        scheduler: tick scheduler for the countdown (``ThreadingScheduler`` by default).
        rng:       random source for question and option shuffles.
        clock:     monotonic seconds, used for per-question timing.
    """

    def __init__(
        self,
        store: SnapshotStore,
        listener: Optional[QuizListener] = None,
        scheduler=None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._lock = threading.RLock()
        self.store = store
        self.listener = listener or QuizListener()
        self._rng = rng
        self._clock = clock
        self._timer = CountdownTimer(scheduler, lock=self._lock)
        self._shown_at = 0.0

        self.document: Optional[QuizDocument] = None
        self.state: Optional[SessionState] = None
        self.result: Optional[ScoreResult] = None

    @property
    def timer(self) -> CountdownTimer:
        return self._timer

    @property
    def is_loaded(self) -> bool:
        return self.state is not None

    # ── Loading ──────────────────────────────────────────────────────────────

    def load(self, raw_document: Any) -> bool:
        """
        Start (or resume) a run from an already-decoded document.

        Returns:
            False when the document is unusable. The listener gets ``on_error``
            and no session exists afterwards.
        """
        try:
            document = parse_document(raw_document)
        except SourceUnavailableError as e:
            self._report_source_error(e)
            return False
        with self._lock:
            self._begin(document, resume=True)
        return True

    def load_source(self, path: str) -> bool:
        """Same as ``load`` but reads the JSON document from ``path`` first."""
        try:
            document = read_document(path)
        except SourceUnavailableError as e:
            self._report_source_error(e)
            return False
        with self._lock:
            self._begin(document, resume=True)
        return True

    def restart(self) -> ViewState:
        """New randomization and empty progress from the cached document."""
        with self._lock:
            if self.document is None:
                raise NoActiveSessionError("No quiz document loaded.")
            logger.info("Restarting quiz")
            self._begin(self.document, resume=False)
            return self._view_state()

    def _report_source_error(self, error: SourceUnavailableError) -> None:
        logger.error(f"Quiz source unavailable: {error}")
        with self._lock:
            self._timer.stop()
            self.document = None
            self.state = None
            self.result = None
        self.listener.on_error(str(error))

    def _prepare(self, document: QuizDocument) -> SessionState:
        questions = [
            Question.from_raw(
                id=raw.id if raw.id is not None else i + 1,
                text=raw.text,
                options=raw.options,
                correct_index=raw.correct_index,
            )
            for i, raw in enumerate(document.questions)
        ]
        if document.shuffle_questions:
            shuffle(questions, self._rng)
        for q in questions:
            q.shuffle_options(self._rng)

        state = SessionState(
            title=document.title,
            questions=questions,
            time_limit_sec=document.time_limit_sec,
            pass_threshold=document.pass_threshold,
        )
        state.reset_progress()
        return state

    def _begin(self, document: QuizDocument, resume: bool) -> None:
        self._timer.stop()
        self.document = document
        self.result = None
        state = self._prepare(document)

        snapshot = self.store.load() if resume else None
        if snapshot is not None and apply_snapshot(state, snapshot):
            logger.info(
                f"Resumed quiz at question {state.current_index + 1}/{state.total}, "
                f"{sum(a is not None for a in state.answers)} answered"
            )
        else:
            logger.info(f"New quiz session: {state.total} question(s), limit={state.time_limit_sec}")

        self.state = state
        self.store.save(state)
        self._render()
        if state.is_timed:
            self._timer.start(state, self._on_time_change, self._on_time_expired)

    # ── Answering & navigation ───────────────────────────────────────────────

    def answer_current(self, presentation_index: int) -> AnalyticsEntry:
        """
        Record the option at ``presentation_index`` for the current question.

        Time spent is measured from the most recent display of the question.
        Answering again overwrites the previous answer and timing.
        """
        with self._lock:
            state = self._require_active()
            q = state.current_question()
            if q is None:
                raise InvalidAnswerError("The quiz has no questions.")
            if isinstance(presentation_index, bool) or not isinstance(presentation_index, int):
                raise InvalidAnswerError(f"Option index must be an integer, got {presentation_index!r}")
            try:
                option = q.option_at(presentation_index)
            except IndexError:
                raise InvalidAnswerError(
                    f"Option {presentation_index} does not exist (question has {len(q.options)})"
                ) from None

            elapsed = max(0.0, self._clock() - self._shown_at)
            entry = AnalyticsEntry(
                question_id=q.id,
                time_spent_sec=int(elapsed + 0.5),
                correct=option.is_correct,
            )
            state.answers[state.current_index] = presentation_index
            state.analytics[state.current_index] = entry
            self.store.save(state)
            return entry

    def next(self, selected: Optional[int] = None) -> ViewState:
        return self._move(+1, selected)

    def prev(self, selected: Optional[int] = None) -> ViewState:
        return self._move(-1, selected)

    def _move(self, step: int, selected: Optional[int]) -> ViewState:
        with self._lock:
            state = self._require_active()
            if selected is not None:
                self.answer_current(selected)
            target = state.clamp_index(state.current_index + step)
            if target != state.current_index:
                state.current_index = target
                self._render()
                self.store.save(state)
            return self._view_state()

    # ── Finishing ────────────────────────────────────────────────────────────

    def finish(self, selected: Optional[int] = None) -> ScoreResult:
        """
        Score the run. The result is computed once; later calls return it unchanged.
        """
        with self._lock:
            if self.state is None:
                raise NoActiveSessionError("No quiz session.")
            if self.state.is_finished:
                return self.result
            if selected is not None:
                self.answer_current(selected)
            return self._finish()

    def _finish(self) -> ScoreResult:
        state = self.state
        fill_missing_analytics(state)
        result = calculate_score(state)
        self._timer.stop()
        self.store.clear()
        state.is_finished = True
        self.result = result
        logger.info(
            f"Quiz finished: {result.correct_count}/{result.total} ({result.percent}%) "
            f"{'passed' if result.passed else 'failed'}"
        )
        self.listener.on_finish(result)
        return result

    def show_review(self) -> List[ReviewRow]:
        with self._lock:
            if self.state is None:
                raise NoActiveSessionError("No quiz session.")
            return build_review(self.state)

    def shutdown(self) -> None:
        """Stop the countdown without touching state or storage."""
        self._timer.stop()

    # ── Timer callbacks (called under the lock) ─────────────────────────────

    def _on_time_change(self, remaining_seconds: int) -> None:
        self.store.save(self.state)
        self.listener.on_time(remaining_seconds, format_remaining(remaining_seconds))

    def _on_time_expired(self) -> None:
        if self.state is not None and not self.state.is_finished:
            self._finish()

    # ── Views ────────────────────────────────────────────────────────────────

    def view_state(self) -> ViewState:
        with self._lock:
            if self.state is None:
                raise NoActiveSessionError("No quiz session.")
            return self._view_state()

    def _view_state(self) -> ViewState:
        state = self.state
        q = state.current_question()
        view = ViewState(
            title=state.title,
            index=state.current_index,
            total=state.total,
            is_first=state.current_index == 0,
            is_last=state.current_index >= state.total - 1,
            remaining_seconds=state.remaining_seconds,
            remaining_text=format_remaining(state.remaining_seconds) if state.is_timed else "",
            is_timed=state.is_timed,
            is_finished=state.is_finished,
        )
        if q is not None:
            view.question_id = q.id
            view.question_text = q.text
            view.options = [opt.text for opt in q.options_in_order()]
            view.selected = state.answers[state.current_index]
            view.position = state.current_index + 1
        return view

    def _render(self) -> None:
        self._shown_at = self._clock()
        self.listener.on_render(self._view_state())

    def _require_active(self) -> SessionState:
        if self.state is None:
            raise NoActiveSessionError("No quiz session.")
        if self.state.is_finished:
            raise SessionFinishedError("The quiz was already finished.")
        return self.state
