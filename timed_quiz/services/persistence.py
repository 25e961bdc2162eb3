"""
services/persistence.py

Snapshot persistence for resume-after-reload.

Durability is best effort: a failed save/clear is logged and reported as False,
a missing or corrupt stored value reads as "no snapshot". Neither interrupts
the in-memory session.
"""

import logging
from typing import Optional

from pydantic import ValidationError

from timed_quiz.errors import StorageUnavailableError
from timed_quiz.models.session_state import AnalyticsEntry, SessionState, Snapshot
from timed_quiz.services.scoring_service import is_answer_correct

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Reads and writes the Snapshot of one session in a single named slot."""

    def __init__(self, storage, key: str) -> None:
        self.storage = storage
        self.key = key

    def save(self, state: SessionState) -> bool:
        try:
            self.storage.set(self.key, Snapshot.from_state(state).to_json())
        except StorageUnavailableError as e:
            logger.warning(f"Snapshot save failed ({self.key}), continuing in memory: {e}")
            return False
        return True

    def load(self) -> Optional[Snapshot]:
        try:
            raw = self.storage.get(self.key)
        except StorageUnavailableError as e:
            logger.warning(f"Snapshot read failed ({self.key}): {e}")
            return None
        if not raw:
            return None
        try:
            return Snapshot.model_validate_json(raw)
        except ValidationError as e:
            logger.info(f"Ignoring unreadable snapshot ({self.key}): {e.error_count()} error(s)")
            return None

    def clear(self) -> bool:
        try:
            self.storage.delete(self.key)
        except StorageUnavailableError as e:
            logger.warning(f"Snapshot delete failed ({self.key}): {e}")
            return False
        return True


def apply_snapshot(state: SessionState, snapshot: Snapshot) -> bool:
    """
    Restore progress from ``snapshot`` onto a freshly prepared ``state``.

    Rules:
      - ``questions_order`` of a different length than the question list means a
        different question set: nothing is applied and False is returned.
      - a per-question order is applied only when it is a permutation of that
        question's option indices; otherwise the fresh shuffle stays and the
        stored answer/analytics for that question are dropped.
      - answers/analytics are truncated or padded to the question count.
      - current_index is clamped, remaining_seconds capped at the time limit.

    Returns:
        True when the snapshot was applied (possibly partially).
    """
    total = state.total
    orders = snapshot.questions_order
    if orders is not None and len(orders) != total:
        logger.info(f"Snapshot has {len(orders)} question(s), quiz has {total}; starting fresh")
        return False

    answers = list(snapshot.answers or [])[:total]
    answers += [None] * (total - len(answers))
    analytics = list(snapshot.analytics or [])[:total]
    analytics += [None] * (total - len(analytics))

    dropped = 0
    for i, q in enumerate(state.questions):
        restored = orders is not None and q.apply_order(orders[i])
        answer, entry = answers[i], analytics[i]
        if answer is None and entry is None:
            continue
        compatible = (
            restored
            and (answer is None or 0 <= answer < len(q.options))
            and (entry is None or entry.question_id == q.id)
        )
        if not compatible:
            answers[i] = None
            analytics[i] = None
            dropped += 1
        elif answer is not None and entry is None:
            analytics[i] = AnalyticsEntry(
                question_id=q.id, time_spent_sec=0, correct=is_answer_correct(q, answer)
            )

    if dropped:
        logger.info(f"Discarded stored progress for {dropped} question(s) with incompatible data")

    state.answers = answers
    state.analytics = analytics
    state.current_index = state.clamp_index(snapshot.current_index)
    if state.is_timed and snapshot.remaining_seconds is not None and snapshot.remaining_seconds >= 0:
        state.remaining_seconds = min(snapshot.remaining_seconds, state.time_limit_sec)
    return True
