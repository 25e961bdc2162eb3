"""
models/question_model.py

Immutable question record plus its mutable presentation order.
``original_index`` is the stable option key across shuffles and reloads;
a presentation index is only a position in the current order.
"""

import random
from typing import Any, List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from timed_quiz.services.randomizer import shuffle


class QuizOption(BaseModel):
    """A single answer option. Fixed at construction."""

    model_config = ConfigDict(frozen=True)

    text: str
    original_index: int = Field(..., ge=0, description="Position in the authoring-time option list")
    is_correct: bool = False


class Question(BaseModel):
    """
    Multiple-choice question.

    Attributes:
        id:      opaque identifier from the source document.
        text:    question prompt.
        options: options in authoring order. ``options[k].original_index == k``.

    The presentation order is a private list of ``original_index`` values and
    is always a permutation of ``0..len(options)-1``.
    """

    model_config = ConfigDict(frozen=True)

    id: Union[int, str]
    text: str
    options: Tuple[QuizOption, ...] = ()

    _order: List[int] = PrivateAttr(default_factory=list)

    def model_post_init(self, __context: Any) -> None:
        self._order.extend(range(len(self.options)))

    @classmethod
    def from_raw(
        cls,
        id: Union[int, str],
        text: str,
        options: Sequence[str],
        correct_index: Optional[int],
    ) -> "Question":
        """
        Build a question from document fields.

        Exactly the option at ``correct_index`` is marked correct. An out-of-range
        or missing ``correct_index`` leaves every option incorrect.
        """
        built = tuple(
            QuizOption(text=opt, original_index=idx, is_correct=idx == correct_index)
            for idx, opt in enumerate(options)
        )
        return cls(id=id, text=text, options=built)

    # ── Presentation order ───────────────────────────────────────────────────

    @property
    def order(self) -> List[int]:
        """Current presentation order as ``original_index`` values (copy)."""
        return list(self._order)

    def options_in_order(self) -> List[QuizOption]:
        return [self.options[orig] for orig in self._order]

    def option_at(self, presentation_index: int) -> QuizOption:
        """Option shown at ``presentation_index``. Raises IndexError when out of range."""
        if not 0 <= presentation_index < len(self._order):
            raise IndexError(presentation_index)
        return self.options[self._order[presentation_index]]

    def shuffle_options(self, rng: Optional[random.Random] = None) -> None:
        shuffle(self._order, rng)

    def is_valid_order(self, order: Any) -> bool:
        """True when ``order`` is a permutation of this question's original indices."""
        if not isinstance(order, (list, tuple)) or len(order) != len(self.options):
            return False
        if not all(isinstance(o, int) and not isinstance(o, bool) for o in order):
            return False
        return sorted(order) == list(range(len(self.options)))

    def apply_order(self, order: Any) -> bool:
        """
        Replace the presentation order with a stored one.

        Returns:
            False (and keeps the current order) when ``order`` is not a permutation
            of the option set: wrong length, duplicates or foreign indices.
        """
        if not self.is_valid_order(order):
            return False
        self._order[:] = order
        return True
