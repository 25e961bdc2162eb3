import random

import pytest
from pydantic import ValidationError

from timed_quiz.models.question_model import Question


def _question(correct_index=1):
    return Question.from_raw(id=10, text="Pick b", options=["a", "b", "c", "d"], correct_index=correct_index)


def test_from_raw_builds_indexed_options():
    q = _question()
    assert [o.original_index for o in q.options] == [0, 1, 2, 3]
    assert [o.text for o in q.options] == ["a", "b", "c", "d"]
    assert [o.is_correct for o in q.options] == [False, True, False, False]
    assert q.order == [0, 1, 2, 3]


@pytest.mark.parametrize("bad_index", [-1, 4, 99, None])
def test_out_of_range_correct_index_marks_nothing(bad_index):
    q = _question(bad_index)
    assert not any(o.is_correct for o in q.options)


def test_shuffle_options_keeps_identity():
    q = _question()
    q.shuffle_options(random.Random(5))
    shown = q.options_in_order()
    assert sorted(o.original_index for o in shown) == [0, 1, 2, 3]
    assert [o.text for o in shown] == [q.options[i].text for i in q.order]
    assert sum(o.is_correct for o in shown) == 1
    assert next(o for o in shown if o.is_correct).text == "b"


def test_option_at_follows_presentation_order():
    q = _question()
    assert q.apply_order([3, 2, 1, 0])
    assert q.option_at(0).text == "d"
    assert q.option_at(2).is_correct
    with pytest.raises(IndexError):
        q.option_at(4)
    with pytest.raises(IndexError):
        q.option_at(-1)


@pytest.mark.parametrize(
    "order",
    [
        [0, 1, 2],          # wrong length
        [0, 1, 2, 3, 4],    # wrong length
        [0, 0, 1, 2],       # duplicate
        [0, 1, 2, 7],       # foreign index
        [0, 1, 2, "3"],     # not an int
        [0, 1, 2, True],    # bool is not an index
        None,
        "0123",
    ],
)
def test_apply_order_rejects_non_permutations(order):
    q = _question()
    q.shuffle_options(random.Random(1))
    before = q.order
    assert q.apply_order(order) is False
    assert q.order == before


def test_order_property_is_a_copy():
    q = _question()
    q.order.reverse()
    assert q.order == [0, 1, 2, 3]


def test_question_fields_are_frozen():
    q = _question()
    with pytest.raises(ValidationError):
        q.text = "changed"


def test_question_without_options():
    q = Question.from_raw(id="empty", text="?", options=[], correct_index=0)
    q.shuffle_options()
    assert q.options_in_order() == []
    assert q.apply_order([])
