import random

import pytest

from conftest import ScriptedRandom
from core.models import RoleType
from core.roles import get_role_config
from core.services.question_generator import (
    CLOSING_LINE,
    get_initial_question,
    match_trigger,
    next_question,
)

LONG_SALES_ANSWER = (
    "I have eight years of experience selling enterprise software to mid-size firms."
)
LONG_NO_TRIGGER = "x" * 80


@pytest.mark.parametrize("role", list(RoleType))
def test_index_zero_always_returns_first_scripted_question(role):
    nxt = next_question(role, 0, "", rng=ScriptedRandom([0.99]))
    assert nxt.question == get_role_config(role).questions[0]
    assert nxt.is_follow_up is False
    assert get_initial_question(role) == nxt.question


def test_index_zero_ignores_long_trigger_answer():
    nxt = next_question("sales", 0, LONG_SALES_ANSWER, rng=ScriptedRandom([0.99]))
    assert nxt.is_follow_up is False


@pytest.mark.parametrize("role", list(RoleType))
@pytest.mark.parametrize("index", [6, 7, 50])
def test_exhausted_script_returns_closing_line(role, index):
    for answer, draw in [("", 0.99), ("short", 0.99), (LONG_NO_TRIGGER, 0.99), (LONG_SALES_ANSWER, 0.1)]:
        nxt = next_question(role, index, answer, rng=ScriptedRandom([draw]))
        assert nxt.question == CLOSING_LINE
        assert nxt.is_follow_up is False


def test_follow_up_still_possible_past_the_script():
    nxt = next_question("sales", 6, LONG_SALES_ANSWER, rng=ScriptedRandom([0.9]))
    assert nxt.is_follow_up is True
    assert nxt.question == "Can you give me a specific example?"


@pytest.mark.parametrize("index", [1, 2, 3, 4, 5])
def test_scripted_question_at_index_when_no_follow_up(index):
    nxt = next_question("engineer", index, "", rng=ScriptedRandom([0.99]))
    assert nxt.question == get_role_config("engineer").questions[index]
    assert not nxt.is_follow_up


def test_follow_up_when_draw_high_and_answer_long_with_trigger():
    nxt = next_question("sales", 1, LONG_SALES_ANSWER, rng=ScriptedRandom([0.9]))
    assert nxt.is_follow_up is True
    assert nxt.question == "Can you give me a specific example?"


def test_follow_up_candidate_is_picked_by_rng():
    nxt = next_question("sales", 1, LONG_SALES_ANSWER, rng=ScriptedRandom([0.9], pick=1))
    assert nxt.question == "What were the results?"


def test_draw_at_threshold_does_not_follow_up():
    nxt = next_question("sales", 1, LONG_SALES_ANSWER, rng=ScriptedRandom([0.5]))
    assert nxt.is_follow_up is False
    assert nxt.question == get_role_config("sales").questions[1]


def test_answers_of_fifty_chars_or_less_never_follow_up():
    answer = ("my experience " * 10)[:50]
    assert len(answer) == 50
    for draw in (0.51, 0.75, 0.999):
        nxt = next_question("sales", 2, answer, rng=ScriptedRandom([draw]))
        assert nxt.is_follow_up is False


def test_fifty_one_chars_can_follow_up():
    answer = ("my experience " * 10)[:51]
    nxt = next_question("sales", 2, answer, rng=ScriptedRandom([0.99]))
    assert nxt.is_follow_up is True


def test_long_answer_without_trigger_gets_scripted_question():
    nxt = next_question("sales", 3, LONG_NO_TRIGGER, rng=ScriptedRandom([0.99]))
    assert nxt.is_follow_up is False
    assert nxt.question == get_role_config("sales").questions[3]


def test_trigger_match_is_case_insensitive():
    answer = "My EXPERIENCE in the field spans many industries and many customers."
    assert match_trigger("sales", answer) == "experience"
    nxt = next_question("sales", 1, answer, rng=ScriptedRandom([0.9]))
    assert nxt.is_follow_up


def test_first_trigger_in_table_order_wins():
    # "strategy" appears first in the text, but "client" comes first in the table.
    answer = "My strategy was to call every client back within a day, always politely."
    assert match_trigger("sales", answer) == "client"
    nxt = next_question("sales", 2, answer, rng=ScriptedRandom([0.9]))
    assert nxt.question == "How did the client respond?"


def test_trigger_matches_as_substring():
    assert match_trigger("engineer", "I refactored the codebase") == "code"
    assert match_trigger("marketing", "Following trends closely") == "trend"


def test_string_role_accepted():
    nxt = next_question("customer_service", 4, "", rng=ScriptedRandom())
    assert nxt.question == get_role_config(RoleType.CUSTOMER_SERVICE).questions[4]


def test_invalid_role_fails_fast():
    with pytest.raises(ValueError):
        next_question("pilot", 0, "")


def test_negative_index_rejected():
    with pytest.raises(ValueError):
        next_question("sales", -1, "")


def test_default_rng_yields_both_outcomes_over_many_turns():
    rng = random.Random(1234)
    outcomes = {
        next_question("sales", 1, LONG_SALES_ANSWER, rng=rng).is_follow_up
        for _ in range(200)
    }
    assert outcomes == {True, False}


def test_works_without_injected_rng():
    nxt = next_question("marketing", 2, "")
    assert nxt.question == get_role_config("marketing").questions[2]
