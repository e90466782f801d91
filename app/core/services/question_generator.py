"""
Purpose: Pick the next interview question given role/progress/last answer.
Why: Decouple question logic from the session controller and the UI.

What is inside:
get_initial_question(role) -> str
next_question(role, current_index, previous_response, rng) -> NextQuestion

A follow-up is asked on roughly half of the turns when the last answer is
longer than 50 characters and mentions one of the role's trigger keywords.
Follow-ups do not advance the scripted index; the controller owns that pointer.

Testing: Inject a seeded or scripted random.Random; rules per role.
"""

from __future__ import annotations
import random
from typing import Optional, Union

from ..models import NextQuestion, RoleType
from ..roles import get_role_config

CLOSING_LINE = (
    "Thank you for your responses. "
    "Do you have any questions for me about the role or company?"
)
FOLLOW_UP_PROBABILITY = 0.5
FOLLOW_UP_MIN_CHARS = 50


def get_initial_question(role: Union[RoleType, str]) -> str:
    return get_role_config(role).questions[0]


def match_trigger(role: Union[RoleType, str], text: str) -> Optional[str]:
    """First trigger keyword (table order) found in text, case-insensitive."""
    lowered = (text or "").lower()
    for keyword in get_role_config(role).follow_up_triggers:
        if keyword in lowered:
            return keyword
    return None


def next_question(
    role: Union[RoleType, str],
    current_index: int,
    previous_response: str = "",
    rng: Optional[random.Random] = None,
) -> NextQuestion:
    config = get_role_config(role)
    if current_index < 0:
        raise ValueError(f"current_index must be >= 0, got {current_index}")
    rng = rng or random.Random()
    previous_response = previous_response or ""

    should_follow_up = (
        rng.random() > FOLLOW_UP_PROBABILITY
        and len(previous_response) > FOLLOW_UP_MIN_CHARS
    )

    if should_follow_up and current_index > 0:
        keyword = match_trigger(role, previous_response)
        if keyword is not None:
            candidates = config.follow_up_triggers[keyword]
            return NextQuestion(question=rng.choice(candidates), is_follow_up=True)

    if current_index < len(config.questions):
        return NextQuestion(question=config.questions[current_index])

    return NextQuestion(question=CLOSING_LINE)
