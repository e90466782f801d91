"""
Purpose: Score a completed interview and write the coaching text.
Powers the Feedback view and the history list.

What is inside:
score_interview(role, exchanges) -> Feedback
(communication from answer length, technical from use of examples,
overall as the half-up rounded mean of the two)

Rule-based on purpose: no LLM call, same input gives the same Feedback.

Testing: Known transcripts per role; bounds (very short / very long answers).
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping, Union

from ..models import Exchange, Feedback, RoleType
from ..roles import get_role_config, to_role_type

EXAMPLE_CUES = ("example", "time when", "situation")

MIN_SCORE = 5
MAX_SCORE = 10
CHARS_PER_POINT = 50
DETAILED_AVG_CHARS = 100
BRIEF_AVG_CHARS = 80

STRENGTH_DETAILED = "Provided detailed, thoughtful responses"
STRENGTH_EXAMPLES = "Used concrete examples to illustrate points"
STRENGTH_QUESTIONS = "Asked engaging questions"
STRENGTH_FALLBACK = "Completed the interview and showed interest"

IMPROVE_DETAIL = "Provide more detailed responses with specific examples"
IMPROVE_STAR = (
    "Use the STAR method (Situation, Task, Action, Result) for behavioral questions"
)
IMPROVE_CLARITY = "Practice articulating your thoughts more clearly"
IMPROVE_TRADE_OFFS = "Be ready to discuss technical trade-offs and decisions"

_ROLE_CLOSINGS = {
    RoleType.SALES: "Show your passion for building relationships and closing deals.",
    RoleType.ENGINEER: (
        "Be ready to discuss technical challenges and your problem-solving approach."
    ),
}
_DEFAULT_CLOSING = (
    "Emphasize your customer-first mindset and problem-solving abilities."
)

_DETAILED_TEMPLATE = """
Overall Performance: {overall}/10

Your interview showed {tier} potential. {length_sentence}

{examples_sentence}

For {title} interviews, focus on demonstrating both your technical knowledge \
and your communication skills. {closing}

Keep practicing and you'll continue to improve!
"""


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (built-in round() is banker's)."""
    return int(math.floor(value + 0.5))


def _response_of(x: Union[Exchange, Mapping[str, Any]]) -> str:
    if isinstance(x, Exchange):
        return x.response
    return x["response"]


def average_length(responses: list[str]) -> float:
    if not responses:
        raise ValueError("Cannot score an interview with no exchanges.")
    return sum(len(r) for r in responses) / len(responses)


def communication_score(avg_length: float) -> int:
    raw = math.floor(avg_length / CHARS_PER_POINT) + MIN_SCORE
    return min(MAX_SCORE, max(MIN_SCORE, raw))


def has_specific_examples(responses: list[str]) -> bool:
    return any(cue in r.lower() for r in responses for cue in EXAMPLE_CUES)


def list_strengths(avg_length: float, examples: bool, responses: list[str]) -> list[str]:
    out: list[str] = []
    if avg_length > DETAILED_AVG_CHARS:
        out.append(STRENGTH_DETAILED)
    if examples:
        out.append(STRENGTH_EXAMPLES)
    if any("?" in r for r in responses):
        out.append(STRENGTH_QUESTIONS)
    if not out:
        out.append(STRENGTH_FALLBACK)
    return out


def list_improvements(avg_length: float, examples: bool, role: RoleType) -> list[str]:
    out: list[str] = []
    if avg_length < BRIEF_AVG_CHARS:
        out.append(IMPROVE_DETAIL)
    if not examples:
        out.append(IMPROVE_STAR)
    out.append(IMPROVE_CLARITY)
    if role is RoleType.ENGINEER:
        out.append(IMPROVE_TRADE_OFFS)
    return out


def detailed_feedback(
    role: RoleType, overall: int, avg_length: float, examples: bool
) -> str:
    if avg_length > DETAILED_AVG_CHARS:
        length_sentence = (
            "Your responses were well-developed and showed depth of thought."
        )
    else:
        length_sentence = (
            "Consider expanding your responses with more details and examples."
        )
    if examples:
        examples_sentence = (
            "You did well providing concrete examples from your experience."
        )
    else:
        examples_sentence = (
            "Try to include more specific examples from your past experiences."
        )
    return _DETAILED_TEMPLATE.format(
        overall=overall,
        tier="strong" if overall >= 7 else "good",
        length_sentence=length_sentence,
        examples_sentence=examples_sentence,
        title=get_role_config(role).title,
        closing=_ROLE_CLOSINGS.get(role, _DEFAULT_CLOSING),
    ).strip()


def score_interview(
    role: Union[RoleType, str],
    exchanges: Iterable[Union[Exchange, Mapping[str, Any]]],
) -> Feedback:
    """
    Compute the end-of-session Feedback from the ordered exchanges.
    Raises ValueError on an unknown role or an empty exchange list.
    """
    role = to_role_type(role)
    responses = [_response_of(x) for x in exchanges]
    avg = average_length(responses)

    comm = communication_score(avg)
    examples = has_specific_examples(responses)
    tech = 8 if examples else 6
    overall = round_half_up((comm + tech) / 2)

    return Feedback(
        overall_score=overall,
        communication_score=comm,
        technical_score=tech,
        strengths="; ".join(list_strengths(avg, examples, responses)),
        improvements="; ".join(list_improvements(avg, examples, role)),
        detailed_feedback=detailed_feedback(role, overall, avg, examples),
    )
