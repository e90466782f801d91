"""
Purpose: The static per-role interview script. Read-only, built once at import.
Each role has a display title, a description for the role picker, six scripted
questions and a keyword -> follow-up table (insertion order is the match order).
"""

from __future__ import annotations
from types import MappingProxyType
from typing import Union

from .models import RoleConfig, RoleType


def _role(title, description, questions, triggers) -> RoleConfig:
    return RoleConfig(
        title=title,
        description=description,
        questions=tuple(questions),
        follow_up_triggers=MappingProxyType(
            {k: tuple(v) for k, v in triggers.items()}
        ),
    )


ROLE_CONFIGS = MappingProxyType(
    {
        RoleType.SALES: _role(
            "Sales Representative",
            "Prepare for sales roles focusing on persuasion, client relationships, "
            "and closing deals",
            [
                "Tell me about yourself and your experience in sales.",
                "Describe a time when you successfully closed a difficult deal. "
                "What was your approach?",
                "How do you handle rejection from potential clients?",
                "Walk me through your sales process from prospecting to closing.",
                "What strategies do you use to build long-term relationships with clients?",
                "How do you stay motivated when you're not meeting your sales targets?",
            ],
            {
                "experience": [
                    "Can you give me a specific example?",
                    "What were the results?",
                ],
                "client": [
                    "How did the client respond?",
                    "What would you do differently?",
                ],
                "approach": [
                    "Why did you choose that approach?",
                    "How do you measure success?",
                ],
                "strategy": [
                    "Can you elaborate on that strategy?",
                    "How effective has it been?",
                ],
            },
        ),
        RoleType.ENGINEER: _role(
            "Software Engineer",
            "Practice technical interviews focusing on problem-solving, coding, "
            "and system design",
            [
                "Tell me about your background in software engineering.",
                "Describe a challenging technical problem you solved recently. "
                "What was your approach?",
                "How do you stay current with new technologies and programming languages?",
                "Walk me through how you would design a scalable web application.",
                "Tell me about a time when you had to debug a complex issue. "
                "What was your process?",
                "How do you approach code reviews and collaborating with other developers?",
            ],
            {
                "technical": [
                    "What technologies did you use?",
                    "How did you evaluate different solutions?",
                ],
                "design": [
                    "What trade-offs did you consider?",
                    "How would you handle scaling?",
                ],
                "problem": [
                    "What was the root cause?",
                    "How long did it take to resolve?",
                ],
                "code": [
                    "What coding standards do you follow?",
                    "How do you ensure code quality?",
                ],
            },
        ),
        RoleType.RETAIL_ASSOCIATE: _role(
            "Retail Associate",
            "Prepare for retail positions focusing on customer service and sales "
            "floor management",
            [
                "Tell me about your experience working in retail or customer service.",
                "Describe a time when you dealt with a difficult customer. "
                "How did you handle it?",
                "How would you approach a customer who seems hesitant about making "
                "a purchase?",
                "What would you do if you noticed a coworker providing poor customer "
                "service?",
                "How do you stay organized during busy periods?",
                "Why do you want to work in retail?",
            ],
            {
                "customer": [
                    "What was the outcome?",
                    "How did the customer react?",
                ],
                "service": [
                    "Can you give me another example?",
                    "What did you learn from that?",
                ],
                "approach": [
                    "What specific steps did you take?",
                    "How effective was that?",
                ],
                "busy": [
                    "Can you walk me through a specific situation?",
                    "What's your priority system?",
                ],
            },
        ),
        RoleType.MARKETING: _role(
            "Marketing Specialist",
            "Practice for marketing roles focusing on campaigns, analytics, "
            "and creativity",
            [
                "Tell me about your background in marketing.",
                "Describe a successful marketing campaign you worked on. "
                "What made it successful?",
                "How do you measure the effectiveness of a marketing campaign?",
                "How do you stay updated with the latest marketing trends?",
                "Tell me about a time when a campaign didn't perform as expected. "
                "What did you do?",
                "How do you balance creativity with data-driven decision making?",
            ],
            {
                "campaign": [
                    "What metrics did you track?",
                    "What was your target audience?",
                ],
                "creative": [
                    "How did you come up with that idea?",
                    "What feedback did you receive?",
                ],
                "data": [
                    "What tools do you use for analysis?",
                    "How do you present findings?",
                ],
                "trend": [
                    "How do you apply those trends?",
                    "What's your content strategy?",
                ],
            },
        ),
        RoleType.CUSTOMER_SERVICE: _role(
            "Customer Service Representative",
            "Prepare for customer service roles focusing on communication and "
            "problem resolution",
            [
                "Tell me about your customer service experience.",
                "Describe a time when you turned an angry customer into a satisfied one.",
                "How do you handle multiple customer inquiries at the same time?",
                "What would you do if you didn't know the answer to a customer's "
                "question?",
                "How do you maintain patience when dealing with difficult situations?",
                "Why is customer service important to you?",
            ],
            {
                "customer": [
                    "What exactly did you say?",
                    "How long did it take to resolve?",
                ],
                "difficult": [
                    "What was the most challenging part?",
                    "What would you do differently?",
                ],
                "handle": [
                    "What's your process?",
                    "How do you prioritize?",
                ],
                "know": [
                    "What resources do you use?",
                    "How quickly can you learn new information?",
                ],
            },
        ),
    }
)


def to_role_type(role: Union[RoleType, str]) -> RoleType:
    """Coerce a role enum or its string value; raise ValueError otherwise."""
    if isinstance(role, RoleType):
        return role
    try:
        return RoleType(role)
    except ValueError:
        raise ValueError(f"Unknown interview role: {role!r}") from None


def get_role_config(role: Union[RoleType, str]) -> RoleConfig:
    return ROLE_CONFIGS[to_role_type(role)]


def list_roles() -> list[RoleType]:
    """Roles in the order the picker shows them."""
    return list(ROLE_CONFIGS.keys())
