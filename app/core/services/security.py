"""
Purpose: Guardrails for inputs.
Content: early, predictable failures; reject empty or oversized answers and
malformed credentials before anything reaches the store or auth provider.
"""

import re

EMAIL = re.compile(r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", re.I)

MAX_ANSWER_CHARS = 8000
MIN_PASSWORD_CHARS = 6


class DefaultSecurity:
    def validate_user_input(self, text: str) -> str:
        """Return the trimmed answer or raise ValueError."""
        cleaned = self.sanitize(text)
        if not cleaned:
            raise ValueError("Please enter a non-empty response.")
        if len(cleaned) > MAX_ANSWER_CHARS:
            raise ValueError("Your response is too long. Please shorten it.")
        return cleaned

    def sanitize(self, text: str) -> str:
        return (text or "").replace("\x00", "").strip()

    def validate_credentials(self, email: str, password: str) -> str:
        """Return the normalized email or raise ValueError."""
        email = (email or "").strip().lower()
        if not EMAIL.match(email):
            raise ValueError("Please enter a valid email address.")
        if len(password or "") < MIN_PASSWORD_CHARS:
            raise ValueError(
                f"Password must be at least {MIN_PASSWORD_CHARS} characters."
            )
        return email
