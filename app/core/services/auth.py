"""
Purpose: Identity providers. Supply the user id that owns interview sessions.

- InMemoryAuthProvider: local accounts with passlib hashes; good for demos/tests.
- SupabaseAuthProvider: email/password against Supabase Auth (GoTrue) over httpx.

Both raise AuthError with a message that can be shown as-is in the UI.
"""

from __future__ import annotations

import threading
import uuid
from typing import Any, Optional

import httpx
from passlib.hash import pbkdf2_sha256

from ..models import UserAccount
from ..utils.logger import get_logger

logger = get_logger("services.auth")


class AuthError(ValueError):
    pass


class InMemoryAuthProvider:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._users: dict[str, dict[str, str]] = {}

    def sign_up(self, email: str, password: str) -> UserAccount:
        with self._lock:
            if email in self._users:
                raise AuthError("An account with this email already exists.")
            rec = {"id": str(uuid.uuid4()), "hash": pbkdf2_sha256.hash(password)}
            self._users[email] = rec
        logger.info("Registered local account %s", rec["id"])
        return UserAccount(id=rec["id"], email=email)

    def sign_in(self, email: str, password: str) -> UserAccount:
        with self._lock:
            rec = self._users.get(email)
        if not rec or not pbkdf2_sha256.verify(password, rec["hash"]):
            raise AuthError("Invalid email or password.")
        return UserAccount(id=rec["id"], email=email)

    def sign_out(self, user: UserAccount) -> None:
        return None


class SupabaseAuthProvider:
    def __init__(
        self,
        url: Optional[str],
        key: Optional[str],
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not url or not key:
            raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be set.")
        self.client = httpx.Client(
            base_url=url.rstrip("/"),
            headers={"apikey": key, "Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        return (
            body.get("error_description")
            or body.get("msg")
            or body.get("message")
            or body.get("error")
            or f"HTTP {response.status_code}"
        )

    def _post(self, path: str, **kwargs) -> dict[str, Any]:
        try:
            response = self.client.post(path, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Supabase auth request to %s failed: %s", path, e)
            raise AuthError("Authentication service is unavailable.") from e
        if response.is_error:
            message = self._error_message(response)
            logger.warning("Supabase auth %s rejected: %s", path, message)
            raise AuthError(message)
        if not response.content:
            return {}
        return response.json()

    @staticmethod
    def _to_account(body: dict[str, Any], email: str) -> UserAccount:
        user = body.get("user") or body
        if not user.get("id"):
            raise AuthError("Authentication response did not include a user.")
        return UserAccount(
            id=user["id"],
            email=user.get("email") or email,
            access_token=body.get("access_token"),
        )

    def sign_up(self, email: str, password: str) -> UserAccount:
        body = self._post("/auth/v1/signup", json={"email": email, "password": password})
        return self._to_account(body, email)

    def sign_in(self, email: str, password: str) -> UserAccount:
        body = self._post(
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        return self._to_account(body, email)

    def sign_out(self, user: UserAccount) -> None:
        if not user.access_token:
            return
        self._post(
            "/auth/v1/logout",
            headers={"Authorization": f"Bearer {user.access_token}"},
        )
