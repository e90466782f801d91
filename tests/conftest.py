"""Shared fixtures: scripted random source, in-memory backends, controller."""

import random

import pytest

from core.controller import InterviewSessionController
from core.persistence.session_store import InMemorySessionStore
from core.services.auth import InMemoryAuthProvider


class ScriptedRandom(random.Random):
    """random() returns the queued draws (then 0.0); choice() picks a fixed index."""

    def __init__(self, draws=(), pick=0):
        super().__init__(0)
        self.draws = list(draws)
        self.pick = pick

    def random(self):
        return self.draws.pop(0) if self.draws else 0.0

    def choice(self, seq):
        return seq[self.pick]


class FakeSpeech:
    def __init__(self, transcript="spoken answer"):
        self.transcript = transcript
        self.spoken = []

    def transcribe(self, wav_bytes):
        return self.transcript

    def synthesize(self, text):
        self.spoken.append(text)
        return b"mp3:" + text.encode()


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def auth():
    return InMemoryAuthProvider()


@pytest.fixture
def rng():
    return ScriptedRandom()


@pytest.fixture
def controller(store, auth, rng):
    return InterviewSessionController(store, auth, rng=rng)


@pytest.fixture
def signed_in(controller):
    controller.sign_up("ana@example.com", "secret123")
    return controller
