"""Shared fixtures: a scripted model client and a recording sleeper."""

import asyncio
import json
from typing import Callable, Dict, List, Optional, Union

import pytest

from segtrans.core.translation import CompletionOptions, ModelClient, TranslationService

Reply = Union[str, Exception]


def segments_from_prompt(user_prompt: str) -> List[str]:
    """Recover the segment list embedded in a segment-mode user prompt."""
    return json.loads(user_prompt.splitlines()[1])


def echo_reply(segments: List[str]) -> str:
    """A well-formed model answer that tags every segment."""
    return json.dumps(
        [{"original": s, "translation": f"T:{s}", "pinyin": f"p:{s}"} for s in segments],
        ensure_ascii=False,
    )


class FakeModelClient(ModelClient):
    """Scripted model client.

    ``responder`` receives the system and user prompts and returns the raw
    reply, or an exception to raise. ``latency`` maps the first segment of a
    chunk to a delay in seconds.
    """

    def __init__(
        self,
        responder: Optional[Callable[[str, str], Reply]] = None,
        latency: Optional[Dict[str, float]] = None,
        healthy: bool = True,
    ):
        self.responder = responder or (lambda system, user: echo_reply(segments_from_prompt(user)))
        self.latency = latency or {}
        self.healthy = healthy
        self.calls: List[Dict[str, str]] = []
        self.log: List[tuple] = []
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def provider(self) -> str:
        return "fake"

    @property
    def model(self) -> str:
        return "fake-model"

    async def health_check(self) -> bool:
        return self.healthy

    async def complete(self, system_prompt: str, user_prompt: str, options: CompletionOptions) -> str:
        self.calls.append({"system": system_prompt, "user": user_prompt})
        key = user_prompt.splitlines()[1] if len(user_prompt.splitlines()) > 1 else user_prompt
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        self.log.append(("start", key))
        try:
            try:
                first = segments_from_prompt(user_prompt)[0]
            except (ValueError, IndexError):
                first = None
            delay = self.latency.get(first, 0)
            if delay:
                await asyncio.sleep(delay)
            reply = self.responder(system_prompt, user_prompt)
            if isinstance(reply, Exception):
                raise reply
            return reply
        finally:
            self.in_flight -= 1
            self.log.append(("end", key))


class RecordingSleeper:
    """Stands in for asyncio.sleep without waiting."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def fake_client():
    return FakeModelClient()


@pytest.fixture
def sleeper():
    return RecordingSleeper()


@pytest.fixture
def make_service(sleeper):
    """Build a TranslationService around a client with test-friendly defaults."""

    def _make(client: ModelClient, **kwargs) -> TranslationService:
        kwargs.setdefault("sleep", sleeper)
        return TranslationService(client, **kwargs)

    return _make
