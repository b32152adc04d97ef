from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from typing import Any

import pytest

from paraphraser.core.config import Settings
from paraphraser.services.completion import CompletionResult

DETECT_PREFIX = "You are an expert AI content detector."
REFINE_PREFIX = "This text was flagged as"


def prompt_kind(prompt: str) -> str:
    if prompt.startswith(DETECT_PREFIX):
        return "detect"
    if prompt.startswith(REFINE_PREFIX):
        return "refine"
    return "rewrite"


def prompt_body(prompt: str) -> str:
    return prompt.split('"""\n', 1)[1].rsplit('\n"""', 1)[0]


def verdict_json(ai_score: int, patterns: list[str] | None = None) -> str:
    return json.dumps(
        {
            "aiScore": ai_score,
            "humanScore": 100 - ai_score,
            "confidence": "high",
            "detectedPatterns": patterns if patterns is not None else ["Uniform sentence length"],
            "verdict": "Likely AI" if ai_score > 50 else "Likely Human",
        }
    )


class FakeCompletionClient:
    """Records every call and answers through ``handler(kind, body)``."""

    def __init__(self, handler: Callable[[str, str], Any], delay: float = 0.01) -> None:
        self.handler = handler
        self.delay = delay
        self.calls: list[tuple[str, str]] = []
        self.models: list[str] = []
        self.cancelled: list[str] = []
        self._in_flight: dict[str, int] = {}
        self.max_in_flight: dict[str, int] = {}

    def count(self, kind: str) -> int:
        return sum(1 for call_kind, _ in self.calls if call_kind == kind)

    async def complete(self, prompt: str, *, max_tokens: int, model: str, timeout: float | None = None) -> CompletionResult:
        kind = prompt_kind(prompt)
        body = prompt_body(prompt)
        self.calls.append((kind, body))
        self.models.append(model)
        self._in_flight[kind] = self._in_flight.get(kind, 0) + 1
        self.max_in_flight[kind] = max(self.max_in_flight.get(kind, 0), self._in_flight[kind])
        try:
            await asyncio.sleep(self.delay)
            outcome = self.handler(kind, body)
            if asyncio.iscoroutine(outcome):
                outcome = await outcome
        except asyncio.CancelledError:
            self.cancelled.append(kind)
            raise
        finally:
            self._in_flight[kind] -= 1

        if isinstance(outcome, CompletionResult):
            return outcome
        return CompletionResult.success(outcome)


class FakePipeline:
    def __init__(self, redis: FakeRedis) -> None:
        self.redis = redis
        self.ops: list[tuple[str, tuple, dict]] = []

    def __getattr__(self, name: str):
        def queue(*args, **kwargs):
            self.ops.append((name, args, kwargs))
            return self

        return queue

    async def execute(self) -> list[Any]:
        # One round-trip; queued commands apply together, as under MULTI/EXEC.
        await asyncio.sleep(0)
        results = [getattr(self.redis, f"_{name}")(*args, **kwargs) for name, args, kwargs in self.ops]
        self.ops = []
        return results


class FakeRedis:
    """In-memory sorted sets covering the commands the rate limiter sends."""

    def __init__(self) -> None:
        self.zsets: dict[str, dict[str, float]] = {}
        self.expiries: dict[str, int] = {}

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        return FakePipeline(self)

    async def zrem(self, key: str, *members: str) -> int:
        await asyncio.sleep(0)
        zset = self.zsets.get(key, {})
        return sum(1 for member in members if zset.pop(member, None) is not None)

    def _zremrangebyscore(self, key: str, low, high) -> int:
        zset = self.zsets.get(key, {})
        low_v = float(low)
        high_v = float(high)
        doomed = [member for member, score in zset.items() if low_v <= score <= high_v]
        for member in doomed:
            del zset[member]
        return len(doomed)

    def _zcard(self, key: str) -> int:
        return len(self.zsets.get(key, {}))

    def _zrange(self, key: str, start: int, end: int, withscores: bool = False):
        ordered = sorted(self.zsets.get(key, {}).items(), key=lambda item: item[1])
        window = ordered[start : end + 1]
        return window if withscores else [member for member, _ in window]

    def _zadd(self, key: str, mapping: dict[str, float]) -> int:
        zset = self.zsets.setdefault(key, {})
        added = sum(1 for member in mapping if member not in zset)
        zset.update(mapping)
        return added

    def _pexpire(self, key: str, ms: int) -> bool:
        self.expiries[key] = ms
        return True


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def settings() -> Settings:
    return Settings()
