import time
import uuid
from dataclasses import dataclass

from redis.asyncio import Redis


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_in_ms: int


async def enforce_sliding_window(
    redis: Redis,
    *,
    key: str,
    limit: int,
    window_seconds: int,
) -> RateLimitResult:
    """Admit one request for ``key`` if fewer than ``limit`` landed in the last window.

    Trim, record and count run in one MULTI transaction, so concurrent
    callers always see each other's entries. A denied request removes its
    own entry again and is not counted against the window.
    """
    now_ms = int(time.time() * 1000)
    window_ms = window_seconds * 1000
    cutoff = now_ms - window_ms
    member = f"{now_ms}:{uuid.uuid4().hex}"

    pipe = redis.pipeline(transaction=True)
    pipe.zremrangebyscore(key, "-inf", cutoff)
    pipe.zadd(key, {member: now_ms})
    pipe.zcard(key)
    pipe.zrange(key, 0, 0, withscores=True)
    pipe.pexpire(key, window_ms)
    _, _, count, oldest, _ = await pipe.execute()

    used = int(count)
    if used > limit:
        await redis.zrem(key, member)
        oldest_ms = int(oldest[0][1]) if oldest else now_ms
        return RateLimitResult(allowed=False, remaining=0, reset_in_ms=max(0, oldest_ms + window_ms - now_ms))

    return RateLimitResult(allowed=True, remaining=max(0, limit - used), reset_in_ms=window_ms)
