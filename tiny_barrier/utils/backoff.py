"""Exponential backoff for caller-side retries."""
import asyncio
import random


def backoff_delay(attempt: int, base: float = 0.5, cap: float = 8.0) -> float:
    """Jittered exponential delay in seconds for a zero-based attempt index."""
    delay = min(cap, base * (2 ** attempt))
    return delay * random.uniform(0.8, 1.2)


async def sleep_backoff(attempt: int, base: float = 0.5, cap: float = 8.0) -> None:
    await asyncio.sleep(backoff_delay(attempt, base=base, cap=cap))
