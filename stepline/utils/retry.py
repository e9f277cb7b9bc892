from __future__ import annotations

import asyncio


def compute_backoff(attempt: int, delay_ms: int) -> float:
    """Return the wait in seconds before ``attempt``.

    Backoff is fixed: every retry waits ``delay_ms`` regardless of the
    attempt number.
    """
    return max(0, delay_ms) / 1000


async def schedule_retry(attempt: int, delay_ms: int) -> None:
    """Suspend the calling task before retrying without blocking the loop."""
    delay = compute_backoff(attempt, delay_ms)
    await asyncio.sleep(delay)
