"""DOM stability detection for JavaScript-rendered pages.

Polls the serialized HTML size and returns once it stops changing by more
than a small threshold for a quiet window, or once the maximum wait elapses.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from playwright.async_api import Page

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StabilityConfig:
    """Tuning for the DOM stability wait (all values in milliseconds / chars)."""

    max_wait_ms: int = 15000
    quiet_window_ms: int = 1500
    check_interval_ms: int = 200
    html_delta_threshold: int = 200


@dataclass(frozen=True)
class StabilityReport:
    """Outcome of a stability wait."""

    stable: bool
    elapsed_ms: float
    html_length: int
    polls: int


async def wait_for_dom_stability(
    page: Page,
    config: StabilityConfig = StabilityConfig(),
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> StabilityReport:
    """
    Wait until the page markup settles.

    Never raises: if the page cannot be read or the deadline passes, it stops
    waiting and reports ``stable=False``. Total wait is bounded by
    ``max_wait_ms + check_interval_ms``.

    Args:
        page: Playwright page after navigation
        config: Polling and threshold settings
        clock: Monotonic clock in seconds
        sleep: Async sleep in seconds

    Returns:
        StabilityReport describing how the wait ended
    """
    start = clock()
    last_size: Optional[int] = None
    last_poll: Optional[float] = None
    quiet_ms = 0.0
    size = 0
    polls = 0

    def elapsed_ms() -> float:
        return (clock() - start) * 1000

    while elapsed_ms() < config.max_wait_ms:
        poll_timeout_ms = max(config.max_wait_ms - elapsed_ms(), config.check_interval_ms)
        try:
            size = len(await asyncio.wait_for(page.content(), timeout=poll_timeout_ms / 1000))
        except asyncio.TimeoutError:
            logger.debug(f"Page content read exceeded {poll_timeout_ms:.0f}ms during stability wait")
            return StabilityReport(False, elapsed_ms(), size, polls)
        except Exception as e:
            logger.debug(f"Could not read page content during stability wait: {e}")
            return StabilityReport(False, elapsed_ms(), size, polls)

        now = clock()
        polls += 1

        if last_size is not None and abs(size - last_size) <= config.html_delta_threshold:
            quiet_ms += (now - last_poll) * 1000
            if quiet_ms >= config.quiet_window_ms:
                logger.info(f"DOM stable after {elapsed_ms():.0f}ms (size: {size} chars)")
                return StabilityReport(True, elapsed_ms(), size, polls)
        else:
            quiet_ms = 0.0

        last_size = size
        last_poll = now

        remaining_ms = config.max_wait_ms - elapsed_ms()
        if remaining_ms <= 0:
            break
        await sleep(min(config.check_interval_ms, remaining_ms) / 1000)

    logger.info(
        f"DOM did not stabilize within {config.max_wait_ms}ms, "
        f"proceeding with current content ({size} chars)"
    )
    return StabilityReport(False, elapsed_ms(), size, polls)
