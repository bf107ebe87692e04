"""Bounded polling helper shared by the pod wait loops."""

import logging
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


def poll_until(
    condition: Callable[[], bool],
    timeout: int,
    interval: int,
    description: str = "condition",
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """
    Poll a condition until it holds or the timeout elapses.

    The condition is checked before each sleep. Elapsed time is counted in
    whole intervals, so at most ``ceil(timeout / interval)`` checks are made.

    Args:
        condition: Function that returns True when the wait is over
        timeout: Maximum time to wait in seconds
        interval: Delay between checks in seconds
        description: Description for logging
        sleep: Sleep function, replaceable in tests

    Returns:
        True if the condition was met, False on timeout
    """
    elapsed = 0
    while elapsed < timeout:
        if condition():
            return True

        sleep(interval)
        elapsed += interval

    logger.debug(f"Timeout waiting for {description} after {elapsed}s")
    return False
