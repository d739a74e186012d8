"""
Poll a ZAP progress endpoint until it reports 100%.
"""

import time
from typing import Callable, Optional

from utils.error_handler import PollTimeoutError
from utils.logger import get_logger


COMPLETE = 100


def wait_for_completion(
    label: str,
    fetch_status: Callable[[], int],
    interval: float = 1.0,
    timeout: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> int:
    """Block until fetch_status() >= 100 and return the number of polls made.

    A timeout of 0 waits forever; otherwise PollTimeoutError is raised once
    `timeout` seconds have passed without completion. Errors from
    fetch_status propagate unchanged.
    """
    logger = get_logger()
    deadline: Optional[float] = clock() + timeout if timeout > 0 else None
    last_pct = -1
    polls = 0

    while True:
        pct = fetch_status()
        polls += 1
        if pct != last_pct:
            logger.info(f"{label} progress: {pct}%")
            last_pct = pct
        if pct >= COMPLETE:
            return polls
        if deadline is not None and clock() >= deadline:
            raise PollTimeoutError(label, timeout, pct)
        sleep(interval)
