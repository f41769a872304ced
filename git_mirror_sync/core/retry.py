"""
Bounded retry wrapper for operations that touch the network.
"""

import logging
import time
from typing import Callable, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExecutor:
    """
    Run an operation up to ``max_attempts`` times with a fixed delay in between.

    The delay is constant: no backoff and no jitter. The executor keeps no
    state between calls, so one instance can be shared by every mapping that
    uses the same budget.
    """

    def __init__(
        self,
        max_attempts: int,
        delay: float,
        sleep: Callable[[float], None] = time.sleep,
        retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    ):
        """
        Initialize the executor.

        Args:
            max_attempts: Total number of attempts, at least 1
            delay: Seconds to wait between failed attempts
            sleep: Blocking wait used between attempts
            retry_on: Exception types counted as a failed attempt
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if delay < 0:
            raise ValueError("delay must not be negative")
        self.max_attempts = max_attempts
        self.delay = delay
        self.sleep = sleep
        self.retry_on = retry_on

    def run(self, operation: Callable[[], T], description: str = "operation") -> T:
        """
        Execute ``operation`` until it succeeds or the budget is spent.

        Args:
            operation: Zero-argument callable; raising counts as a failure
            description: Human readable label used in log lines

        Returns:
            Whatever ``operation`` returned on its first successful attempt

        Raises:
            The exception raised by the final attempt, unchanged
        """
        attempt = 1
        while True:
            try:
                return operation()
            except self.retry_on as e:
                if attempt >= self.max_attempts:
                    logger.error(
                        "%s failed after %d attempts: %s", description, self.max_attempts, e
                    )
                    raise
                logger.warning(
                    "%s failed (attempt %d/%d): %s", description, attempt, self.max_attempts, e
                )
                logger.warning("Retrying in %ss...", self.delay)
                self.sleep(self.delay)
                attempt += 1
