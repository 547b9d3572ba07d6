"""
utils.py - Logging, retry and circuit breaker helpers for the statchain package.
"""

import logging
import os
from typing import Optional

from pybreaker import CircuitBreaker, CircuitBreakerListener
from tenacity import Retrying, stop_after_attempt, wait_exponential

from .metrics import LOG_BREAKER_STATE

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"

# Retry and circuit breaker config from environment
RETRY_ATTEMPTS = int(os.getenv("STATCHAIN_RETRY_ATTEMPTS", "3"))
RETRY_WAIT_MULTIPLIER = float(os.getenv("STATCHAIN_RETRY_WAIT_MULTIPLIER", "0.5"))
RETRY_WAIT_MIN = float(os.getenv("STATCHAIN_RETRY_WAIT_MIN", "1"))
RETRY_WAIT_MAX = float(os.getenv("STATCHAIN_RETRY_WAIT_MAX", "10"))
CB_FAIL_MAX = int(os.getenv("STATCHAIN_CB_FAIL_MAX", "5"))
CB_RESET_TIMEOUT = int(os.getenv("STATCHAIN_CB_RESET_TIMEOUT", "60"))


def get_logger(name: Optional[str] = None, level: Optional[str] = None) -> logging.Logger:
    """Return a logger with a standardized format"""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    if level:
        logger.setLevel(level.upper())
    return logger


class PrometheusCircuitBreakerListener(CircuitBreakerListener):
    def state_change(self, cb, old_state, new_state):
        LOG_BREAKER_STATE.set(1 if new_state.name == "open" else 0)


def make_circuit_breaker(
    fail_max: int = CB_FAIL_MAX, reset_timeout: int = CB_RESET_TIMEOUT
) -> CircuitBreaker:
    """Build a circuit breaker that reports its state to Prometheus."""
    return CircuitBreaker(
        fail_max=fail_max,
        reset_timeout=reset_timeout,
        listeners=[PrometheusCircuitBreakerListener()],
    )


def make_retrying(
    attempts: int = RETRY_ATTEMPTS,
    multiplier: float = RETRY_WAIT_MULTIPLIER,
    wait_min: float = RETRY_WAIT_MIN,
    wait_max: float = RETRY_WAIT_MAX,
) -> Retrying:
    """Retry controller with exponential backoff that re-raises the last error."""
    return Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=multiplier, min=wait_min, max=wait_max),
        reraise=True,
    )


__all__ = [
    "get_logger",
    "make_circuit_breaker",
    "make_retrying",
    "RETRY_ATTEMPTS",
    "CB_FAIL_MAX",
]
