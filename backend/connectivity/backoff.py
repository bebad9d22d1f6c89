"""
Backoff policy for wake-up cycles.

Purpose:
- Centralize the exponential backoff rules
- Keep the warm-up manager free of arithmetic
- Allow tests to assert exact timeout/delay sequences

This module contains NO timers, NO async, NO side effects.
"""
from __future__ import annotations

from dataclasses import dataclass

from constants import (
    FOLLOWUP_BUDGET_S,
    FOLLOWUP_INTERVAL_S,
    KEEP_ALIVE_INTERVAL_S,
    PING_TIMEOUT_S,
    WAKE_BACKOFF_MULTIPLIER,
    WAKE_BASE_DELAY_S,
    WAKE_BASE_TIMEOUT_S,
    WAKE_DEGRADED_THRESHOLD,
    WAKE_MAX_ATTEMPTS,
    WAKE_MAX_DELAY_S,
    WAKE_MAX_TIMEOUT_EXPONENT,
)


# =============================================================================
# Wake cycle policy
# =============================================================================

@dataclass(frozen=True)
class BackoffPolicy:
    """
    Immutable exponential backoff parameters for one wake cycle.

    Semantics:
    - A cycle makes at most `max_attempts` network calls.
    - Attempt index is 0-based for timeouts: attempt 0 uses base_timeout_s.
    - Failure count is 1-based for delays: the wait after the first
      failure is base_delay_s * multiplier.
    """
    max_attempts: int = WAKE_MAX_ATTEMPTS
    base_timeout_s: float = WAKE_BASE_TIMEOUT_S
    multiplier: float = WAKE_BACKOFF_MULTIPLIER
    max_timeout_exponent: int = WAKE_MAX_TIMEOUT_EXPONENT
    base_delay_s: float = WAKE_BASE_DELAY_S
    max_delay_s: float = WAKE_MAX_DELAY_S

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1")


def attempt_timeout_s(policy: BackoffPolicy, attempt: int) -> float:
    """
    Timeout for 0-based attempt N.

    Grows by `multiplier` per attempt until max_timeout_exponent,
    then stays flat.
    """
    exponent = min(attempt, policy.max_timeout_exponent)
    return policy.base_timeout_s * policy.multiplier ** exponent


def retry_delay_s(policy: BackoffPolicy, failures: int) -> float:
    """Wait after the Nth failed attempt (N >= 1), capped at max_delay_s."""
    return min(policy.base_delay_s * policy.multiplier ** failures, policy.max_delay_s)


def should_retry(policy: BackoffPolicy, failures: int) -> bool:
    """
    Returns True if another attempt is allowed.

    failures = number of attempts already made and failed
    """
    return failures < policy.max_attempts


# =============================================================================
# Keep-alive / follow-up timings
# =============================================================================

@dataclass(frozen=True)
class WarmupTimings:
    """Fixed intervals outside the backoff cycle."""
    ping_timeout_s: float = PING_TIMEOUT_S
    keep_alive_interval_s: float = KEEP_ALIVE_INTERVAL_S
    followup_interval_s: float = FOLLOWUP_INTERVAL_S
    followup_budget_s: float = FOLLOWUP_BUDGET_S
    degraded_threshold: int = WAKE_DEGRADED_THRESHOLD

    @property
    def max_followups(self) -> int:
        """Number of single-shot probes the follow-up budget allows."""
        if self.followup_interval_s <= 0:
            return 0
        return int(self.followup_budget_s // self.followup_interval_s)
