# pylint: disable=missing-module-docstring,missing-function-docstring

import pytest

from connectivity.backoff import (
    BackoffPolicy,
    WarmupTimings,
    attempt_timeout_s,
    retry_delay_s,
    should_retry,
)


# ---------------------------------------------------------------------
# Timeouts
# ---------------------------------------------------------------------

def test_attempt_timeout_doubles_then_caps():
    policy = BackoffPolicy()

    timeouts = [attempt_timeout_s(policy, n) for n in range(6)]

    assert timeouts == [10.0, 20.0, 40.0, 80.0, 80.0, 80.0]


def test_attempt_timeout_respects_custom_exponent():
    policy = BackoffPolicy(base_timeout_s=1.0, multiplier=3.0, max_timeout_exponent=1)

    assert attempt_timeout_s(policy, 0) == 1.0
    assert attempt_timeout_s(policy, 5) == 3.0


# ---------------------------------------------------------------------
# Delays
# ---------------------------------------------------------------------

def test_retry_delay_grows_until_cap():
    policy = BackoffPolicy()

    delays = [retry_delay_s(policy, n) for n in range(1, 6)]

    assert delays == [2.0, 4.0, 8.0, 10.0, 10.0]


# ---------------------------------------------------------------------
# Attempt budget
# ---------------------------------------------------------------------

def test_should_retry_allows_exactly_max_attempts():
    policy = BackoffPolicy(max_attempts=3)

    assert [should_retry(policy, n) for n in range(5)] == [True, True, True, False, False]


@pytest.mark.parametrize("kwargs", [{"max_attempts": 0}, {"multiplier": 0.5}])
def test_invalid_policy_rejected(kwargs):
    with pytest.raises(ValueError):
        BackoffPolicy(**kwargs)


def test_followup_budget_bounds_probe_count():
    assert WarmupTimings().max_followups == 10
    assert WarmupTimings(followup_interval_s=4.0, followup_budget_s=10.0).max_followups == 2
    assert WarmupTimings(followup_interval_s=0.0).max_followups == 0
