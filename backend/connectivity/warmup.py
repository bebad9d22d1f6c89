"""
Backend warm-up manager.

Responsibilities:
- Wake a sleeping free-tier backend before the first real request
- Retry through cold-start latency with exponential backoff
- Keep the backend awake with periodic pings
- Re-enter a wake cycle when a keep-alive ping fails

Non-responsibilities:
- NO HTTP details (see connectivity.transport)
- NO backoff arithmetic (see connectivity.backoff)
- NO exceptions surfaced to callers: every outcome is a bool,
  an accessor value, or a JSONL diagnostic

Concurrency:
- Single event loop, no locks.
- `wakeup_in_progress` guarantees at most one wake cycle in flight.
- The keep-alive task is the only background task and is replaced,
  never duplicated.
"""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from config import AppConfig
from connectivity.backoff import (
    BackoffPolicy,
    WarmupTimings,
    attempt_timeout_s,
    retry_delay_s,
    should_retry,
)
from connectivity.connection_state import ConnectionState, ConnectionStatus
from connectivity.transport import HttpWakeTransport, TransportError, WakeTransport
from constants import PING_STATUS_PONG, WAKE_STATUS_AWAKE
from observability.logger import log_event
from observability.metrics import timed


# ---------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------

SleepFn = Callable[[float], Awaitable[None]]
NowFn = Callable[[], datetime]
ClockFn = Callable[[], float]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------
# Warm-up Manager
# ---------------------------------------------------------------------

class WarmupManager:
    """
    Wakes the backend and keeps it awake.

    Lifecycle:
    1. initialize_server() on app load (or wake_server() directly)
    2. Successful wake starts the keep-alive task
    3. Keep-alive pings every keep_alive_interval_s
    4. A failed ping triggers one fresh wake cycle
    5. aclose() / stop_keep_alive() on shutdown

    `sleep` is used for backoff and follow-up delays only; the
    keep-alive interval always runs on the event loop clock.
    `clock` is monotonic seconds and bounds the follow-up phase.
    """

    def __init__(
        self,
        *,
        transport: WakeTransport,
        policy: BackoffPolicy | None = None,
        timings: WarmupTimings | None = None,
        sleep: SleepFn = asyncio.sleep,
        now: NowFn = _utcnow,
        clock: ClockFn = time.monotonic,
    ) -> None:
        self._transport = transport
        self._policy = policy or BackoffPolicy()
        self._timings = timings or WarmupTimings()
        self._sleep = sleep
        self._now = now
        self._clock = clock

        self._state = ConnectionState(
            degraded_threshold=self._timings.degraded_threshold,
        )
        self._keep_alive_task: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def is_server_awake(self) -> bool:
        return self._state.is_awake

    @property
    def last_wake_time(self) -> datetime | None:
        return self._state.last_wake_time

    @property
    def failed_attempts(self) -> int:
        return self._state.failed_attempts

    @property
    def status(self) -> ConnectionStatus:
        return self._state.status

    @property
    def keep_alive_active(self) -> bool:
        task = self._keep_alive_task
        return task is not None and not task.done()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def wake_server(self) -> bool:
        """
        Run one wake cycle and start keep-alive on success.

        Re-entrant calls while a cycle is in flight return the current
        is_awake value without touching the network.
        """
        if self._state.wakeup_in_progress:
            log_event({"event_type": "WAKE_ALREADY_IN_PROGRESS"})
            return self._state.is_awake

        awake = await self._wake_cycle()
        if awake:
            self.start_keep_alive()
        return awake

    async def ping(self) -> bool:
        """
        Single-shot liveness check. No retry, no recovery.

        Returns True on {"status": "pong"}; otherwise marks the
        backend as not awake and returns False.
        """
        timeout_s = self._timings.ping_timeout_s
        try:
            body = await self._transport.ping(timeout_s)
        except TransportError as exc:
            self._state.is_awake = False
            log_event({"event_type": "PING_FAILED", "reason": str(exc)})
            return False

        if body.get("status") == PING_STATUS_PONG:
            self._state.mark_alive(self._now())
            return True

        self._state.is_awake = False
        log_event({
            "event_type": "PING_FAILED",
            "reason": "unexpected_status",
            "status": _safe_status(body),
        })
        return False

    def start_keep_alive(self) -> None:
        """Start (or restart) the keep-alive task. Idempotent."""
        self._cancel_keep_alive_task()
        self._keep_alive_task = asyncio.create_task(self._keep_alive_loop())
        self._keep_alive_task.add_done_callback(_log_keep_alive_crash)
        log_event({
            "event_type": "KEEP_ALIVE_STARTED",
            "interval_s": self._timings.keep_alive_interval_s,
        })

    def stop_keep_alive(self) -> None:
        """Cancel the keep-alive task. No pings are issued afterwards."""
        if self._cancel_keep_alive_task():
            log_event({"event_type": "KEEP_ALIVE_STOPPED"})

    async def initialize_server(self) -> bool:
        """
        First-load warm-up.

        Phase 1: one full wake cycle (exponential backoff).
        Phase 2: if still asleep, sequential single-shot probes every
                 followup_interval_s until followup_budget_s of clock
                 time is spent. Probe timeouts are cut to the time left.

        Phases never overlap, so retries cannot pile up.
        Returns the final is_awake value.
        """
        log_event({"event_type": "INIT_START"})

        if await self.wake_server():
            log_event({"event_type": "INIT_DONE", "phase": "wake"})
            return True

        max_probes = self._timings.max_followups
        deadline = self._clock() + self._timings.followup_budget_s
        log_event({
            "event_type": "INIT_FOLLOWUP",
            "max_probes": max_probes,
            "interval_s": self._timings.followup_interval_s,
            "budget_s": self._timings.followup_budget_s,
        })

        for probe in range(1, max_probes + 1):
            remaining_s = deadline - self._clock()
            if remaining_s <= 0:
                break
            await self._sleep(min(self._timings.followup_interval_s, remaining_s))

            if self._state.is_awake:
                # Woken by a concurrent caller, which owns keep-alive
                break
            if self._state.wakeup_in_progress:
                continue

            remaining_s = deadline - self._clock()
            if remaining_s <= 0:
                break

            log_event({
                "event_type": "INIT_FOLLOWUP_PROBE",
                "probe": probe,
                "max_probes": max_probes,
            })
            timeout_s = min(attempt_timeout_s(self._policy, 0), remaining_s)
            if await self._single_attempt(timeout_s):
                self.start_keep_alive()
                break

        if self._state.is_awake:
            log_event({"event_type": "INIT_DONE", "phase": "followup"})
        else:
            log_event({
                "event_type": "INIT_FAILED",
                "failed_attempts": self._state.failed_attempts,
            })
        return self._state.is_awake

    async def aclose(self) -> None:
        """Stop keep-alive, wait for it to unwind, close the transport."""
        task = self._keep_alive_task
        self.stop_keep_alive()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
        await self._transport.aclose()

    async def __aenter__(self) -> WarmupManager:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _wake_cycle(self) -> bool:
        """One bounded backoff cycle. Caller has checked the guard."""
        self._state.wakeup_in_progress = True
        log_event({
            "event_type": "WAKE_START",
            "max_attempts": self._policy.max_attempts,
        })

        failures = 0
        try:
            while should_retry(self._policy, failures):
                timeout_s = attempt_timeout_s(self._policy, failures)
                if await self._attempt_wake(attempt=failures, timeout_s=timeout_s):
                    return True

                failures += 1
                if should_retry(self._policy, failures):
                    delay_s = retry_delay_s(self._policy, failures)
                    log_event({
                        "event_type": "WAKE_RETRY_SCHEDULED",
                        "attempt": failures,
                        "max_attempts": self._policy.max_attempts,
                        "delay_s": delay_s,
                    })
                    await self._sleep(delay_s)
        finally:
            self._state.wakeup_in_progress = False

        self._state.mark_exhausted()
        log_event({
            "event_type": "WAKE_EXHAUSTED",
            "attempts": failures,
            "failed_attempts": self._state.failed_attempts,
        })
        if self._state.failed_attempts >= self._state.degraded_threshold:
            log_event({
                "event_type": "WAKE_DEGRADED",
                "failed_attempts": self._state.failed_attempts,
            })
        return False

    async def _single_attempt(self, timeout_s: float) -> bool:
        """One guarded wake attempt."""
        self._state.wakeup_in_progress = True
        try:
            return await self._attempt_wake(attempt=0, timeout_s=timeout_s)
        finally:
            self._state.wakeup_in_progress = False

    async def _attempt_wake(self, *, attempt: int, timeout_s: float) -> bool:
        """Issue exactly one wake call; update state on success."""
        body: dict[str, Any] | None = None
        error: str | None = None

        with timed(
            "wake_response",
            details={"attempt": attempt + 1, "timeout_s": timeout_s},
        ) as timer:
            try:
                body = await self._transport.wake(timeout_s)
            except TransportError as exc:
                error = str(exc)

        if body is None:
            log_event({
                "event_type": "WAKE_ATTEMPT_FAILED",
                "attempt": attempt + 1,
                "timeout_s": timeout_s,
                "reason": error,
            })
            return False

        if body.get("status") != WAKE_STATUS_AWAKE:
            log_event({
                "event_type": "WAKE_ATTEMPT_FAILED",
                "attempt": attempt + 1,
                "timeout_s": timeout_s,
                "reason": "unexpected_status",
                "status": _safe_status(body),
            })
            return False

        self._state.mark_awake(self._now())
        log_event({
            "event_type": "WAKE_SUCCESS",
            "attempt": attempt + 1,
            "response_time_ms": timer.duration_ms,
            "uptime_s": body.get("uptime"),
        })
        return True

    async def _keep_alive_loop(self) -> None:
        """Ping forever; one wake cycle per failed ping. Ends on cancel."""
        interval_s = self._timings.keep_alive_interval_s
        while True:
            await asyncio.sleep(interval_s)

            log_event({"event_type": "KEEP_ALIVE_PING"})
            if await self.ping():
                continue

            log_event({"event_type": "KEEP_ALIVE_RECOVERY"})
            if self._state.wakeup_in_progress:
                continue
            # Runs inside this task, so it must not restart keep-alive
            await self._wake_cycle()

    def _cancel_keep_alive_task(self) -> bool:
        task = self._keep_alive_task
        self._keep_alive_task = None
        if task is None or task.done():
            return False
        task.cancel()
        return True


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------

def _log_keep_alive_crash(task: asyncio.Task[None]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        log_event({
            "event_type": "KEEP_ALIVE_CRASHED",
            "exception": type(exc).__name__,
            "message": str(exc),
        })


def _safe_status(body: dict[str, Any]) -> str | None:
    status = body.get("status")
    return status if isinstance(status, str) else repr(status)


def build_warmup_manager(config: AppConfig, **kwargs: Any) -> WarmupManager:
    """Build a manager talking HTTP to the configured backend."""
    return WarmupManager(
        transport=HttpWakeTransport(config.api_base_url),
        timings=WarmupTimings(keep_alive_interval_s=config.keep_alive_interval_s),
        **kwargs,
    )
