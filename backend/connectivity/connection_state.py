"""
Connection state for the backend warm-up manager.

Owned by exactly one WarmupManager and mutated only by its methods.
Process-local: nothing here is persisted.

ConnectionStatus is derived from the flags, never stored, so the
flags and the status cannot disagree.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from constants import WAKE_DEGRADED_THRESHOLD


class ConnectionStatus(Enum):
    """
    Backend reachability as seen by this client.

    IDLE:       Not confirmed awake, no wake cycle running.
    WAKING_UP:  A wake cycle is in flight.
    AWAKE:      Last wake or ping succeeded.
    DEGRADED:   Not awake and repeated wake cycles were exhausted.
    """
    IDLE = "IDLE"
    WAKING_UP = "WAKING_UP"
    AWAKE = "AWAKE"
    DEGRADED = "DEGRADED"


@dataclass
class ConnectionState:
    """Mutable connection flags for a single backend."""

    is_awake: bool = False
    wakeup_in_progress: bool = False
    last_wake_time: datetime | None = None

    # Exhausted wake cycles since the last success
    failed_attempts: int = 0

    degraded_threshold: int = WAKE_DEGRADED_THRESHOLD

    @property
    def status(self) -> ConnectionStatus:
        if self.wakeup_in_progress:
            return ConnectionStatus.WAKING_UP
        if self.is_awake:
            return ConnectionStatus.AWAKE
        if self.failed_attempts >= self.degraded_threshold:
            return ConnectionStatus.DEGRADED
        return ConnectionStatus.IDLE

    def mark_awake(self, now: datetime) -> None:
        self.is_awake = True
        self.last_wake_time = now
        self.failed_attempts = 0

    def mark_alive(self, now: datetime) -> None:
        """Ping success: awake again, failure history kept."""
        self.is_awake = True
        self.last_wake_time = now

    def mark_exhausted(self) -> None:
        self.is_awake = False
        self.failed_attempts += 1
