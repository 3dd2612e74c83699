"""
Purpose: Audit trail of one order's assignment journey.
What it does:
- DispatchLog: every radius searched, every courier offered, the terminal outcome
- SearchAttempt / AssignmentAttempt: the two append-only sequences
- DispatchLogStore protocol + InMemoryDispatchLogStore

Logs are keyed by order id with upsert semantics: a second run for the same
order replaces the previous log instead of adding another. Logs are never
deleted.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Protocol


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DispatchStatus(str, Enum):
    SEARCHING = "searching"
    ASSIGNED = "assigned"
    PICKED_UP = "picked_up"
    DELIVERED = "delivered"
    FAILED = "failed"


class AttemptOutcome(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    TIMEOUT = "timeout"


class FailureReason(str, Enum):
    EXHAUSTED = "exhausted"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    OUTSIDE_SERVICE_ZONE = "outside_service_zone"
    # unexpected error mid-run (offer channel, store)
    ERROR = "error"


@dataclass
class SearchAttempt:
    radius: int
    found: int
    timestamp: datetime = field(default_factory=utcnow)
    # True when the directory failed; found is then 0 but not meaningful
    failed: bool = False


@dataclass
class AssignmentAttempt:
    courier_id: str
    outcome: AttemptOutcome = AttemptOutcome.PENDING
    timestamp: datetime = field(default_factory=utcnow)


@dataclass
class DispatchLog:
    order_id: str
    status: DispatchStatus = DispatchStatus.SEARCHING
    courier_id: Optional[str] = None
    zone_id: Optional[str] = None
    failure_reason: Optional[FailureReason] = None

    search_attempts: List[SearchAttempt] = field(default_factory=list)
    assignment_attempts: List[AssignmentAttempt] = field(default_factory=list)

    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    # --- Append helpers (the loop only ever appends) ---

    def record_search(self, radius: int, found: int, failed: bool = False) -> SearchAttempt:
        attempt = SearchAttempt(radius=radius, found=found, failed=failed)
        self.search_attempts.append(attempt)
        self.updated_at = attempt.timestamp
        return attempt

    def record_offer(self, courier_id: str) -> AssignmentAttempt:
        attempt = AssignmentAttempt(courier_id=courier_id)
        self.assignment_attempts.append(attempt)
        self.updated_at = attempt.timestamp
        return attempt

    def resolve_offer(self, attempt: AssignmentAttempt, outcome: AttemptOutcome) -> None:
        attempt.outcome = outcome
        attempt.timestamp = utcnow()
        self.updated_at = attempt.timestamp

    # --- Terminal transitions ---

    def mark_assigned(self, courier_id: str) -> None:
        self.courier_id = courier_id
        self.status = DispatchStatus.ASSIGNED
        self.failure_reason = None
        self.updated_at = utcnow()

    def mark_failed(self, reason: FailureReason) -> None:
        self.status = DispatchStatus.FAILED
        self.failure_reason = reason
        self.updated_at = utcnow()

    @property
    def radii_tried(self) -> List[int]:
        return [attempt.radius for attempt in self.search_attempts]


class DispatchLogStore(Protocol):
    def upsert(self, log: DispatchLog) -> DispatchLog:
        ...

    def get(self, order_id: str) -> Optional[DispatchLog]:
        ...

    def list(
        self,
        status: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[DispatchLog]:
        ...


def matches_filter(
    log: DispatchLog,
    status: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> bool:
    """
    Status filter applies on its own; the date range only applies when both
    ends are given.
    """
    if status and log.status.value != str(status):
        return False

    if start is not None and end is not None:
        if not (start <= log.created_at <= end):
            return False

    return True


@dataclass
class InMemoryDispatchLogStore:
    _logs: Dict[str, DispatchLog] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def upsert(self, log: DispatchLog) -> DispatchLog:
        with self._lock:
            existing = self._logs.get(log.order_id)
            if existing is not None and existing is not log:
                # keep the original creation time of the journey
                log.created_at = existing.created_at
            self._logs[log.order_id] = log
            return log

    def get(self, order_id: str) -> Optional[DispatchLog]:
        return self._logs.get(order_id)

    def list(
        self,
        status: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[DispatchLog]:
        logs = [log for log in list(self._logs.values()) if matches_filter(log, status, start, end)]
        logs.sort(key=lambda log: log.created_at, reverse=True)
        return logs
