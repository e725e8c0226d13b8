from __future__ import annotations

import logging
import threading
from collections import deque
from datetime import datetime
from typing import Callable
from zoneinfo import ZoneInfo

from ..config import DEFAULT_WAIT_TIME_CONFIG, WaitTimeConfig
from .classifiers import classify_time_slot
from .models import (
    AggregateWaitTime,
    RejectedReason,
    TimeSlot,
    VenueWaitState,
    WaitTimeReport,
    ensure_utc,
    utc_now,
)

logger = logging.getLogger(__name__)


class ReportRejectedError(ValueError):
    """Raised when a submitted report fails validation. State is untouched."""

    def __init__(self, reason: RejectedReason, report: WaitTimeReport | None = None) -> None:
        self.reason = reason
        self.report = report
        super().__init__(reason.value)


class _VenueLedger:
    """Mutable per-venue state. Every access goes through ``lock``."""

    __slots__ = ("lock", "reports", "slots", "total_reports", "last_updated", "newest_report_at")

    def __init__(self, max_reports: int) -> None:
        self.lock = threading.Lock()
        self.reports: deque[WaitTimeReport] = deque(maxlen=max_reports)
        self.slots: dict[TimeSlot, AggregateWaitTime] = {}
        self.total_reports = 0
        self.last_updated: datetime | None = None
        self.newest_report_at: datetime | None = None


class WaitTimeAggregator:
    """
    Owns the wait-time state of every venue.

    Submissions for one venue are serialised by that venue's lock, so N
    concurrent submits behave like some serial order of them. Different
    venues never contend. Readers take the venue lock only long enough to
    copy what they need.

    The retained report log is bounded: a ring buffer of
    ``max_reports_per_venue`` entries, compacted on every accepted submit to
    drop reports older than ``retention_seconds`` relative to the newest one.
    Historical slot averages are incremental and survive compaction.
    """

    def __init__(
        self,
        config: WaitTimeConfig = DEFAULT_WAIT_TIME_CONFIG,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.config = config
        self._clock = clock
        self._ledgers: dict[str, _VenueLedger] = {}
        self._registry_lock = threading.Lock()

    def now(self) -> datetime:
        """Current time according to the injected clock, in UTC."""
        return ensure_utc(self._clock())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def validate(self, report: WaitTimeReport) -> RejectedReason | None:
        """Return why *report* would be rejected, or ``None`` if it is valid."""
        if not self.config.min_minutes <= report.minutes <= self.config.max_minutes:
            return RejectedReason.out_of_range_minutes
        if report.party_size < 1:
            return RejectedReason.invalid_party_size
        skew = (ensure_utc(report.reported_at) - self.now()).total_seconds()
        if skew > self.config.clock_skew_seconds:
            return RejectedReason.future_timestamp
        return None

    def submit(self, report: WaitTimeReport) -> None:
        reason = self.validate(report)
        if reason is not None:
            logger.info(
                "Rejected wait-time report %s for venue %s: %s",
                report.id, report.venue_id, reason.value,
            )
            raise ReportRejectedError(reason, report)

        reported_at = ensure_utc(report.reported_at)
        slot = classify_time_slot(report.hour_of_day)
        ledger = self._get_or_create_ledger(report.venue_id)

        with ledger.lock:
            ledger.reports.append(report)
            if ledger.newest_report_at is None or reported_at > ledger.newest_report_at:
                ledger.newest_report_at = reported_at
            self._compact(ledger)

            previous = ledger.slots.get(slot)
            if previous is None:
                average = float(report.minutes)
                count = 1
                slot_updated = reported_at
            else:
                average = previous.average + (report.minutes - previous.average) / (previous.report_count + 1)
                count = previous.report_count + 1
                slot_updated = max(previous.last_updated, reported_at)
            ledger.slots[slot] = AggregateWaitTime(
                average=average,
                report_count=count,
                last_updated=slot_updated,
            )

            ledger.total_reports += 1
            if ledger.last_updated is None or reported_at > ledger.last_updated:
                ledger.last_updated = reported_at

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def current_estimate(self, venue_id: str, as_of: datetime | None = None) -> int | None:
        """Integer mean of reports in the trailing window, or ``None`` if there are none."""
        ledger = self._ledgers.get(venue_id)
        if ledger is None:
            return None
        with ledger.lock:
            reports = list(ledger.reports)
        return self._estimate(reports, self._as_of(as_of))

    def historical_average(self, venue_id: str, slot: TimeSlot) -> AggregateWaitTime | None:
        ledger = self._ledgers.get(venue_id)
        if ledger is None:
            return None
        with ledger.lock:
            return ledger.slots.get(slot)

    def historical_average_for_hour(self, venue_id: str, hour: int) -> AggregateWaitTime | None:
        return self.historical_average(venue_id, classify_time_slot(hour))

    def average_for_current_time(self, venue_id: str) -> AggregateWaitTime | None:
        local_hour = self.now().astimezone(ZoneInfo(self.config.timezone)).hour
        return self.historical_average_for_hour(venue_id, local_hour)

    def snapshot(
        self,
        venue_id: str,
        as_of: datetime | None = None,
        recent_limit: int = 10,
    ) -> VenueWaitState | None:
        """Consistent read-only view of one venue, or ``None`` if it was never reported."""
        ledger = self._ledgers.get(venue_id)
        if ledger is None:
            return None
        with ledger.lock:
            reports = list(ledger.reports)
            slots = dict(ledger.slots)
            total = ledger.total_reports
            last_updated = ledger.last_updated

        recent = sorted(reports, key=lambda r: ensure_utc(r.reported_at), reverse=True)
        return VenueWaitState(
            venue_id=venue_id,
            current_estimate=self._estimate(reports, self._as_of(as_of)),
            averages_by_slot=slots,
            recent_reports=recent[:recent_limit],
            total_reports=total,
            last_updated=last_updated,
        )

    def venue_ids(self) -> list[str]:
        with self._registry_lock:
            return sorted(self._ledgers)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _as_of(self, as_of: datetime | None) -> datetime:
        return ensure_utc(as_of) if as_of is not None else self.now()

    def _estimate(self, reports: list[WaitTimeReport], as_of: datetime) -> int | None:
        window = [
            r.minutes
            for r in reports
            if (as_of - ensure_utc(r.reported_at)).total_seconds() < self.config.window_seconds
        ]
        if not window:
            return None
        return sum(window) // len(window)

    def _get_or_create_ledger(self, venue_id: str) -> _VenueLedger:
        ledger = self._ledgers.get(venue_id)
        if ledger is not None:
            return ledger
        with self._registry_lock:
            ledger = self._ledgers.get(venue_id)
            if ledger is None:
                ledger = _VenueLedger(self.config.max_reports_per_venue)
                self._ledgers[venue_id] = ledger
            return ledger

    def _compact(self, ledger: _VenueLedger) -> None:
        # Caller holds ledger.lock.
        if ledger.newest_report_at is None:
            return
        dropped = 0
        while ledger.reports:
            age = (ledger.newest_report_at - ensure_utc(ledger.reports[0].reported_at)).total_seconds()
            if age < self.config.retention_seconds:
                break
            ledger.reports.popleft()
            dropped += 1
        if dropped:
            logger.debug("Compacted %d expired reports", dropped)
