from __future__ import annotations

import threading
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from .classifiers import classify_time_slot
from .models import TimeSlot, WaitTimeReport, ensure_utc

_WEEKEND_DAYS = {5, 6}  # Saturday, Sunday


class ContributorBadge(str, Enum):
    first_timer = "first_timer"
    regular = "regular"
    power_user = "power_user"
    legend = "legend"
    early_bird = "early_bird"
    night_owl = "night_owl"
    weekend_warrior = "weekend_warrior"

    @property
    def points(self) -> int:
        return BADGE_POINTS[self]


BADGE_POINTS: dict[ContributorBadge, int] = {
    ContributorBadge.first_timer: 10,
    ContributorBadge.regular: 50,
    ContributorBadge.power_user: 200,
    ContributorBadge.legend: 500,
    ContributorBadge.early_bird: 25,
    ContributorBadge.night_owl: 25,
    ContributorBadge.weekend_warrior: 30,
}

# Report-count badges, lowest threshold first
_COUNT_BADGES: list[tuple[int, ContributorBadge]] = [
    (1, ContributorBadge.first_timer),
    (10, ContributorBadge.regular),
    (50, ContributorBadge.power_user),
    (100, ContributorBadge.legend),
]


class ContributionSummary(BaseModel):
    user_id: str
    report_count: int = 0
    last_contribution: datetime | None = None
    badges: list[ContributorBadge] = Field(default_factory=list)
    total_points: int = 0


class _Contributor:
    __slots__ = ("report_count", "last_contribution", "slots", "weekend")

    def __init__(self) -> None:
        self.report_count = 0
        self.last_contribution: datetime | None = None
        self.slots: set[TimeSlot] = set()
        self.weekend = False


class ContributionTracker:
    """Per-submitter report counts and badges. Anonymous reports are ignored."""

    def __init__(self) -> None:
        self._contributors: dict[str, _Contributor] = {}
        self._lock = threading.Lock()

    def record(self, report: WaitTimeReport) -> None:
        if report.anonymous or not report.submitter_id:
            return
        reported_at = ensure_utc(report.reported_at)
        with self._lock:
            contributor = self._contributors.setdefault(report.submitter_id, _Contributor())
            contributor.report_count += 1
            if contributor.last_contribution is None or reported_at > contributor.last_contribution:
                contributor.last_contribution = reported_at
            contributor.slots.add(classify_time_slot(report.hour_of_day))
            if report.day_of_week in _WEEKEND_DAYS:
                contributor.weekend = True

    def summary(self, user_id: str) -> ContributionSummary:
        with self._lock:
            contributor = self._contributors.get(user_id)
            if contributor is None:
                return ContributionSummary(user_id=user_id)
            count = contributor.report_count
            last = contributor.last_contribution
            slots = set(contributor.slots)
            weekend = contributor.weekend

        badges = [badge for threshold, badge in _COUNT_BADGES if count >= threshold]
        if TimeSlot.early_morning in slots:
            badges.append(ContributorBadge.early_bird)
        if TimeSlot.late_night in slots:
            badges.append(ContributorBadge.night_owl)
        if weekend:
            badges.append(ContributorBadge.weekend_warrior)

        return ContributionSummary(
            user_id=user_id,
            report_count=count,
            last_contribution=last,
            badges=badges,
            total_points=sum(b.points for b in badges),
        )
