from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field, computed_field

from ..config import DEFAULT_WAIT_TIME_CONFIG


class VerificationMethod(str, Enum):
    manual = "manual"
    checked_in = "checked_in"
    receipt = "receipt"
    gps = "gps"
    qr_code = "qr_code"


class TimeSlot(str, Enum):
    early_morning = "6-9"
    late_morning = "9-12"
    early_afternoon = "12-15"
    late_afternoon = "15-18"
    early_evening = "18-21"
    late_evening = "21-24"
    late_night = "0-6"

    @property
    def display_name(self) -> str:
        return _SLOT_DISPLAY_NAMES[self]


_SLOT_DISPLAY_NAMES: dict[TimeSlot, str] = {
    TimeSlot.early_morning: "6 AM - 9 AM",
    TimeSlot.late_morning: "9 AM - 12 PM",
    TimeSlot.early_afternoon: "12 PM - 3 PM",
    TimeSlot.late_afternoon: "3 PM - 6 PM",
    TimeSlot.early_evening: "6 PM - 9 PM",
    TimeSlot.late_evening: "9 PM - 12 AM",
    TimeSlot.late_night: "12 AM - 6 AM",
}


class ConfidenceLevel(str, Enum):
    """Qualitative confidence tier, ordered from ``very_low`` to ``very_high``."""

    very_low = "very_low"
    low = "low"
    medium = "medium"
    high = "high"
    very_high = "very_high"

    @property
    def rank(self) -> int:
        return _CONFIDENCE_ORDER.index(self)

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ConfidenceLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, ConfidenceLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, ConfidenceLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, ConfidenceLevel):
            return NotImplemented
        return self.rank >= other.rank


_CONFIDENCE_ORDER: list[ConfidenceLevel] = list(ConfidenceLevel)


class RejectedReason(str, Enum):
    out_of_range_minutes = "out_of_range_minutes"
    invalid_party_size = "invalid_party_size"
    future_timestamp = "future_timestamp"


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class WaitTimeReport(BaseModel):
    """One crowdsourced wait-time observation. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    venue_id: str
    minutes: int
    party_size: int
    submitter_id: str | None = None
    anonymous: bool = False
    reported_at: datetime
    day_of_week: int = Field(ge=0, le=6)  # 0=Monday
    hour_of_day: int = Field(ge=0, le=23)  # local time
    verification_method: VerificationMethod = VerificationMethod.manual

    @classmethod
    def create(
        cls,
        venue_id: str,
        minutes: int,
        party_size: int,
        submitter_id: str | None = None,
        anonymous: bool = False,
        reported_at: datetime | None = None,
        verification_method: VerificationMethod = VerificationMethod.manual,
        tz: str = DEFAULT_WAIT_TIME_CONFIG.timezone,
    ) -> WaitTimeReport:
        """Build a report from raw submission fields.

        Day of week and hour are derived in the *tz* timezone. Anonymous
        reports never keep a submitter id.
        """
        stamp = ensure_utc(reported_at or utc_now())
        local = stamp.astimezone(ZoneInfo(tz))
        return cls(
            venue_id=venue_id,
            minutes=minutes,
            party_size=party_size,
            submitter_id=None if anonymous else submitter_id,
            anonymous=anonymous,
            reported_at=stamp,
            day_of_week=local.weekday(),
            hour_of_day=local.hour,
            verification_method=verification_method,
        )


class AggregateWaitTime(BaseModel):
    model_config = ConfigDict(frozen=True)

    average: float
    report_count: int
    last_updated: datetime

    @computed_field  # type: ignore[prop-decorator]
    @property
    def confidence(self) -> ConfidenceLevel:
        from .classifiers import classify_confidence

        return classify_confidence(self.report_count)


class VenueWaitState(BaseModel):
    """Read-only snapshot of one venue's wait-time state."""

    model_config = ConfigDict(frozen=True)

    venue_id: str
    current_estimate: int | None = None
    averages_by_slot: dict[TimeSlot, AggregateWaitTime] = Field(default_factory=dict)
    recent_reports: list[WaitTimeReport] = Field(default_factory=list)
    total_reports: int = 0
    last_updated: datetime | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def confidence(self) -> ConfidenceLevel:
        from .classifiers import classify_confidence

        return classify_confidence(self.total_reports)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def display_text(self) -> str:
        if self.current_estimate is None:
            return "No wait time data"
        return f"{self.current_estimate} min wait ({self.confidence.label} confidence)"

    @property
    def short_display_text(self) -> str:
        if self.current_estimate is None:
            return "No data"
        return f"{self.current_estimate} min"


# ── API payloads ─────────────────────────────────────────────────────────


class WaitTimeSubmission(BaseModel):
    minutes: int
    party_size: int = 2
    submitter_id: str | None = None
    anonymous: bool = False
    verification_method: VerificationMethod = VerificationMethod.manual


class SubmissionResponse(BaseModel):
    status: str
    report_id: str
    current_estimate: int | None = None


class CurrentEstimateResponse(BaseModel):
    venue_id: str
    current_estimate: int | None = None
    confidence: ConfidenceLevel
    display_text: str


class HistoricalAverageResponse(BaseModel):
    venue_id: str
    hour: int
    time_slot: TimeSlot
    average: float | None = None
    report_count: int = 0
    confidence: ConfidenceLevel | None = None
