from __future__ import annotations

from .models import ConfidenceLevel, TimeSlot

# (lower bound inclusive, level), checked from the top down
_CONFIDENCE_THRESHOLDS: list[tuple[int, ConfidenceLevel]] = [
    (100, ConfidenceLevel.very_high),
    (50, ConfidenceLevel.high),
    (15, ConfidenceLevel.medium),
    (5, ConfidenceLevel.low),
    (0, ConfidenceLevel.very_low),
]

# (start hour inclusive, end hour exclusive, slot)
_SLOT_BOUNDARIES: list[tuple[int, int, TimeSlot]] = [
    (0, 6, TimeSlot.late_night),
    (6, 9, TimeSlot.early_morning),
    (9, 12, TimeSlot.late_morning),
    (12, 15, TimeSlot.early_afternoon),
    (15, 18, TimeSlot.late_afternoon),
    (18, 21, TimeSlot.early_evening),
    (21, 24, TimeSlot.late_evening),
]


def classify_confidence(report_count: int) -> ConfidenceLevel:
    """Map a cumulative report count to a confidence tier."""
    if report_count < 0:
        raise ValueError(f"report_count must be non-negative, got {report_count}")
    for lower, level in _CONFIDENCE_THRESHOLDS:
        if report_count >= lower:
            return level
    return ConfidenceLevel.very_low


def classify_time_slot(hour: int) -> TimeSlot:
    """Map a clock hour (0-23) to its daily time slot."""
    for start, end, slot in _SLOT_BOUNDARIES:
        if start <= hour < end:
            return slot
    raise ValueError(f"hour must be in [0, 23], got {hour}")


def slot_hours(slot: TimeSlot) -> range:
    """Return the hours covered by *slot*."""
    for start, end, candidate in _SLOT_BOUNDARIES:
        if candidate is slot:
            return range(start, end)
    raise ValueError(f"unknown time slot: {slot!r}")
