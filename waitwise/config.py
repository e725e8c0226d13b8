from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")


@dataclass(frozen=True)
class WaitTimeConfig:
    window_seconds: int = int(os.getenv("WAITWISE_WINDOW_SECONDS", "3600"))
    clock_skew_seconds: int = int(os.getenv("WAITWISE_CLOCK_SKEW_SECONDS", "300"))
    min_minutes: int = 0
    max_minutes: int = 120
    max_reports_per_venue: int = int(os.getenv("WAITWISE_MAX_REPORTS_PER_VENUE", "1000"))
    timezone: str = os.getenv("WAITWISE_TIMEZONE", "UTC")

    @property
    def retention_seconds(self) -> int:
        # Oldest report still able to land in some trailing window.
        return self.window_seconds + self.clock_skew_seconds


@dataclass(frozen=True)
class ScoringConfig:
    cuisine_match: float = 3.0
    price_match: float = 2.0
    price_mismatch_per_tier: float = 0.5
    rating_weight: float = 0.5
    popularity_weight: float = 0.3
    popularity_cap: float = 1.0
    wait_penalty_per_minute: float = 0.1
    open_now_bonus: float = 1.0
    high_rating_threshold: float = 4.5
    short_wait_minutes: int = 15
    max_reasons: int = 2
    default_limit: int = 10


@dataclass(frozen=True)
class AnalyticsConfig:
    max_events: int = int(os.getenv("WAITWISE_MAX_ANALYTICS_EVENTS", "10000"))


DEFAULT_WAIT_TIME_CONFIG = WaitTimeConfig()
DEFAULT_SCORING_CONFIG = ScoringConfig()
DEFAULT_ANALYTICS_CONFIG = AnalyticsConfig()
