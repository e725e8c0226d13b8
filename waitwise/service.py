from __future__ import annotations

import logging
import time
from datetime import datetime

from .analytics.store import record_event
from .config import DEFAULT_SCORING_CONFIG, ScoringConfig
from .recommendations.filters import browse_venues
from .recommendations.models import (
    BrowseItem,
    RecommendationCandidate,
    SortOption,
    UserPreferenceProfile,
    VenueCatalogEntry,
    VenueFilter,
)
from .recommendations.scoring import recommend
from .wait_times.aggregator import ReportRejectedError, WaitTimeAggregator
from .wait_times.contributions import ContributionSummary, ContributionTracker
from .wait_times.models import (
    AggregateWaitTime,
    VenueWaitState,
    VerificationMethod,
    WaitTimeReport,
)

logger = logging.getLogger(__name__)


class WaitTimeService:
    """
    Entry point for the surrounding application.

    Collaborators are injected so callers (and tests) decide their lifetime;
    nothing here is a process-wide singleton. Persistence of accepted reports
    stays with the caller, after ``submit_wait_time`` returns.
    """

    def __init__(
        self,
        aggregator: WaitTimeAggregator | None = None,
        contributions: ContributionTracker | None = None,
        scoring_config: ScoringConfig = DEFAULT_SCORING_CONFIG,
    ) -> None:
        self.aggregator = aggregator or WaitTimeAggregator()
        self.contributions = contributions or ContributionTracker()
        self.scoring_config = scoring_config

    # ── Wait times ──────────────────────────────────────────────────────

    def submit_wait_time(
        self,
        venue_id: str,
        minutes: int,
        party_size: int,
        submitter_id: str | None = None,
        anonymous: bool = False,
        verification_method: VerificationMethod = VerificationMethod.manual,
        reported_at: datetime | None = None,
    ) -> WaitTimeReport:
        """Build, validate and ingest a report. Raises ``ReportRejectedError``."""
        report = WaitTimeReport.create(
            venue_id=venue_id,
            minutes=minutes,
            party_size=party_size,
            submitter_id=submitter_id,
            anonymous=anonymous,
            reported_at=reported_at or self.aggregator.now(),
            verification_method=verification_method,
            tz=self.aggregator.config.timezone,
        )
        try:
            self.aggregator.submit(report)
        except ReportRejectedError as exc:
            record_event("wait_time_rejected", {
                "venue_id": venue_id,
                "reason": exc.reason.value,
            })
            raise

        self.contributions.record(report)
        record_event("wait_time_report", {
            "venue_id": venue_id,
            "minutes": minutes,
            "party_size": party_size,
            "anonymous": report.anonymous,
            "verification_method": report.verification_method.value,
        })
        return report

    def get_current_estimate(self, venue_id: str) -> int | None:
        return self.aggregator.current_estimate(venue_id)

    def get_historical_average(self, venue_id: str, hour: int) -> AggregateWaitTime | None:
        return self.aggregator.historical_average_for_hour(venue_id, hour)

    def get_wait_state(self, venue_id: str) -> VenueWaitState | None:
        return self.aggregator.snapshot(venue_id)

    def get_contributions(self, user_id: str) -> ContributionSummary:
        return self.contributions.summary(user_id)

    # ── Recommendations ─────────────────────────────────────────────────

    def get_recommendations(
        self,
        profile: UserPreferenceProfile,
        catalog: list[VenueCatalogEntry],
        limit: int = DEFAULT_SCORING_CONFIG.default_limit,
    ) -> list[RecommendationCandidate]:
        start_time = time.time()

        # One as_of for the whole request so every venue sees the same window
        as_of = self.aggregator.now()
        candidates = recommend(
            profile,
            catalog,
            lambda venue_id: self.aggregator.current_estimate(venue_id, as_of),
            limit=limit,
            config=self.scoring_config,
        )

        elapsed_ms = round((time.time() - start_time) * 1000, 1)
        record_event("recommendation", {
            "cuisines": sorted(profile.cuisines),
            "price_tier": profile.price_tier,
            "max_wait_minutes": profile.max_wait_minutes,
            "catalog_size": len(catalog),
            "results_returned": len(candidates),
            "response_time_ms": elapsed_ms,
        })
        logger.debug("Ranked %d venues into %d recommendations", len(catalog), len(candidates))
        return candidates

    def browse(
        self,
        catalog: list[VenueCatalogEntry],
        venue_filter: VenueFilter,
        sort: SortOption = SortOption.rating,
    ) -> list[BrowseItem]:
        as_of = self.aggregator.now()
        return browse_venues(
            catalog,
            venue_filter,
            sort,
            lambda venue_id: self.aggregator.current_estimate(venue_id, as_of),
        )
