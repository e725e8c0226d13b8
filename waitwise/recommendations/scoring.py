from __future__ import annotations

import logging
from typing import Callable, Iterable

import numpy as np
import pandas as pd

from ..config import DEFAULT_SCORING_CONFIG, ScoringConfig
from .models import RecommendationCandidate, UserPreferenceProfile, VenueCatalogEntry

logger = logging.getLogger(__name__)

WaitLookup = Callable[[str], int | None]

PRICE_LABELS = {1: "budget-friendly", 2: "moderate", 3: "expensive", 4: "luxury"}
DEFAULT_REASON = "Popular in your area"

# Ranking order; everything after the score is the tie-break.
_SORT_KEYS = ["_rank_score", "rating", "review_count", "id"]
_SORT_ASCENDING = [False, False, False, True]


def _normalise_tags(tags: Iterable[str]) -> set[str]:
    return {t.strip().lower() for t in tags if t and t.strip()}


def catalog_frame(catalog: list[VenueCatalogEntry], wait_lookup: WaitLookup) -> pd.DataFrame:
    """Build the scoring DataFrame, fetching each venue's current wait once."""
    df = pd.DataFrame([entry.model_dump() for entry in catalog])
    df["cuisines_list"] = df["cuisines"].apply(lambda tags: [t.strip().lower() for t in tags])
    df["current_wait"] = pd.Series(
        [wait_lookup(vid) for vid in df["id"]], index=df.index, dtype="object",
    )
    return df


def _score_row(
    row: pd.Series,
    preferred_cuisines: set[str],
    price_tier: int,
    config: ScoringConfig,
) -> float:
    """Sum of independent additive terms for a single venue row."""
    score = 0.0

    if preferred_cuisines & set(row["cuisines_list"]):
        score += config.cuisine_match

    tier_diff = abs(int(row["price_tier"]) - price_tier)
    if tier_diff == 0:
        score += config.price_match
    else:
        score -= config.price_mismatch_per_tier * tier_diff

    score += config.rating_weight * float(row["rating"])

    # Logarithmic, capped so very-high review counts cannot dominate
    popularity = config.popularity_weight * float(np.log1p(row["review_count"]))
    score += min(popularity, config.popularity_cap)

    wait = row["current_wait"]
    if wait is not None and pd.notna(wait):
        score -= config.wait_penalty_per_minute * float(wait)

    if row["is_open"]:
        score += config.open_now_bonus

    return score


def build_reasons(
    venue: VenueCatalogEntry,
    current_wait: int | None,
    profile: UserPreferenceProfile,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> list[str]:
    """Human-readable reasons, highest priority first. Advisory only."""
    reasons: list[str] = []
    preferred = _normalise_tags(profile.cuisines)

    matched = next((c for c in venue.cuisines if c.strip().lower() in preferred), None)
    if matched is not None:
        reasons.append(f"Matches your love for {matched.strip()}")

    if venue.price_tier == profile.price_tier:
        reasons.append(f"Fits your {PRICE_LABELS[venue.price_tier]} budget")

    if venue.rating >= config.high_rating_threshold:
        reasons.append("Highly rated by diners")

    if current_wait is not None and current_wait <= config.short_wait_minutes:
        reasons.append("Short wait time")

    if not reasons:
        return [DEFAULT_REASON]
    return reasons[: config.max_reasons]


def recommend(
    profile: UserPreferenceProfile,
    catalog: list[VenueCatalogEntry],
    wait_lookup: WaitLookup,
    limit: int = DEFAULT_SCORING_CONFIG.default_limit,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> list[RecommendationCandidate]:
    """
    Rank *catalog* for *profile*.

    Venues whose current wait exceeds the profile's ``max_wait_minutes`` are
    dropped first; venues without an estimate are kept. Ties on score are
    broken by rating, then review count (both descending), then venue id.
    """
    if not catalog or limit <= 0:
        return []

    df = catalog_frame(catalog, wait_lookup)

    # --- Hard filters ---
    if profile.max_wait_minutes is not None:
        mask = df["current_wait"].apply(
            lambda w: w is None or pd.isna(w) or w <= profile.max_wait_minutes
        )
        dropped = int((~mask).sum())
        if dropped:
            logger.debug("Dropped %d venues over max wait of %d min", dropped, profile.max_wait_minutes)
        df = df.loc[mask]

    if df.empty:
        return []

    # --- Scoring ---
    df = df.copy()
    df["_score"] = df.apply(
        _score_row,
        axis=1,
        preferred_cuisines=_normalise_tags(profile.cuisines),
        price_tier=profile.price_tier,
        config=config,
    )
    # Float noise must not hide a tie from the tie-break keys
    df["_rank_score"] = df["_score"].round(9)

    top = df.sort_values(by=_SORT_KEYS, ascending=_SORT_ASCENDING, kind="mergesort").head(limit)

    # Frame index is the catalog position, so duplicate ids stay paired
    candidates: list[RecommendationCandidate] = []
    for pos, row in top.iterrows():
        venue = catalog[pos]
        wait = row["current_wait"]
        current_wait = int(wait) if wait is not None and pd.notna(wait) else None
        candidates.append(RecommendationCandidate(
            venue=venue,
            score=round(float(row["_score"]), 4),
            current_wait=current_wait,
            reasons=build_reasons(venue, current_wait, profile, config),
        ))
    return candidates
