from __future__ import annotations

import math

import pytest

from waitwise.recommendations.models import UserPreferenceProfile, VenueCatalogEntry
from waitwise.recommendations.scoring import DEFAULT_REASON, build_reasons, recommend

ITALIAN_PROFILE = UserPreferenceProfile(cuisines={"Italian"}, price_tier=2)


def _venue(venue_id, **kwargs) -> VenueCatalogEntry:
    fields = {
        "name": venue_id.title(),
        "cuisines": ["Thai"],
        "price_tier": 2,
        "rating": 3.0,
        "review_count": 0,
        "is_open": False,
    }
    fields.update(kwargs)
    return VenueCatalogEntry(id=venue_id, **fields)


def _waits(mapping):
    return lambda venue_id: mapping.get(venue_id)


def test_reference_scenario_scores_8_25():
    venue_a = _venue(
        "a", cuisines=["Italian"], price_tier=2, rating=4.5, review_count=200, is_open=True,
    )
    [candidate] = recommend(ITALIAN_PROFILE, [venue_a], _waits({"a": 10}))
    assert candidate.score == pytest.approx(8.25)
    assert candidate.current_wait == 10
    assert candidate.reasons == ["Matches your love for Italian", "Fits your moderate budget"]


def test_price_mismatch_penalty_scales_with_tier_gap():
    cheap = _venue("cheap", price_tier=1)
    luxury = _venue("luxury", price_tier=4)
    profile = UserPreferenceProfile(price_tier=2)
    scores = {c.venue.id: c.score for c in recommend(profile, [cheap, luxury], _waits({}))}
    # rating 3.0 -> 1.5, no reviews -> 0 popularity
    assert scores["cheap"] == pytest.approx(1.5 - 0.5)
    assert scores["luxury"] == pytest.approx(1.5 - 1.0)


def test_popularity_is_logarithmic_below_cap():
    venue = _venue("v", review_count=10, price_tier=3)
    [candidate] = recommend(UserPreferenceProfile(price_tier=3), [venue], _waits({}))
    expected = 2.0 + 1.5 + 0.3 * math.log(11)
    assert candidate.score == pytest.approx(expected, abs=1e-4)


def test_cuisine_match_is_case_insensitive():
    venue = _venue("v", cuisines=["  italian ", "Pizza"])
    [candidate] = recommend(ITALIAN_PROFILE, [venue], _waits({}))
    assert candidate.score == pytest.approx(3.0 + 2.0 + 1.5)
    assert candidate.reasons[0] == "Matches your love for italian"


def test_wait_penalty_changes_ranking():
    busy = _venue("busy", rating=4.0)
    quiet = _venue("quiet", rating=4.0)
    ranked = recommend(ITALIAN_PROFILE, [busy, quiet], _waits({"busy": 45, "quiet": 5}))
    assert [c.venue.id for c in ranked] == ["quiet", "busy"]
    assert ranked[0].score - ranked[1].score == pytest.approx(4.0)


def test_absent_wait_is_not_penalised():
    unknown = _venue("unknown")
    zero = _venue("zero")
    ranked = recommend(ITALIAN_PROFILE, [unknown, zero], _waits({"zero": 0}))
    assert ranked[0].score == ranked[1].score
    by_id = {c.venue.id: c for c in ranked}
    assert by_id["unknown"].current_wait is None
    assert by_id["zero"].current_wait == 0


def test_results_sorted_and_truncated():
    catalog = [_venue(f"v{i}", rating=float(i % 5), review_count=i) for i in range(20)]
    ranked = recommend(ITALIAN_PROFILE, catalog, _waits({}), limit=5)
    assert len(ranked) == 5
    scores = [c.score for c in ranked]
    assert scores == sorted(scores, reverse=True)


def test_tie_break_falls_back_to_venue_id():
    # Identical attributes, so only the id can order them
    catalog = [_venue("c"), _venue("a"), _venue("b")]
    ranked = recommend(ITALIAN_PROFILE, catalog, _waits({}))
    assert [c.venue.id for c in ranked] == ["a", "b", "c"]


def test_tie_break_prefers_higher_rating():
    # open (+1.0) with rating 3.0 vs closed with rating 5.0: both score 2 + 2.5
    open_venue = _venue("open", rating=3.0, is_open=True)
    rated_venue = _venue("rated", rating=5.0)
    ranked = recommend(ITALIAN_PROFILE, [open_venue, rated_venue], _waits({}))
    assert ranked[0].score == ranked[1].score
    assert [c.venue.id for c in ranked] == ["rated", "open"]


def test_tie_break_applies_despite_float_noise():
    # 2 + 0.1 + 1.0 - 0.2 and 2 + 0.9 both display as 2.9
    low_rated = _venue("a", rating=0.2, is_open=True)
    high_rated = _venue("b", rating=1.8)
    ranked = recommend(
        UserPreferenceProfile(price_tier=2), [low_rated, high_rated], _waits({"a": 2}),
    )
    assert ranked[0].score == ranked[1].score == pytest.approx(2.9)
    assert [c.venue.id for c in ranked] == ["b", "a"]


def test_duplicate_ids_keep_their_own_entry():
    good = _venue("x", rating=5.0, price_tier=2, is_open=True)
    poor = _venue("x", rating=0.0, price_tier=4)
    ranked = recommend(UserPreferenceProfile(price_tier=2), [good, poor], _waits({}))
    assert [c.score for c in ranked] == [pytest.approx(5.5), pytest.approx(-1.0)]
    assert [c.venue.rating for c in ranked] == [5.0, 0.0]
    assert ranked[0].reasons == ["Fits your moderate budget", "Highly rated by diners"]


def test_ordering_is_stable_across_runs():
    catalog = [_venue(f"v{i}", rating=4.0) for i in range(10)]
    first = [c.venue.id for c in recommend(ITALIAN_PROFILE, catalog, _waits({}))]
    second = [c.venue.id for c in recommend(ITALIAN_PROFILE, list(reversed(catalog)), _waits({}))]
    assert first == second


def test_empty_catalog_returns_empty_list():
    assert recommend(ITALIAN_PROFILE, [], _waits({})) == []


def test_profile_without_preferences_scores_static_attributes():
    venue = _venue("v", rating=4.0, review_count=0, is_open=True, price_tier=2)
    [candidate] = recommend(UserPreferenceProfile(), [venue], _waits({}))
    assert candidate.score == pytest.approx(2.0 + 2.0 + 1.0)


def test_max_wait_filters_long_waits_but_keeps_unknown():
    catalog = [_venue("long"), _venue("short"), _venue("unknown")]
    profile = UserPreferenceProfile(price_tier=2, max_wait_minutes=20)
    ranked = recommend(profile, catalog, _waits({"long": 45, "short": 10}))
    assert {c.venue.id for c in ranked} == {"short", "unknown"}


def test_max_wait_can_filter_everything():
    profile = UserPreferenceProfile(max_wait_minutes=5)
    assert recommend(profile, [_venue("v")], _waits({"v": 30})) == []


def test_wait_lookup_called_once_per_venue():
    calls: list[str] = []

    def lookup(venue_id):
        calls.append(venue_id)
        return 10

    recommend(ITALIAN_PROFILE, [_venue("a"), _venue("b")], lookup)
    assert sorted(calls) == ["a", "b"]


# ── Reasons ──────────────────────────────────────────────────────────────


def test_reasons_priority_and_limit():
    venue = _venue("v", cuisines=["Italian"], price_tier=2, rating=4.8)
    reasons = build_reasons(venue, 5, ITALIAN_PROFILE)
    assert reasons == ["Matches your love for Italian", "Fits your moderate budget"]


def test_reasons_fall_through_to_rating_and_wait():
    venue = _venue("v", price_tier=4, rating=4.6)
    reasons = build_reasons(venue, 15, ITALIAN_PROFILE)
    assert reasons == ["Highly rated by diners", "Short wait time"]


def test_default_reason_when_nothing_applies():
    venue = _venue("v", price_tier=4, rating=3.0)
    assert build_reasons(venue, 30, ITALIAN_PROFILE) == [DEFAULT_REASON]
    assert build_reasons(venue, None, ITALIAN_PROFILE) == ["Popular in your area"]

