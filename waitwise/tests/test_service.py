from __future__ import annotations

import pytest

from waitwise.config import WaitTimeConfig
from waitwise.recommendations.models import UserPreferenceProfile, VenueCatalogEntry
from waitwise.service import WaitTimeService
from waitwise.wait_times.aggregator import ReportRejectedError, WaitTimeAggregator
from waitwise.wait_times.models import RejectedReason, VerificationMethod


@pytest.fixture
def service(clock) -> WaitTimeService:
    return WaitTimeService(
        aggregator=WaitTimeAggregator(config=WaitTimeConfig(timezone="UTC"), clock=clock),
    )


def test_submit_and_query(service):
    report = service.submit_wait_time("v1", 20, 2, submitter_id="alice",
                                      verification_method=VerificationMethod.gps)
    assert report.verification_method is VerificationMethod.gps
    assert service.get_current_estimate("v1") == 20
    assert service.get_historical_average("v1", 19).average == 20.0
    assert service.get_historical_average("v1", 7) is None
    assert service.get_contributions("alice").report_count == 1


def test_rejected_submission_is_not_credited(service):
    with pytest.raises(ReportRejectedError) as exc_info:
        service.submit_wait_time("v1", 10, 0, submitter_id="alice")
    assert exc_info.value.reason is RejectedReason.invalid_party_size
    assert service.get_contributions("alice").report_count == 0
    assert service.get_wait_state("v1") is None


def test_recommendations_use_live_waits(service):
    catalog = [
        VenueCatalogEntry(id="busy", cuisines=["Italian"], price_tier=2, rating=4.0),
        VenueCatalogEntry(id="calm", cuisines=["Italian"], price_tier=2, rating=4.0),
    ]
    service.submit_wait_time("busy", 60, 2)
    ranked = service.get_recommendations(UserPreferenceProfile(cuisines={"Italian"}), catalog)
    assert [c.venue.id for c in ranked] == ["calm", "busy"]
    assert ranked[1].current_wait == 60


def test_recommendations_do_not_mutate_wait_state(service):
    service.submit_wait_time("v1", 10, 2)
    before = service.get_wait_state("v1")
    service.get_recommendations(
        UserPreferenceProfile(),
        [VenueCatalogEntry(id="v1", price_tier=2)],
    )
    assert service.get_wait_state("v1") == before
