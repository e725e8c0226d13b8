from __future__ import annotations

from collections import Counter
from typing import Any


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    accepted = [e for e in events if e["type"] == "wait_time_report"]
    rejected = [e for e in events if e["type"] == "wait_time_rejected"]
    searches = [e for e in events if e["type"] == "recommendation"]

    submissions = len(accepted) + len(rejected)

    # Rejections by reason
    reason_counter: Counter[str] = Counter(e.get("reason", "unknown") for e in rejected)

    # Busiest venues by accepted reports
    venue_counter: Counter[str] = Counter(e.get("venue_id", "unknown") for e in accepted)
    top_venues = [{"venue_id": v, "reports": c} for v, c in venue_counter.most_common(10)]

    anonymous = sum(1 for e in accepted if e.get("anonymous"))
    minutes = [e["minutes"] for e in accepted if "minutes" in e]
    avg_reported = round(sum(minutes) / len(minutes), 1) if minutes else 0.0

    # Recommendation latency and result sizes
    times = [s["response_time_ms"] for s in searches if "response_time_ms" in s]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0
    empty_results = sum(1 for s in searches if s.get("results_returned", 0) == 0)

    return {
        "wait_time_reports": {
            "total_submissions": submissions,
            "accepted": len(accepted),
            "rejected": len(rejected),
            "rejection_rate": round(len(rejected) / submissions * 100, 1) if submissions else 0.0,
            "rejections_by_reason": dict(reason_counter),
            "anonymous": anonymous,
            "avg_reported_minutes": avg_reported,
            "top_venues": top_venues,
        },
        "recommendations": {
            "total_requests": len(searches),
            "avg_response_time_ms": avg_time,
            "empty_results": empty_results,
        },
    }
