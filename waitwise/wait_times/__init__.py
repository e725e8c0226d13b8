"""
Wait-time intelligence.

Responsibilities:
- Validate and ingest crowdsourced wait-time reports.
- Maintain per-venue historical averages bucketed by daily time slot.
- Compute the current estimate from the trailing one-hour window.
- Track per-submitter contributions and badges.
"""
