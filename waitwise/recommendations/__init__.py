"""
Venue recommendation engine.

Responsibilities:
- Accept a user preference profile and a catalog of candidate venues.
- Score each venue with additive heuristics, including its live wait time.
- Rank deterministically and explain each pick with short reasons.
- Filter and sort catalogs for plain browsing.
"""
