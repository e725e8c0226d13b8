"""In-memory usage analytics for wait-time submissions and recommendation requests."""
