"""HTTP boundary for the pool engine."""
