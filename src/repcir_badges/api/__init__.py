"""HTTP API for the badge engine."""
