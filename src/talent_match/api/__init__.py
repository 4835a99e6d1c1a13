"""HTTP API for Talent Match."""
