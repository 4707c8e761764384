"""Application layer: use cases, authorization policy and background services."""
