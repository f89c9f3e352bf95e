"""Liveness and readiness probe resources."""
