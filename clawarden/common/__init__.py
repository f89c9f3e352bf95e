"""Small helpers shared across Clawarden modules."""
