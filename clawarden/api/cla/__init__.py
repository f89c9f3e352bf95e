"""Signature submission and ledger download resources."""
