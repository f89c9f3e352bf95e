"""Contribution listing, detail and cache reset resources."""
