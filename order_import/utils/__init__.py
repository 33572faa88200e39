"""Shared utilities: error taxonomy and normalization helpers."""
