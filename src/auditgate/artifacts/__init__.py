"""Deterministic artifact serialization helpers."""
