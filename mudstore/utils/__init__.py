"""Shared helpers for mudstore."""
