"""Shared utilities: configuration and time normalization."""
