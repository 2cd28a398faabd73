"""Repositories and key-value storage."""
