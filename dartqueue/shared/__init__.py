"""Shared models, document store and repositories."""
