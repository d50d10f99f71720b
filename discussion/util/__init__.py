"""Utilities: logging, observability and dependency injection."""
