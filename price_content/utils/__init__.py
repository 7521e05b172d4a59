"""Shared helpers: logging setup and the exception hierarchy."""
