"""Shared utilities."""

from factfinder.utils.cache import ExpiringCache

__all__ = ["ExpiringCache"]
