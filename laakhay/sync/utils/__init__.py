"""Utility helpers."""

from .query import query_pairs, query_value

__all__ = ["query_pairs", "query_value"]
