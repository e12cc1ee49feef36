"""Concrete providers."""

from .jsonplaceholder import JsonPlaceholderProvider

__all__ = ["JsonPlaceholderProvider"]
