"""JSONPlaceholder REST provider and endpoints."""

from .provider import JsonPlaceholderProvider

__all__ = ["JsonPlaceholderProvider"]
