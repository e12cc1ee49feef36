"""Deferred relationship resolution.

Architecture:
    - deferred.py: DeferredEntity and DeferredRelationship placeholders
    - engine.py: DeferralEngine applying the session's DeferralPolicy
"""

from __future__ import annotations

from .deferred import Deferred, DeferredEntity, DeferredRelationship, is_deferred
from .engine import DeferralEngine

__all__ = [
    "Deferred",
    "DeferredEntity",
    "DeferredRelationship",
    "DeferralEngine",
    "is_deferred",
]
