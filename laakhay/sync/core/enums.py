"""Core enumerations shared across providers and sessions.

Design Decisions:
    - String enums: Allow easy serialization and configuration from text
"""

from enum import Enum


class DeferralPolicy(str, Enum):
    """When deferred entities and relationships are resolved.

    The policy is selected once per session (or per operation) and does not
    change while a page stream is being consumed.
    """

    # Placeholders are left as created; callers resolve them explicitly
    DO_NOT_RESOLVE = "do_not_resolve"
    # Placeholders are resolved as soon as they are created
    RESOLVE_EARLY = "resolve_early"
    # Placeholders are queued and resolved once the owning stream ends
    RESOLVE_LATE = "resolve_late"

    @classmethod
    def from_str(cls, value: str) -> "DeferralPolicy":
        """Parse a policy from its value or member name (case-insensitive)."""
        normalized = value.strip().lower().replace("-", "_")
        for policy in cls:
            if policy.value == normalized:
                return policy
        raise ValueError(f"Invalid deferral policy: {value}")


class RelationshipKind(str, Enum):
    """Shape of a relationship field."""

    # Field holds one related entity, identified by an id on the owner
    REFERENCE = "reference"
    # Field holds a collection of related entities selected by a filter
    COLLECTION = "collection"
