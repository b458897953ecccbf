"""
Heart: Canonical identity for a two-user relationship.

A pair is always stored as ``(low_id, high_id)`` so that A-then-B and
B-then-A resolve to the same row.
"""

from __future__ import annotations

from typing import NamedTuple

from heart.errors import ValidationError


class CanonicalPair(NamedTuple):
    low_id: int
    high_id: int

    def other(self, user_id: int) -> int:
        """Return the participant that is not ``user_id``."""
        if user_id == self.low_id:
            return self.high_id
        if user_id == self.high_id:
            return self.low_id
        raise ValueError(f"User {user_id} is not part of {self}")


def canonicalize(a: int, b: int) -> CanonicalPair:
    """Order two distinct user ids as ``(smaller, larger)``."""
    a, b = int(a), int(b)
    if a == b:
        raise ValidationError("A user cannot be paired with themselves.")
    return CanonicalPair(a, b) if a < b else CanonicalPair(b, a)
