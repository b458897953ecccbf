"""
Heart: ORM model registry.

Importing every model here ensures that Alembic (and any other tool that
inspects ``Base.metadata``) discovers all tables automatically.
"""

from heart.models.user import User
from heart.models.swipe import Swipe
from heart.models.match import Match
from heart.models.message import Message

__all__ = [
    "User",
    "Swipe",
    "Match",
    "Message",
]
