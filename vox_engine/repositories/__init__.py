"""Repository pattern for database operations."""

from .character_repository import CharacterRepository
from .turn_repository import TurnRepository

__all__ = [
    "CharacterRepository",
    "TurnRepository",
]
