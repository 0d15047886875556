"""Repository for character operations."""

from typing import List, Optional
from sqlalchemy.orm import Session

from vox_engine.models.conversation import Character, utc_now


class CharacterRepository:
    """Handle database operations for characters."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, character_id: str) -> Optional[Character]:
        """
        Get character by ID.

        Args:
            character_id: Character ID

        Returns:
            Character or None if not found
        """
        return self.db.query(Character).filter(Character.id == character_id).first()

    def _filtered(self, query: Optional[str]):
        q = self.db.query(Character)
        if query:
            q = q.filter(Character.name.ilike(f"%{query}%"))
        return q

    def list(self, page: int = 1, page_size: int = 10, query: Optional[str] = None) -> List[Character]:
        """
        List characters, one page at a time.

        Args:
            page: 1-based page number (values below 1 are treated as 1)
            page_size: Page size (values below 1 are treated as 10)
            query: Optional case-insensitive substring of the name

        Returns:
            Characters ordered by id
        """
        page = page if page > 0 else 1
        page_size = page_size if page_size > 0 else 10
        return (
            self._filtered(query)
            .order_by(Character.id.asc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )

    def count(self, query: Optional[str] = None) -> int:
        """Count characters matching the optional name filter."""
        return self._filtered(query).count()

    def create(
        self,
        character_id: str,
        name: str,
        system_prompt: str,
        description: str = "",
        default_voice: str = "",
    ) -> Character:
        """
        Create a new character.

        Returns:
            Created character
        """
        character = Character(
            id=character_id,
            name=name,
            description=description or "",
            system_prompt=system_prompt,
            default_voice=default_voice or "",
        )
        self.db.add(character)
        self.db.commit()
        self.db.refresh(character)
        return character

    def upsert(
        self,
        character_id: str,
        name: str,
        system_prompt: str,
        description: str = "",
        default_voice: str = "",
    ) -> Character:
        """
        Create the character or overwrite its persona fields.

        Used to sync seed files into the database at startup.
        """
        character = self.get_by_id(character_id)
        if character is None:
            return self.create(character_id, name, system_prompt, description, default_voice)

        character.name = name
        character.system_prompt = system_prompt
        character.description = description or ""
        character.default_voice = default_voice or ""
        character.updated_at = utc_now()
        self.db.commit()
        self.db.refresh(character)
        return character
