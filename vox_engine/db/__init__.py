"""Database package for Vox Engine."""

from .database import Base, Database

__all__ = ["Base", "Database"]
