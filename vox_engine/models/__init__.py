"""Models package for Vox Engine."""

from .conversation import Character, Turn, ScopeKind, utc_now

__all__ = [
    "Character",
    "Turn",
    "ScopeKind",
    "utc_now",
]
