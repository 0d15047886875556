"""
Vox Engine - Character Voice Conversation Service

A FastAPI-based service for multi-turn, character-scoped conversations
that can start and end as speech.
"""

__version__ = "0.1.0"
