"""Подмодуль сервисов заметок клиента."""

from .dto import NoteDTO
from .note_service import NoteNotFoundError, NoteService

__all__ = ["NoteService", "NoteNotFoundError", "NoteDTO"]
