"""Сервисный модуль для заметок клиента (таблица ``History``)."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from database.models import Note
from database.storage import StorageEngine
from services.attachment_store import AttachmentStore
from services.clients.client_service import ClientNotFoundError, ClientService, NoValidFields
from services.errors import service_operation

from .dto import NoteDTO

logger = logging.getLogger(__name__)

# Поля, которые разрешено менять у существующей заметки.
NOTE_UPDATABLE_FIELDS = {
    "noteType": "note_type",
    "note_type": "note_type",
    "content": "content",
}


class NoteNotFoundError(LookupError):
    """Ошибка отсутствия заметки по запрошенному идентификатору."""


class NoteService:
    def __init__(
        self,
        storage: StorageEngine,
        clients: ClientService,
        attachments: AttachmentStore,
    ) -> None:
        self.storage = storage
        self.clients = clients
        self.attachments = attachments

    # ──────────────────────────── Получение ─────────────────────────────

    def get_notes(self, client_id: int) -> list[NoteDTO]:
        """Заметки клиента, новые первыми."""
        query = (
            Note.select()
            .where(Note.client_id == client_id)
            .order_by(Note.created_on.desc(), Note.id.desc())
        )
        return [NoteDTO.from_model(note) for note in query]

    def get_note(self, note_id: int) -> NoteDTO:
        note = Note.get_or_none(Note.id == note_id)
        if note is None:
            raise NoteNotFoundError(f"Заметка id={note_id} не найдена")
        return NoteDTO.from_model(note)

    # ──────────────────────────── Изменение ─────────────────────────────

    def add_note(
        self, client_id: int, note_type: str | None, content: str | None
    ) -> int:
        if self.clients.get_client(client_id) is None:
            raise ClientNotFoundError(f"Клиент id={client_id} не найден")

        with service_operation("добавить заметку"):
            with self.storage.writing():
                note_id = Note.insert(
                    client_id=client_id, note_type=note_type, content=content
                ).execute()

        logger.info("📝 Заметка id=%s добавлена клиенту id=%s", note_id, client_id)
        return note_id

    def update_note(self, note_id: int, data: Mapping[str, Any]) -> None:
        updates = {
            NOTE_UPDATABLE_FIELDS[key]: value
            for key, value in (data or {}).items()
            if key in NOTE_UPDATABLE_FIELDS
        }
        if not updates:
            raise NoValidFields(data.keys() if data else ())

        with service_operation("обновить заметку"):
            with self.storage.writing():
                updated = Note.update(**updates).where(Note.id == note_id).execute()
        if not updated:
            raise NoteNotFoundError(f"Заметка id={note_id} не найдена")

        logger.info("✏️ Обновление заметки id=%s: %s", note_id, sorted(updates))

    def delete_note(self, note_id: int) -> None:
        """Удалить заметку и каталог её вложений."""
        note = Note.get_or_none(Note.id == note_id)
        if note is None:
            raise NoteNotFoundError(f"Заметка id={note_id} не найдена")
        client_id = note.client_id

        with service_operation("удалить заметку"):
            with self.storage.writing():
                Note.delete().where(Note.id == note_id).execute()
            self.attachments.delete_all_for_note(client_id, note_id)

        logger.info("🗑️ Заметка id=%s клиента id=%s удалена", note_id, client_id)
