"""Фасад между интерфейсом и сервисами ядра.

Все методы синхронные и возвращают простые структуры (словари, списки,
числа), пригодные для передачи слою представления.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from services.attachment_store import AttachmentStore
from services.clients.client_service import ClientService
from services.errors import ServiceError, service_operation
from services.fields.field_service import FieldService
from services.notes.note_service import NoteNotFoundError, NoteService
from services.search_service import SearchEngine

logger = logging.getLogger(__name__)

_CLIENT_ID_KEYS = ("clientID", "clientId", "client_id")


class CrmAppService:
    def __init__(
        self,
        *,
        clients: ClientService,
        notes: NoteService,
        fields: FieldService,
        attachments: AttachmentStore,
        search: SearchEngine,
    ) -> None:
        self.clients = clients
        self.notes = notes
        self.fields = fields
        self.attachments = attachments
        self.search = search

    # ──────────────────────────── Клиенты ─────────────────────────────

    def list_clients(self) -> list[dict[str, Any]]:
        return [dto.to_dict() for dto in self.clients.list_clients()]

    def get_client(self, client_id: int) -> dict[str, Any] | None:
        detail = self.clients.get_client(client_id)
        return detail.to_dict() if detail else None

    def get_client_schema(self) -> list[dict[str, Any]]:
        return [column.to_dict() for column in self.clients.get_client_schema()]

    def add_client(self, fields: Mapping[str, Any]) -> int:
        return self.clients.add_client(fields)

    def update_client(self, client_id: int, fields: Mapping[str, Any]) -> bool:
        self.clients.update_client(client_id, fields)
        return True

    def delete_client(self, client_id: int) -> bool:
        self.clients.delete_client(client_id)
        return True

    def search_clients(self, term: str | None) -> list[dict[str, Any]]:
        with service_operation("выполнить поиск"):
            return [dto.to_dict() for dto in self.search.search(term)]

    # ──────────────────────────── Заметки ─────────────────────────────

    def get_notes(self, client_id: int) -> list[dict[str, Any]]:
        return [dto.to_dict() for dto in self.notes.get_notes(client_id)]

    def add_note(self, note: Mapping[str, Any]) -> int:
        client_id = next((note[k] for k in _CLIENT_ID_KEYS if k in note), None)
        if client_id is None:
            raise ValueError("Не указан клиент заметки")
        return self.notes.add_note(
            client_id,
            note.get("noteType", note.get("note_type")),
            note.get("content"),
        )

    def update_note(self, note_id: int, note: Mapping[str, Any]) -> bool:
        self.notes.update_note(note_id, note)
        return True

    def delete_note(self, note_id: int) -> bool:
        self.notes.delete_note(note_id)
        return True

    # ──────────────────────────── Вложения ─────────────────────────────

    def _check_note_owner(self, client_id: int, note_id: int) -> None:
        note = self.notes.get_note(note_id)
        if note.client_id != client_id:
            raise NoteNotFoundError(
                f"Заметка id={note_id} не принадлежит клиенту id={client_id}"
            )

    def get_attachments(self, client_id: int) -> dict[int | str, list[str]]:
        with service_operation("получить вложения"):
            return self.attachments.list(client_id)

    def save_attachment(
        self, client_id: int, note_id: int, file_name: str, data: bytes
    ) -> bool:
        self._check_note_owner(client_id, note_id)
        with service_operation(f"сохранить вложение '{file_name}'"):
            self.attachments.save(client_id, note_id, file_name, data)
        return True

    def save_attachments(
        self,
        client_id: int,
        note_id: int,
        files: Iterable[tuple[str, bytes]],
    ) -> list[str]:
        """Сохранить несколько файлов по очереди.

        При ошибке уже записанные файлы остаются на месте, а наружу уходит
        одна ошибка с именем файла, на котором всё остановилось.
        """
        self._check_note_owner(client_id, note_id)
        saved: list[str] = []
        for file_name, data in files:
            try:
                self.attachments.save(client_id, note_id, file_name, data)
            except (OSError, ValueError) as exc:
                logger.error(
                    "❌ Загрузка вложений прервана на %s (сохранено: %d): %s",
                    file_name,
                    len(saved),
                    exc,
                )
                raise ServiceError(f"сохранить вложение '{file_name}'", exc) from exc
            saved.append(file_name)
        return saved

    def delete_attachment(self, client_id: int, note_id: int, file_name: str) -> bool:
        with service_operation(f"удалить вложение '{file_name}'"):
            return self.attachments.delete(client_id, note_id, file_name)

    def open_attachment(self, client_id: int, note_id: int, file_name: str) -> bool:
        with service_operation(f"открыть вложение '{file_name}'"):
            self.attachments.open(client_id, note_id, file_name)
        return True

    # ──────────────────────────── Поля ─────────────────────────────

    def get_field_metadata(self) -> list[dict[str, Any]]:
        return [field.to_dict() for field in self.fields.get_field_metadata()]

    def add_field(
        self,
        name: str,
        data_type: str = "TEXT",
        is_required: bool = False,
        default_value: str | None = None,
    ) -> dict[str, Any]:
        result = self.fields.add_field(name, data_type, is_required, default_value)
        return {**result.field.to_dict(), "restartRequired": result.restart_required}

    def toggle_field_visibility(self, name: str, is_hidden: bool) -> bool:
        self.fields.toggle_field_visibility(name, is_hidden)
        return True
