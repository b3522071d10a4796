"""Поиск клиентов по полям, заметкам и именам файлов вложений.

Подстрочный поиск без учёта регистра и без ранжирования: все строки
загружаются в память и проверяются по очереди. Индексы не строятся.
"""

from __future__ import annotations

import logging
from typing import Any

from database.models import Note
from database.storage import StorageEngine
from services.attachment_store import AttachmentStore
from services.clients.client_service import select_client_rows, select_client_summaries
from services.clients.dto import ClientSummaryDTO
from services.schema_registry import SchemaRegistry

logger = logging.getLogger(__name__)


def _contains(value: Any, needle: str) -> bool:
    if value is None:
        return False
    return needle in str(value).casefold()


class SearchEngine:
    def __init__(
        self,
        storage: StorageEngine,
        registry: SchemaRegistry,
        attachments: AttachmentStore,
        *,
        include_note_type: bool = False,
    ) -> None:
        self.storage = storage
        self.registry = registry
        self.attachments = attachments
        self.include_note_type = include_note_type

    def search(self, term: str | None) -> list[ClientSummaryDTO]:
        """Клиенты, у которых ``term`` встречается в видимом поле, тексте
        заметки или имени файла вложения.

        Пустой или пробельный запрос возвращает всех клиентов, как обычный
        список. Иначе ``term`` сравнивается как есть, с краевыми пробелами.
        """
        text = term or ""
        pk_name = self.registry.primary_key_name()
        if not text.strip():
            return select_client_summaries(self.storage, pk_name)

        needle = text.casefold()
        rows = select_client_rows(self.storage, pk_name)
        by_id = {row[pk_name]: row for row in rows}

        matched = self._match_fields(rows, pk_name, needle)
        matched |= self._match_notes(needle)
        matched |= self._match_attachments(needle)

        result = [
            ClientSummaryDTO.from_row(by_id[client_id], pk_name)
            for client_id in matched
            if client_id in by_id
        ]
        result.sort(key=lambda dto: dto.sort_key)
        logger.debug("🔍 Поиск %r: найдено %d", text, len(result))
        return result

    def _match_fields(
        self, rows: list[dict[str, Any]], pk_name: str, needle: str
    ) -> set[int]:
        hidden = self.registry.hidden_field_names()
        matched: set[int] = set()
        for row in rows:
            if any(
                _contains(value, needle)
                for name, value in row.items()
                if name not in hidden
            ):
                matched.add(row[pk_name])
        return matched

    def _match_notes(self, needle: str) -> set[int]:
        columns = [Note.client_id, Note.content]
        if self.include_note_type:
            columns.append(Note.note_type)
        matched: set[int] = set()
        for client_id, *values in Note.select(*columns).tuples():
            if any(_contains(value, needle) for value in values):
                matched.add(client_id)
        return matched

    def _match_attachments(self, needle: str) -> set[int]:
        return {
            client_id
            for client_id, file_name in self.attachments.iter_file_names()
            if needle in file_name.casefold()
        }
