"""Хранилище вложений: дерево ``<root>/<clientID>/<noteID>/<fileName>``.

Вложения не описываются строками базы: их существование определяется
файловой системой. Каталоги клиента и заметки удаляются сервисами вместе
с соответствующими записями.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from pathlib import Path

from services.folder_utils import list_dirs, list_files, open_path, remove_tree

logger = logging.getLogger(__name__)


class AttachmentNotFound(LookupError):
    def __init__(self, path: Path):
        super().__init__(f"Вложение не найдено: {path}")
        self.path = path


class InvalidAttachmentName(ValueError):
    def __init__(self, file_name: str):
        super().__init__(f"Недопустимое имя файла вложения: {file_name!r}")
        self.file_name = file_name


class InvalidAttachmentData(ValueError):
    def __init__(self, data: object):
        super().__init__(
            f"Содержимое вложения должно быть байтами, получено {type(data).__name__}"
        )


def _check_file_name(file_name: str) -> str:
    if (
        not isinstance(file_name, str)
        or file_name in ("", ".", "..")
        or "/" in file_name
        or "\\" in file_name
        or "\x00" in file_name
    ):
        raise InvalidAttachmentName(file_name)
    return file_name


def _dir_key(name: str) -> int | str:
    return int(name) if name.isdigit() else name


class AttachmentStore:
    """Файловое хранилище вложений к заметкам."""

    def __init__(
        self,
        root: str | os.PathLike[str],
        *,
        opener: Callable[[Path], None] = open_path,
    ) -> None:
        self.root = Path(root).expanduser()
        self._opener = opener

    def client_dir(self, client_id: int) -> Path:
        return self.root / str(int(client_id))

    def note_dir(self, client_id: int, note_id: int) -> Path:
        return self.client_dir(client_id) / str(int(note_id))

    def path_for(self, client_id: int, note_id: int, file_name: str) -> Path:
        return self.note_dir(client_id, note_id) / _check_file_name(file_name)

    # ──────────────────────────── Чтение ─────────────────────────────

    def list(self, client_id: int) -> dict[int | str, list[str]]:
        """Вложения клиента, сгруппированные по заметкам.

        Если у клиента нет каталога вложений, возвращается пустой словарь.
        """
        return {
            _dir_key(note_path.name): list_files(note_path)
            for note_path in list_dirs(self.client_dir(client_id))
        }

    def iter_file_names(self) -> Iterator[tuple[int, str]]:
        """Пары ``(clientID, имя файла)`` по всему дереву вложений."""
        for client_path in list_dirs(self.root):
            if not client_path.name.isdigit():
                continue
            client_id = int(client_path.name)
            for note_path in list_dirs(client_path):
                for file_name in list_files(note_path):
                    yield client_id, file_name

    # ──────────────────────────── Изменение ─────────────────────────────

    def save(
        self, client_id: int, note_id: int, file_name: str, data: bytes
    ) -> Path:
        """Записать файл вложения, перезаписав одноимённый."""
        path = self.path_for(client_id, note_id, file_name)
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise InvalidAttachmentData(data)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = bytes(data)
        path.write_bytes(payload)
        logger.info("📎 Сохранено вложение: %s (%d байт)", path, len(payload))
        return path

    def delete(self, client_id: int, note_id: int, file_name: str) -> bool:
        """Удалить файл; ``False``, если его и так нет."""
        path = self.path_for(client_id, note_id, file_name)
        if not path.is_file():
            return False
        path.unlink()
        logger.info("🗑️ Удалено вложение: %s", path)
        return True

    def delete_all_for_note(self, client_id: int, note_id: int) -> None:
        if remove_tree(self.note_dir(client_id, note_id)):
            logger.info(
                "🗑️ Удалены вложения заметки id=%s клиента id=%s", note_id, client_id
            )

    def delete_all_for_client(self, client_id: int) -> None:
        if remove_tree(self.client_dir(client_id)):
            logger.info("🗑️ Удалены все вложения клиента id=%s", client_id)

    def open(self, client_id: int, note_id: int, file_name: str) -> Path:
        """Открыть вложение приложением по умолчанию."""
        path = self.path_for(client_id, note_id, file_name)
        if not path.is_file():
            raise AttachmentNotFound(path)
        self._opener(path.resolve())
        logger.info("📂 Открыто вложение: %s", path)
        return path
