"""Хранилище: одна встроенная SQLite-база в памяти со снимком в файл.

База целиком живёт в памяти процесса. При старте она загружается из файла
(или создаётся по seed-скрипту), а после каждой изменяющей операции весь её
образ синхронно записывается обратно на диск.
"""

from __future__ import annotations

import logging
import os
import re
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Sequence

from peewee import PeeweeException, SqliteDatabase

logger = logging.getLogger(__name__)

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
REQUIRED_TABLES = ("Client",)


class StorageInitError(RuntimeError):
    """Не удалось загрузить файл базы или применить seed-скрипт."""


class StorageQueryError(RuntimeError):
    """Ошибка выполнения запроса или записи снимка базы на диск."""


@dataclass(frozen=True)
class ColumnInfo:
    cid: int
    name: str
    type: str
    not_null: bool
    default_value: Any
    is_primary_key: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "cid": self.cid,
            "name": self.name,
            "type": self.type,
            "notNull": self.not_null,
            "defaultValue": self.default_value,
            "isPrimaryKey": self.is_primary_key,
        }


def quote_identifier(name: str) -> str:
    """Вернуть имя таблицы/колонки в кавычках, отвергнув всё подозрительное."""
    if not IDENTIFIER_RE.fullmatch(name or ""):
        raise StorageQueryError(f"Недопустимый идентификатор: {name!r}")
    return f'"{name}"'


class StorageEngine:
    """Владелец единственного соединения с базой."""

    def __init__(self, database_path: str | os.PathLike[str]) -> None:
        self.database_path = Path(database_path).expanduser()
        # Соединение общее для всех потоков: каждое новое ":memory:" пустое.
        self.database = SqliteDatabase(
            ":memory:",
            thread_safe=False,
            autoconnect=False,
            check_same_thread=False,
            pragmas={"foreign_keys": 1},
        )
        self._last_insert_id: int | None = None
        self._write_depth = 0

    # ──────────────────────────── Жизненный цикл ─────────────────────────────

    @classmethod
    def open(
        cls,
        database_path: str | os.PathLike[str],
        seed_script_path: str | os.PathLike[str] | None,
    ) -> "StorageEngine":
        """Загрузить базу из файла или создать новую по seed-скрипту."""
        engine = cls(database_path)
        engine.database.connect(reuse_if_open=True)
        if engine.database_path.exists():
            try:
                engine._load_file()
                engine._check_tables()
            except StorageInitError:
                engine.database.close()
                raise
        else:
            try:
                engine._apply_seed(seed_script_path)
                engine.snapshot()
            except StorageQueryError as exc:
                engine.database.close()
                raise StorageInitError(str(exc)) from exc
            except StorageInitError:
                engine.database.close()
                raise
            logger.info("🆕 Создана новая база: %s", engine.database_path)
        return engine

    def _load_file(self) -> None:
        try:
            source = sqlite3.connect(str(self.database_path))
            try:
                source.backup(self.database.connection())
            finally:
                source.close()
        except (sqlite3.Error, OSError) as exc:
            logger.error("❌ Не удалось загрузить базу %s: %s", self.database_path, exc)
            raise StorageInitError(
                f"Не удалось загрузить базу {self.database_path}: {exc}"
            ) from exc
        logger.info("📂 База загружена из файла: %s", self.database_path)

    def _check_tables(self) -> None:
        missing = [name for name in REQUIRED_TABLES if not self.table_exists(name)]
        if missing:
            logger.error(
                "❌ В файле %s нет таблиц: %s", self.database_path, ", ".join(missing)
            )
            raise StorageInitError(
                f"Файл {self.database_path} не похож на базу клиентов: "
                f"нет таблиц {', '.join(missing)}"
            )

    def _apply_seed(self, seed_script_path: str | os.PathLike[str] | None) -> None:
        if not seed_script_path:
            raise StorageInitError(
                f"Файл базы {self.database_path} не найден, а seed-скрипт не задан"
            )
        try:
            script = Path(seed_script_path).read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageInitError(
                f"Не удалось прочитать seed-скрипт {seed_script_path}: {exc}"
            ) from exc
        try:
            self.database.connection().executescript(script)
        except sqlite3.Error as exc:
            logger.error("❌ Ошибка seed-скрипта %s: %s", seed_script_path, exc)
            raise StorageInitError(f"Ошибка применения seed-скрипта: {exc}") from exc

    def close(self) -> None:
        """Записать последний снимок и закрыть соединение."""
        if self.database.is_closed():
            return
        try:
            self.snapshot()
        finally:
            self.database.close()
        logger.info("💾 База сохранена и закрыта: %s", self.database_path)

    # ──────────────────────────── Запросы ─────────────────────────────

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Выполнить читающий запрос и вернуть строки в виде словарей."""
        try:
            cursor = self.database.execute_sql(sql, tuple(params))
            columns = [column[0] for column in cursor.description or ()]
            rows = cursor.fetchall()
        except (PeeweeException, sqlite3.Error) as exc:
            logger.error("❌ Ошибка запроса: %s | %s", sql, exc)
            raise StorageQueryError(str(exc)) from exc
        return [dict(zip(columns, row)) for row in rows]

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Выполнить изменяющий запрос и сохранить снимок базы.

        Returns:
            int: число затронутых строк.
        """
        with self.writing():
            cursor = self.database.execute_sql(sql, tuple(params))
            if cursor.lastrowid:
                self._last_insert_id = cursor.lastrowid
            return cursor.rowcount

    def last_inserted_id(self) -> int:
        if self._last_insert_id is None:
            raise StorageQueryError("Нет предшествующей вставки")
        return self._last_insert_id

    def columns_of(self, table_name: str) -> list[ColumnInfo]:
        rows = self.query(f"PRAGMA table_info({quote_identifier(table_name)})")
        return [
            ColumnInfo(
                cid=row["cid"],
                name=row["name"],
                type=row["type"] or "",
                not_null=bool(row["notnull"]),
                default_value=row["dflt_value"],
                is_primary_key=bool(row["pk"]),
            )
            for row in rows
        ]

    def table_exists(self, table_name: str) -> bool:
        return self.database.table_exists(table_name)

    # ──────────────────────────── Запись ─────────────────────────────

    @contextmanager
    def writing(self) -> Iterator["StorageEngine"]:
        """Блок изменяющих операций, после которого пишется один снимок.

        Ошибки базы внутри блока превращаются в :class:`StorageQueryError`.
        Вложенные блоки сохраняют снимок только при выходе из внешнего.
        """
        self._write_depth += 1
        try:
            yield self
        except (PeeweeException, sqlite3.Error) as exc:
            logger.error("❌ Ошибка изменения базы: %s", exc)
            raise StorageQueryError(str(exc)) from exc
        finally:
            self._write_depth -= 1
        if self._write_depth == 0:
            self.snapshot()

    def snapshot(self) -> None:
        """Записать образ всей базы в файл."""
        target = self.database_path
        tmp_path = target.with_name(target.name + ".tmp")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if tmp_path.exists():
                tmp_path.unlink()
            dest = sqlite3.connect(str(tmp_path))
            try:
                self.database.connection().backup(dest)
            finally:
                dest.close()
            os.replace(tmp_path, target)
        except (sqlite3.Error, OSError) as exc:
            logger.error("❌ Не удалось сохранить снимок базы %s: %s", target, exc)
            raise StorageQueryError(f"Не удалось сохранить базу: {exc}") from exc
        logger.debug("💾 Снимок базы записан: %s", target)
