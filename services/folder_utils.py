"""Утилиты для работы с локальными файлами и папками."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def open_path(path: str | os.PathLike[str]) -> None:
    """Открыть файл или папку приложением по умолчанию."""

    target = Path(path)
    if not target.exists():
        raise FileNotFoundError(f"Путь не найден: {target}")

    try:
        if sys.platform.startswith("win"):
            os.startfile(str(target))  # type: ignore[attr-defined]
        elif sys.platform.startswith("darwin"):
            subprocess.Popen(["open", str(target)])
        else:
            subprocess.Popen(["xdg-open", str(target)])
    except OSError as exc:
        logger.exception("Не удалось открыть %s", target)
        raise OSError(f"Не удалось открыть файл: {exc}") from exc


def remove_tree(path: str | os.PathLike[str]) -> bool:
    """Рекурсивно удалить каталог.

    Returns:
        bool: ``False``, если каталога не было.
    """

    target = Path(path)
    if not target.exists():
        return False

    try:
        if target.is_dir():
            shutil.rmtree(target)
        else:
            target.unlink()
    except PermissionError as exc:
        raise PermissionError(f"Нет прав для удаления: {target}") from exc
    except OSError as exc:
        logger.exception("Не удалось удалить %s", target)
        raise OSError(f"Не удалось удалить объект: {exc}") from exc
    return True


def list_dirs(path: str | os.PathLike[str]) -> list[Path]:
    """Подкаталоги ``path`` в порядке имён; пустой список, если его нет."""

    root = Path(path)
    if not root.is_dir():
        return []
    return sorted((p for p in root.iterdir() if p.is_dir()), key=lambda p: p.name)


def list_files(path: str | os.PathLike[str]) -> list[str]:
    """Имена файлов в каталоге ``path`` в порядке имён."""

    root = Path(path)
    if not root.is_dir():
        return []
    return sorted(p.name for p in root.iterdir() if p.is_file())
