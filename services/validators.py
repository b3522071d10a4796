"""Валидаторы и нормализаторы входных данных."""

import re
from datetime import date

FIELD_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DATE_SEPARATORS = re.compile(r"[/\-.\s]+")


class InvalidDateFormat(ValueError):
    """Строка не распознана как дата ДД/ММ/ГГГГ."""

    def __init__(self, value: str, reason: str = "ожидается формат ДД/ММ/ГГГГ"):
        super().__init__(f"Некорректная дата {value!r}: {reason}")
        self.value = value


class InvalidFieldName(ValueError):
    """Имя поля не подходит для колонки базы."""

    def __init__(self, name: str):
        super().__init__(
            f"Недопустимое имя поля {name!r}: допускаются латинские буквы, "
            "цифры и '_', первая — не цифра"
        )
        self.name = name


def parse_flexible_date(value: str) -> str:
    """Разобрать дату в формате «день месяц год».

    Разделителями могут быть ``/``, ``-``, ``.`` или пробелы. Двузначный год
    трактуется как 19xx при значении от 50 и как 20xx иначе.

    Args:
        value: Исходная строка, например ``"29/02/2024"`` или ``"1.3.99"``.

    Returns:
        str: Дата в формате ``ГГГГ-ММ-ДД``.

    Raises:
        InvalidDateFormat: если строка не является реальной датой.
    """
    text = (value or "").strip()
    parts = [p for p in _DATE_SEPARATORS.split(text) if p]
    if len(parts) != 3 or not all(p.isascii() and p.isdigit() for p in parts):
        raise InvalidDateFormat(value)

    day, month, year = (int(p) for p in parts)
    if len(parts[2]) == 2:
        year += 1900 if year >= 50 else 2000

    if not 1 <= day <= 31:
        raise InvalidDateFormat(value, "день вне диапазона 1–31")
    if not 1 <= month <= 12:
        raise InvalidDateFormat(value, "месяц вне диапазона 1–12")
    try:
        parsed = date(year, month, day)
    except ValueError as exc:
        raise InvalidDateFormat(value, "такой даты не существует") from exc
    return parsed.isoformat()


def normalize_date_value(value):
    """Привести значение DATE-поля к ``ГГГГ-ММ-ДД``.

    Пустые значения превращаются в ``None``. Уже канонические даты
    (как их отдаёт база) принимаются без изменений.
    """
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    if not text:
        return None
    if ISO_DATE_RE.fullmatch(text):
        try:
            return date.fromisoformat(text).isoformat()
        except ValueError as exc:
            raise InvalidDateFormat(text, "такой даты не существует") from exc
    return parse_flexible_date(text)


def validate_field_name(name: str) -> str:
    """Проверить имя нового поля."""
    if not isinstance(name, str) or not FIELD_NAME_RE.fullmatch(name):
        raise InvalidFieldName(name)
    return name
