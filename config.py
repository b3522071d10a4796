from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from appdirs import user_data_dir, user_log_dir
from dotenv import load_dotenv

APP_NAME = "crm_desktop"
DEFAULT_SEED_SCRIPT = Path(__file__).resolve().parent / "database" / "ClientDB.sql"


def _flag(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    data_dir: str = field(default_factory=lambda: user_data_dir(APP_NAME))
    database_path: str = ""
    seed_script_path: str = str(DEFAULT_SEED_SCRIPT)
    attachments_dir: str = ""
    search_note_type: bool = False
    log_dir: str = field(default_factory=lambda: user_log_dir(APP_NAME))
    log_level: str = "INFO"
    detailed_logging: bool = False

    def __post_init__(self) -> None:
        if not self.database_path:
            self.database_path = str(Path(self.data_dir) / "ClientDB.db")
        if not self.attachments_dir:
            self.attachments_dir = str(Path(self.data_dir) / "Attachments")

    def ensure_dirs(self) -> None:
        """Создаёт каталог данных и корень вложений, если их ещё нет."""
        Path(self.database_path).expanduser().parent.mkdir(parents=True, exist_ok=True)
        Path(self.attachments_dir).expanduser().mkdir(parents=True, exist_ok=True)


@lru_cache()
def get_settings() -> Settings:
    dotenv_path = Path(__file__).resolve().parent / ".env"
    load_dotenv(dotenv_path)

    data_dir = os.getenv("CRM_DATA_DIR") or user_data_dir(APP_NAME)
    return Settings(
        data_dir=data_dir,
        database_path=os.getenv("CRM_DB_PATH", ""),
        seed_script_path=os.getenv("CRM_SEED_SCRIPT") or str(DEFAULT_SEED_SCRIPT),
        attachments_dir=os.getenv("CRM_ATTACHMENTS_DIR", ""),
        search_note_type=_flag(os.getenv("CRM_SEARCH_NOTE_TYPE")),
        log_dir=os.getenv("LOG_DIR") or user_log_dir(APP_NAME),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        detailed_logging=_flag(os.getenv("DETAILED_LOGGING")),
    )
