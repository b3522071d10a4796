import os
import signal
import sys
from pathlib import Path

import pytest

# ensure project root is on sys.path when running tests
sys.path.append(str(Path(__file__).resolve().parent))

from config import Settings
from core.app_context import AppContext
from database.db import db
from database.storage import StorageEngine
from services.attachment_store import AttachmentStore
from services.schema_registry import SchemaRegistry

_TEST_TIMEOUT = int(os.environ.get("PYTEST_TIMEOUT", "60"))


@pytest.fixture(autouse=True)
def watchdog():
    """Fail a test if it hangs longer than the timeout."""
    if not hasattr(signal, "SIGALRM"):
        yield
        return

    def handler(signum, frame):  # pragma: no cover - timeout handler
        pytest.fail("Test timeout exceeded", pytrace=False)

    signal.signal(signal.SIGALRM, handler)
    signal.alarm(_TEST_TIMEOUT)
    try:
        yield
    finally:
        signal.alarm(0)


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        data_dir=str(tmp_path / "data"),
        log_dir=str(tmp_path / "logs"),
    )


@pytest.fixture()
def storage(settings):
    settings.ensure_dirs()
    engine = StorageEngine.open(settings.database_path, settings.seed_script_path)
    db.initialize(engine.database)
    try:
        yield engine
    finally:
        if not engine.database.is_closed():
            engine.database.close()
        db.initialize(None)


@pytest.fixture()
def registry(storage):
    reg = SchemaRegistry(storage)
    reg.initialize()
    return reg


@pytest.fixture()
def opened_paths():
    return []


@pytest.fixture()
def attachments(settings, opened_paths):
    return AttachmentStore(settings.attachments_dir, opener=opened_paths.append)


@pytest.fixture()
def context(settings, storage, registry, attachments):
    return AppContext(
        settings,
        storage_factory=lambda _settings: storage,
        overrides={"registry": registry, "attachments": attachments},
    )


@pytest.fixture()
def app(context):
    return context.app_service
