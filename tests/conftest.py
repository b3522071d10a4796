import pytest


@pytest.fixture
def make_client(app):
    def _make_client(first_name: str = "Ann", last_name: str = "Lee", **fields):
        return app.add_client({"firstName": first_name, "lastName": last_name, **fields})

    return _make_client


@pytest.fixture
def make_note(app):
    def _make_note(client_id: int, content: str = "checkup", note_type: str = "General"):
        return app.add_note(
            {"clientID": client_id, "noteType": note_type, "content": content}
        )

    return _make_note


@pytest.fixture
def count_snapshots(storage, monkeypatch):
    """Считает записи снимка базы на диск."""
    calls = []
    original = storage.snapshot

    def _snapshot():
        calls.append(True)
        original()

    monkeypatch.setattr(storage, "snapshot", _snapshot)
    return calls
