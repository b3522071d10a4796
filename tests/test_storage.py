import sqlite3
import threading

import pytest

from database.storage import (
    StorageEngine,
    StorageInitError,
    StorageQueryError,
    quote_identifier,
)


def _reopen(storage):
    return StorageEngine.open(storage.database_path, None)


def test_open_creates_file_from_seed(storage):
    assert storage.database_path.exists()
    names = [c.name for c in storage.columns_of("Client")]
    assert names[:3] == ["clientID", "firstName", "lastName"]
    assert storage.table_exists("History")
    assert storage.table_exists("FieldMetadata")


def test_columns_of_reports_constraints(storage):
    columns = {c.name: c for c in storage.columns_of("Client")}
    assert columns["clientID"].is_primary_key
    assert columns["firstName"].not_null
    assert not columns["email"].not_null
    assert columns["dob"].type == "DATE"
    assert columns["clientID"].to_dict()["cid"] == 0


def test_query_without_matches_returns_empty_list(storage):
    assert storage.query('SELECT * FROM "Client" WHERE "clientID" = ?', (42,)) == []


def test_query_preserves_column_order(storage):
    storage.execute(
        'INSERT INTO "Client" ("firstName", "lastName") VALUES (?, ?)', ("Ann", "Lee")
    )
    row = storage.query('SELECT "lastName", "firstName" FROM "Client"')[0]
    assert list(row) == ["lastName", "firstName"]


def test_execute_persists_snapshot(storage):
    storage.execute(
        'INSERT INTO "Client" ("firstName", "lastName") VALUES (?, ?)', ("Ann", "Lee")
    )
    other = _reopen(storage)
    try:
        rows = other.query('SELECT "firstName", "lastName" FROM "Client"')
    finally:
        other.database.close()
    assert rows == [{"firstName": "Ann", "lastName": "Lee"}]


def test_last_inserted_id(storage):
    with pytest.raises(StorageQueryError):
        storage.last_inserted_id()
    storage.execute(
        'INSERT INTO "Client" ("firstName", "lastName") VALUES (?, ?)', ("A", "B")
    )
    first = storage.last_inserted_id()
    storage.execute(
        'INSERT INTO "Client" ("firstName", "lastName") VALUES (?, ?)', ("C", "D")
    )
    assert storage.last_inserted_id() == first + 1


def test_execute_returns_rowcount(storage):
    storage.execute(
        'INSERT INTO "Client" ("firstName", "lastName") VALUES (?, ?)', ("A", "B")
    )
    assert storage.execute('UPDATE "Client" SET "email" = ?', ("x@y.z",)) == 1
    assert storage.execute('DELETE FROM "Client" WHERE "clientID" = ?', (999,)) == 0


def test_constraint_violation_is_wrapped(storage):
    with pytest.raises(StorageQueryError):
        storage.execute('INSERT INTO "Client" ("email") VALUES (?)', ("a@b.c",))


def test_bad_sql_is_wrapped(storage):
    with pytest.raises(StorageQueryError):
        storage.query("SELEKT nothing")
    with pytest.raises(StorageQueryError):
        storage.execute("UPDATE nowhere SET x = 1")


def test_snapshot_failure_keeps_memory_state(storage, tmp_path):
    blocker = tmp_path / "blocked"
    blocker.mkdir()
    storage.database_path = blocker

    with pytest.raises(StorageQueryError):
        storage.execute(
            'INSERT INTO "Client" ("firstName", "lastName") VALUES (?, ?)', ("A", "B")
        )
    assert len(storage.query('SELECT * FROM "Client"')) == 1


def test_nested_writing_snapshots_once(storage, count_snapshots):
    with storage.writing():
        storage.execute(
            'INSERT INTO "Client" ("firstName", "lastName") VALUES (?, ?)', ("A", "B")
        )
        storage.execute('UPDATE "Client" SET "email" = ?', ("a@b.c",))
    assert len(count_snapshots) == 1


def test_writing_skips_snapshot_on_error(storage, count_snapshots):
    with pytest.raises(ValueError):
        with storage.writing():
            raise ValueError("boom")
    assert count_snapshots == []


def test_open_without_file_and_seed_fails(tmp_path):
    with pytest.raises(StorageInitError):
        StorageEngine.open(tmp_path / "missing.db", tmp_path / "missing.sql")
    with pytest.raises(StorageInitError):
        StorageEngine.open(tmp_path / "missing.db", None)


def test_open_with_broken_seed_fails(tmp_path):
    seed = tmp_path / "broken.sql"
    seed.write_text("CREATE TABLE (;", encoding="utf-8")
    with pytest.raises(StorageInitError):
        StorageEngine.open(tmp_path / "new.db", seed)
    assert not (tmp_path / "new.db").exists()


def test_open_with_corrupt_file_fails(tmp_path):
    path = tmp_path / "corrupt.db"
    path.write_bytes(b"definitely not a sqlite database" * 10)
    with pytest.raises(StorageInitError):
        StorageEngine.open(path, None)


def test_close_writes_final_snapshot(storage):
    storage.database.execute_sql(
        'INSERT INTO "Client" ("firstName", "lastName") VALUES (?, ?)', ("A", "B")
    )
    storage.close()
    other = _reopen(storage)
    try:
        assert len(other.query('SELECT * FROM "Client"')) == 1
    finally:
        other.database.close()


@pytest.mark.parametrize("name", ["", "1abc", 'a"b', "a;b", "with space"])
def test_quote_identifier_rejects_suspicious_names(name):
    with pytest.raises(StorageQueryError):
        quote_identifier(name)


def test_quote_identifier():
    assert quote_identifier("firstName") == '"firstName"'


def test_other_thread_sees_same_database(storage):
    storage.execute(
        'INSERT INTO "Client" ("firstName", "lastName") VALUES (?, ?)', ("Ann", "Lee")
    )
    seen = []
    errors = []

    def _worker():
        try:
            storage.snapshot()
            seen.extend(storage.query('SELECT "firstName" FROM "Client"'))
        except Exception as exc:  # pragma: no cover - surfaced by the assert below
            errors.append(exc)

    worker = threading.Thread(target=_worker)
    worker.start()
    worker.join()

    assert errors == []
    assert seen == [{"firstName": "Ann"}]
    assert storage.query('SELECT "firstName" FROM "Client"') == [{"firstName": "Ann"}]
    other = _reopen(storage)
    try:
        assert other.query('SELECT "firstName" FROM "Client"') == [{"firstName": "Ann"}]
    finally:
        other.database.close()


def test_closed_engine_does_not_reconnect(storage):
    storage.close()
    with pytest.raises(StorageQueryError):
        storage.query('SELECT * FROM "Client"')


@pytest.mark.parametrize("content", [b"", None])
def test_open_file_without_client_table_fails(tmp_path, content):
    path = tmp_path / "foreign.db"
    if content is None:
        conn = sqlite3.connect(str(path))
        conn.execute("CREATE TABLE other (id INTEGER)")
        conn.commit()
        conn.close()
    else:
        path.write_bytes(content)

    with pytest.raises(StorageInitError, match="Client"):
        StorageEngine.open(path, None)
