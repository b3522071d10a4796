import pytest

from utils import generate_test_data
from utils.generate_test_data import escape_sql, generate_sql


def test_escape_sql():
    assert escape_sql("O'Brien") == "O''Brien"


def test_generated_script_loads_into_schema(storage):
    script = generate_sql(num_clients=5, min_notes=1, max_notes=3, seed=7)
    storage.database.connection().executescript(script)

    assert storage.query('SELECT COUNT(*) AS n FROM "Client"') == [{"n": 5}]
    notes = storage.query('SELECT COUNT(*) AS n FROM "History"')[0]["n"]
    assert 5 <= notes <= 15
    orphans = storage.query(
        'SELECT COUNT(*) AS n FROM "History" WHERE "clientID" NOT IN '
        '(SELECT "clientID" FROM "Client")'
    )
    assert orphans == [{"n": 0}]


def test_same_seed_same_script():
    assert generate_sql(3, seed=1) == generate_sql(3, seed=1)


def test_zero_notes_allowed():
    script = generate_sql(2, min_notes=0, max_notes=0, seed=1)
    assert "INSERT INTO History" not in script


@pytest.mark.parametrize("kwargs", [{"num_clients": 0}, {"min_notes": 5, "max_notes": 1}])
def test_rejects_bad_arguments(kwargs):
    with pytest.raises(ValueError):
        generate_sql(**kwargs)


def test_main_prints_script(capsys):
    assert generate_test_data.main(["2"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("-- Generated Test Data")
    assert "PRAGMA foreign_keys = ON;" in out
