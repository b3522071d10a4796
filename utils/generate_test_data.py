"""Генератор тестовых данных для базы клиентов.

Печатает SQL со случайными клиентами и заметками::

    python -m utils.generate_test_data > test-data.sql

Скрипт рассчитан на схему из ``database/ClientDB.sql``.
"""

from __future__ import annotations

import random
import sys
from datetime import date, datetime, timedelta

NUM_CLIENTS = 100
MIN_NOTES_PER_CLIENT = 5
MAX_NOTES_PER_CLIENT = 25

FIRST_NAMES = [
    "James", "Mary", "John", "Patricia", "Robert", "Jennifer", "Michael", "Linda",
    "William", "Barbara", "David", "Elizabeth", "Richard", "Susan", "Joseph", "Jessica",
    "Thomas", "Sarah", "Charles", "Karen", "Daniel", "Lisa", "Matthew", "Emily",
]
LAST_NAMES = [
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis",
    "Wilson", "Anderson", "Taylor", "Moore", "Martin", "Lee", "White", "Harris",
    "Clark", "Lewis", "Walker", "Young", "King", "Wright", "Scott", "Nguyen",
]
STREET_NAMES = [
    "Main St", "Church St", "High St", "Station Rd", "Park Ave", "King St",
    "Queen St", "George St", "Market St", "Oxford St", "Crown St", "Broadway",
]
SUBURBS = [
    ("Sydney", "NSW", "2000"),
    ("Melbourne", "VIC", "3000"),
    ("Brisbane", "QLD", "4000"),
    ("Perth", "WA", "6000"),
    ("Adelaide", "SA", "5000"),
    ("Canberra", "ACT", "2600"),
    ("Hobart", "TAS", "7000"),
    ("Darwin", "NT", "0800"),
]
INSURANCE_PROVIDERS = [
    "Bupa", "Medibank", "HCF", "NIB", "GMHBA", "Australian Unity", "HBF", "Westfund",
]
NOTE_TYPES = [
    "Initial Consultation", "Follow-Up", "General", "Urgent", "Billing",
    "Insurance Claim", "Treatment Plan", "Progress Report", "Referral", "Phone Call",
]
NOTE_SENTENCES = [
    "Client presented today for scheduled appointment.",
    "Comprehensive health assessment was completed during this visit.",
    "Patient reports feeling generally well with some minor concerns.",
    "Vital signs were taken and recorded in the system.",
    "Detailed discussion held regarding treatment options and next steps.",
    "Medication compliance has been excellent according to patient report.",
    "Recent lab work shows improvement in key health markers.",
    "Exercise recommendations provided and documented.",
    "Follow-up appointment scheduled for continued monitoring.",
    "Insurance coverage and billing questions addressed.",
    "Referral paperwork completed for specialist consultation.",
    "Patient expressed satisfaction with current care plan.",
]
PROGRESS = ["significant", "moderate", "gradual", "excellent", "steady"]
AREAS = ["mobility", "pain management", "overall wellbeing", "daily activities"]

NOTES_END = datetime(2024, 12, 26, 18, 0, 0)


def escape_sql(value: str) -> str:
    return value.replace("'", "''")


def _random_date(rng: random.Random, start: date, end: date) -> date:
    return start + timedelta(days=rng.randint(0, (end - start).days))


def _email(rng: random.Random, first: str, last: str) -> str:
    domain = rng.choice(["gmail.com", "outlook.com", "yahoo.com", "icloud.com"])
    return f"{first.lower()}{rng.choice(['', '.', '_'])}{last.lower()}@{domain}"


def _address(rng: random.Random) -> str:
    suburb, state, postcode = rng.choice(SUBURBS)
    return f"{rng.randint(1, 999)} {rng.choice(STREET_NAMES)}, {suburb} {state} {postcode}"


def _note_content(rng: random.Random) -> str:
    sentences = [rng.choice(NOTE_SENTENCES) for _ in range(rng.randint(3, 8))]
    if rng.random() > 0.5:
        sentences.append(
            f"Patient reports {rng.choice(PROGRESS)} improvement in {rng.choice(AREAS)}."
        )
    return " ".join(sentences)


def generate_sql(
    num_clients: int = NUM_CLIENTS,
    min_notes: int = MIN_NOTES_PER_CLIENT,
    max_notes: int = MAX_NOTES_PER_CLIENT,
    seed: int | None = None,
) -> str:
    """Собрать SQL-скрипт со вставкой клиентов и их заметок.

    Идентификаторы клиентов считаются начиная с 1, поэтому скрипт
    применяется к пустой базе.
    """
    if num_clients < 1:
        raise ValueError("Нужен хотя бы один клиент")
    if not 0 <= min_notes <= max_notes:
        raise ValueError("Неверный диапазон числа заметок")

    rng = random.Random(seed)
    lines = [
        "-- Generated Test Data",
        f"-- {num_clients} clients with {min_notes}-{max_notes} notes each",
        "",
        "PRAGMA foreign_keys = OFF;",
        "",
        "INSERT INTO Client (firstName, lastName, dob, gender, email, phone, "
        "address, insurance, clientSince) VALUES",
    ]

    since_dates: list[date] = []
    values = []
    for _ in range(num_clients):
        first = rng.choice(FIRST_NAMES)
        last = rng.choice(LAST_NAMES)
        dob = _random_date(rng, date(1940, 1, 1), date(2005, 12, 31))
        since = _random_date(rng, date(2020, 1, 1), date(2024, 12, 26))
        since_dates.append(since)
        values.append(
            "('{}', '{}', '{}', '{}', '{}', '{}', '{}', '{}', '{}')".format(
                escape_sql(first),
                escape_sql(last),
                dob.isoformat(),
                rng.choice(["Male", "Female", "Other"]),
                escape_sql(_email(rng, first, last)),
                f"04{rng.randint(10_000_000, 99_999_999)}",
                escape_sql(_address(rng)),
                escape_sql(rng.choice(INSURANCE_PROVIDERS)),
                since.isoformat(),
            )
        )
    lines.append(",\n".join(values) + ";")

    note_values = []
    for client_id, since in enumerate(since_dates, start=1):
        start = datetime.combine(since, datetime.min.time())
        span = int((NOTES_END - start).total_seconds())
        for _ in range(rng.randint(min_notes, max_notes)):
            created = start + timedelta(seconds=rng.randint(0, max(span, 0)))
            note_values.append(
                "({}, '{}', '{}', '{}')".format(
                    client_id,
                    created.strftime("%Y-%m-%d %H:%M:%S"),
                    escape_sql(rng.choice(NOTE_TYPES)),
                    escape_sql(_note_content(rng)),
                )
            )

    if note_values:
        lines += [
            "",
            "INSERT INTO History (clientID, createdOn, noteType, content) VALUES",
            ",\n".join(note_values) + ";",
        ]
    lines += ["", "PRAGMA foreign_keys = ON;", ""]
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    num_clients = int(args[0]) if args else NUM_CLIENTS
    sys.stdout.write(generate_sql(num_clients))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
