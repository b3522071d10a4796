import pytest

from services.search_service import SearchEngine


def _ids(results):
    return [r.id for r in results]


@pytest.fixture
def search(context):
    return context.search_engine


@pytest.fixture
def people(make_client):
    return {
        "ann": make_client("Ann", "Lee", email="ann@example.com"),
        "bob": make_client("Bob", "Kim", insurance="Acme Health"),
        "cy": make_client("Cy", "Adams", phone="555-0199"),
    }


def test_empty_term_lists_everyone(search, people, context):
    everyone = context.client_service.list_clients()
    assert search.search("") == everyone
    assert search.search("   ") == everyone
    assert search.search(None) == everyone


def test_matches_visible_field_case_insensitive(search, people):
    assert _ids(search.search("ACME")) == [people["bob"]]
    assert _ids(search.search("example.COM")) == [people["ann"]]


def test_hidden_field_is_not_searched(search, people, registry):
    registry.toggle_visibility("insurance", True)
    assert search.search("acme") == []


def test_matches_note_content(search, people, make_note):
    make_note(people["cy"], content="Discussed Knee surgery")
    assert _ids(search.search("knee")) == [people["cy"]]


def test_note_type_is_not_searched_by_default(search, people, make_note):
    make_note(people["cy"], content="x", note_type="Billing")
    assert search.search("billing") == []


def test_note_type_search_can_be_enabled(storage, registry, attachments, people, make_note):
    make_note(people["cy"], content="x", note_type="Billing")
    engine = SearchEngine(storage, registry, attachments, include_note_type=True)
    assert _ids(engine.search("billing")) == [people["cy"]]


def test_matches_attachment_file_name(search, people, make_note, attachments):
    note_id = make_note(people["ann"])
    attachments.save(people["ann"], note_id, "MRI_Scan.pdf", b"%PDF")
    assert _ids(search.search("mri_scan")) == [people["ann"]]


def test_client_matched_twice_appears_once(search, people, make_note):
    make_note(people["ann"], content="ann called")
    make_note(people["ann"], content="ann again")
    assert _ids(search.search("ann")) == [people["ann"]]


def test_results_sorted_by_name(search, make_client, make_note):
    zed = make_client("Zed", "Brown")
    amy = make_client("Amy", "Brown")
    old = make_client("Old", "Adams")
    for client_id in (zed, amy, old):
        make_note(client_id, content="flu shot")

    assert _ids(search.search("flu")) == [old, amy, zed]


def test_no_match(search, people):
    assert search.search("nothing-like-this") == []


def test_term_is_matched_with_surrounding_spaces(search, people, make_note):
    make_note(people["cy"], content="Referred by Dr Lee")
    assert _ids(search.search(" Lee")) == [people["cy"]]
    assert _ids(search.search("Lee")) == [people["cy"], people["ann"]]
