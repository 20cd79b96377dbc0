import itertools

import pytest

from jobboard.models import FilterState, JobRecord, SortOrder
from jobboard.pipeline import apply_filters, collation_key, parse_sort_order


@pytest.fixture
def records(job):
    return [
        job(id="1", title="Opérateur de production", location="Herstal", link="https://www.adecco.be/j/1"),
        job(id="2", title="Agent intérim logistique", location="Liège", link="https://www.randstad.be/j/2"),
        job(id="3", title="cariste", location="Seraing", link="https://www.asap.be/j/3"),
        job(id="4", title="Électricien", location=None, link="https://www2.tempo-team.be/j/4"),
        job(id="5", title="Cariste", location="Liège", link="https://www.adecco.be/j/5"),
    ]


def ids(rs):
    return [r.id for r in rs]


def test_no_state_keeps_everything_in_order(records):
    assert ids(apply_filters(records, FilterState())) == ["1", "2", "3", "4", "5"]


def test_search_matches_title_or_location_case_insensitively(records):
    assert ids(apply_filters(records, FilterState(search_query="LIÈGE"))) == ["2", "5"]
    assert ids(apply_filters(records, FilterState(search_query="cariste"))) == ["3", "5"]


def test_excluded_word_removes_record_regardless_of_query(records):
    state = FilterState(search_query="logistique", excluded_words=frozenset({"intérim"}))
    assert apply_filters(records, state) == []
    state = FilterState(excluded_words=frozenset({"INTÉRIM"}))
    assert "2" not in ids(apply_filters(records, state))


def test_exclusion_checks_location_too(records):
    assert ids(apply_filters(records, FilterState(excluded_words=frozenset({"liège"})))) == ["1", "3", "4"]


def test_title_sort_is_locale_aware(records):
    asc = apply_filters(records, FilterState(sort_order=SortOrder.TITLE_ASC))
    assert [r.title for r in asc] == [
        "Agent intérim logistique", "cariste", "Cariste", "Électricien", "Opérateur de production",
    ]


def test_descending_keeps_ties_in_fetch_order(job):
    rs = [job(id=str(i), title="Cariste") for i in range(4)]
    assert ids(apply_filters(rs, FilterState(sort_order=SortOrder.TITLE_DESC))) == ["0", "1", "2", "3"]


def test_agency_sort_uses_link_domain(records):
    asc = apply_filters(records, FilterState(sort_order=SortOrder.AGENCY_ASC))
    assert ids(asc) == ["1", "5", "3", "2", "4"]
    desc = apply_filters(records, FilterState(sort_order=SortOrder.AGENCY_DESC))
    assert ids(desc) == ["4", "2", "3", "1", "5"]


def test_input_is_not_mutated(records):
    before = list(records)
    apply_filters(records, FilterState(sort_order=SortOrder.TITLE_DESC))
    assert records == before


def test_repeated_calls_are_identical(records):
    state = FilterState(search_query="e", sort_order=SortOrder.AGENCY_ASC)
    assert apply_filters(records, state) == apply_filters(records, state)


def test_unsorted_result_is_subsequence(records):
    for query in ("", "e", "li", "zzz"):
        out = apply_filters(records, FilterState(search_query=query))
        positions = [records.index(r) for r in out]
        assert positions == sorted(positions)


def test_adding_exclusions_never_grows_result(records):
    words = ["liège", "cariste", "x", "production"]
    for n in range(len(words) + 1):
        for combo in itertools.combinations(words, n):
            state = FilterState(excluded_words=frozenset(combo))
            size = len(apply_filters(records, state))
            assert len(apply_filters(records, state.with_excluded("électricien"))) <= size


def test_empty_exclusion_word_is_ignored(records):
    assert len(apply_filters(records, FilterState(excluded_words=frozenset({""})))) == 5


def test_parse_sort_order():
    assert parse_sort_order(None) is None
    assert parse_sort_order("asc") is SortOrder.TITLE_ASC
    assert parse_sort_order("desc") is SortOrder.TITLE_DESC
    assert parse_sort_order("Agency_Desc") is SortOrder.AGENCY_DESC
    with pytest.raises(ValueError):
        parse_sort_order("date_asc")


def test_collation_key_folds_accents():
    assert collation_key("Élan")[0] == collation_key("elan")[0]


def test_missing_title_sorts_first():
    rs = [JobRecord(id="a", title="Zèbre", link=""), JobRecord(id="b", title="", link="")]
    assert ids(apply_filters(rs, FilterState(sort_order=SortOrder.TITLE_ASC))) == ["b", "a"]
