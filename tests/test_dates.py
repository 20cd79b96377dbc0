from datetime import date

import pytest

from jobboard.dates import normalize_date

TODAY = date(2025, 1, 10)


@pytest.mark.parametrize("raw, expected", [
    ("25/12/2024", "25/12/2024"),
    ("2025-02-10T09:29:29Z", "10/02/2025"),
    ("2025-02-10T09:29:29.123+01:00", "10/02/2025"),
    ("il y a 3 jours", "07/01/2025"),
    ("Publié il y a 12 jours", "29/12/2024"),
    ("12 Décembre 2024", "12/12/2024"),
    ("3 août 2024", "03/08/2024"),
    ("1 FEVRIER 2025", "01/02/2025"),
    ("2024-11-05", "05/11/2024"),
])
def test_recognized_shapes(raw, expected):
    assert normalize_date(raw, today=TODAY) == expected


@pytest.mark.parametrize("raw", [None, ""])
def test_empty_input(raw):
    assert normalize_date(raw) == ""


def test_unparseable_returns_raw():
    assert normalize_date("bientôt", today=TODAY) == "bientôt"


def test_bad_iso_with_t_returns_raw():
    assert normalize_date("Tout de suite", today=TODAY) == "Tout de suite"


def test_relative_phrase_without_number_falls_through():
    assert normalize_date("il y a quelques jours", today=TODAY) == "il y a quelques jours"


def test_epoch_milliseconds():
    assert normalize_date("1739179769000") == "10/02/2025"


def test_epoch_seconds():
    assert normalize_date("1739179769") == "10/02/2025"


@pytest.mark.parametrize("raw", ["99999999999", "999999999999", "123456789"])
def test_digit_runs_that_are_not_epochs_stay_raw(raw):
    assert normalize_date(raw) == raw


@pytest.mark.parametrize("raw", [
    "25/12/2024",
    "2025-02-10T09:29:29Z",
    "il y a 3 jours",
    "12 Décembre 2024",
])
def test_idempotent(raw):
    once = normalize_date(raw, today=TODAY)
    assert normalize_date(once, today=TODAY) == once
