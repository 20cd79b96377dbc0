import pytest

from jobboard.agencies import AGENCY_LOGOS, resolve_agency, resolve_domain, resolve_logo

RANDSTAD_LOGO = next(a.logo for a in AGENCY_LOGOS if a.domain == "randstad.be")


def test_randstad_link():
    link = "https://www.randstad.be/jobs/123"
    assert resolve_domain(link) == "randstad.be"
    assert resolve_logo(link) == RANDSTAD_LOGO


@pytest.mark.parametrize("link, domain", [
    ("https://www2.tempo-team.be/offre/9", "tempo-team.be"),
    ("https://jobs.adecco.be/x", "jobs.adecco.be"),
    ("http://WWW.ASAP.BE/job", "asap.be"),
    ("https://example.org/job", "example.org"),
])
def test_domain_normalization(link, domain):
    assert resolve_domain(link) == domain


def test_subdomain_matches_table_by_substring():
    assert resolve_agency("https://jobs.adecco.be/x").domain == "adecco.be"


def test_unknown_agency_has_no_logo():
    assert resolve_logo("https://example.org/job") is None


@pytest.mark.parametrize("link", ["not a url", "://", "http://[::1", "", None])
def test_malformed_links_never_raise(link):
    assert resolve_logo(link) is None


def test_brand_recognized_in_malformed_link():
    assert resolve_domain("randstad jobs page 12") == "randstad.be"
    assert resolve_logo("randstad jobs page 12") == RANDSTAD_LOGO


def test_brand_subdomain_canonicalized():
    assert resolve_domain("https://interim.randstad.be/a") == "randstad.be"


def test_raw_fallback_matches_table():
    assert resolve_logo("proselect.be/jobs/4") == next(a.logo for a in AGENCY_LOGOS if a.domain == "proselect.be")
