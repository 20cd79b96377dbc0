"""Resolve the staffing agency behind a job link, and its logo."""
from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from jobboard.errors import ParseError
from jobboard.log import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class Agency:
    domain: str
    logo: str


# Ordered: the first domain contained in the link's host wins.
AGENCY_LOGOS: tuple[Agency, ...] = (
    Agency("proselect.be", "https://i.postimg.cc/tg2Xq57M/IMG-7594.png"),
    Agency("tempo-team.be", "https://i.postimg.cc/kX2ZPLhf/352321179-802641697768990-7499832421124251242-n-1.png"),
    Agency("adecco.be", "https://encrypted-tbn0.gstatic.com/images?q=tbn:ANd9GcQpHiI1ANEpe5BlJpLQDI_4M8jl1AnJciaqaw&s"),
    Agency("asap.be", "https://a.storyblok.com/f/118264/240x240/c475b21edc/asap-logo-2.png"),
    Agency("synergiejobs.be", "https://encrypted-tbn0.gstatic.com/images?q=tbn:ANd9GcQMXkqv_r78fpVwVE9xDY6rd0GfS3bMlK1sWA&s"),
    Agency("randstad.be", "https://encrypted-tbn0.gstatic.com/images?q=tbn:ANd9GcQK5L2880dU-fMT-PjiSxVWWbwI6Vb8l3Vw6Q&s"),
    Agency("accentjobs.be", "https://i.postimg.cc/053yKcZg/IMG-7592.png"),
    Agency(
        "startpeople.be",
        "https://media.licdn.com/dms/image/v2/D4E03AQGzYaEHyR2N_w/profile-displayphoto-shrink_400_400/"
        "profile-displayphoto-shrink_400_400/0/1666681919673?e=2147483647&v=beta"
        "&t=oyXA1mGdfaPAMHB0YsV3dUAQEN0Ic0DfVltZaVtSywc",
    ),
    Agency("dajobs.be", "https://i.postimg.cc/fL7Dcvyd/347248690-792113835829706-805731174237376164-n.png"),
    Agency("sdworx.jobs", "https://i.postimg.cc/XJ8FtyxC/339105639-183429217812911-8132452130259136190-n.png"),
    Agency("roberthalf.com", "https://i.postimg.cc/13vSMqjT/383209240-608879378108206-6829050048883403071-n.jpg"),
)

# Brand substrings that always map to one canonical domain, whatever the
# subdomain or country site (jobs.randstad.be, randstad-interim..., broken links).
CANONICAL_BRANDS: dict[str, str] = {
    "randstad": "randstad.be",
}

_WWW_PREFIXES = ("www2.", "www.")


def _host(link: str) -> str:
    parts = urlsplit(link.strip())
    if not parts.scheme or not parts.netloc:
        raise ParseError(f"not an absolute URL: {link!r}")
    host = parts.hostname or ""
    if not host:
        raise ParseError(f"no host in URL: {link!r}")
    return host


def _strip_www(host: str) -> str:
    for prefix in _WWW_PREFIXES:
        if host.startswith(prefix):
            return host[len(prefix):]
    return host


def _canonical_brand(text: str) -> str | None:
    lowered = text.lower()
    for brand, domain in CANONICAL_BRANDS.items():
        if brand in lowered:
            return domain
    return None


def resolve_domain(link: str | None) -> str:
    """Normalized agency domain for ``link``.

    ``https://www.randstad.be/jobs/123`` gives ``randstad.be``. Malformed links
    fall back to the raw string (or to a canonical brand domain when one is
    recognisable in it). Never raises.
    """
    if not link:
        return ""
    try:
        domain = _strip_www(_host(link))
    except (ParseError, ValueError) as exc:
        log.debug("Falling back to raw link for domain: %s", exc)
        return _canonical_brand(link) or link
    return _canonical_brand(domain) or domain


def resolve_agency(link: str | None) -> Agency | None:
    domain = resolve_domain(link)
    if not domain:
        return None
    for agency in AGENCY_LOGOS:
        if agency.domain in domain:
            return agency
    return None


def resolve_logo(link: str | None) -> str | None:
    """Logo URL of the agency that posted ``link``, or None when unknown."""
    agency = resolve_agency(link)
    return agency.logo if agency else None
