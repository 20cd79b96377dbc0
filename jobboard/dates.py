"""Turn the publication dates scraped from agency sites into DD/MM/YYYY.

Upstream scrapers hand us four shapes: already formatted dates, ISO instants,
relative French phrases ("il y a 3 jours") and long French dates
("12 Décembre 2024"). Anything else goes through dateutil, and if that fails
the raw text is shown as-is.
"""
from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone

from dateutil import parser as date_parser

from jobboard.errors import ParseError
from jobboard.log import get_logger

log = get_logger(__name__)

DISPLAY_FORMAT = "%d/%m/%Y"

FRENCH_MONTHS: dict[str, str] = {
    "janvier": "01",
    "février": "02",
    "fevrier": "02",
    "mars": "03",
    "avril": "04",
    "mai": "05",
    "juin": "06",
    "juillet": "07",
    "août": "08",
    "aout": "08",
    "septembre": "09",
    "octobre": "10",
    "novembre": "11",
    "décembre": "12",
    "decembre": "12",
}

_DISPLAY_RE = re.compile(r"^\d{2}/\d{2}/\d{4}$")
_DAYS_AGO_RE = re.compile(r"il y a\D*(\d+)", re.IGNORECASE)
_FRENCH_DATE_RE = re.compile(
    r"(\d{1,2})\s*(" + "|".join(FRENCH_MONTHS) + r")\s*(\d{4})",
    re.IGNORECASE,
)
_EPOCH_RE = re.compile(r"^(?:\d{10}|\d{13})$")


def _parse_iso(raw: str) -> datetime:
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        try:
            return date_parser.isoparse(raw.strip())
        except (ValueError, OverflowError) as exc:
            raise ParseError(f"not an ISO instant: {raw!r}") from exc


def _from_epoch(raw: str) -> datetime:
    ts = int(raw)
    if len(raw) == 13:
        ts /= 1000.0
    return datetime.fromtimestamp(ts, tz=timezone.utc)


def _format(value: date) -> str:
    return value.strftime(DISPLAY_FORMAT)


def normalize_date(raw: str | None, today: date | None = None) -> str:
    """Return ``raw`` as DD/MM/YYYY, or unchanged when it cannot be read.

    ``today`` anchors relative phrases; it defaults to the local date.
    Never raises.
    """
    if not raw:
        return ""

    try:
        if _DISPLAY_RE.match(raw):
            return raw

        if "T" in raw:
            return _format(_parse_iso(raw))

        lowered = raw.lower()
        if "il y a" in lowered:
            m = _DAYS_AGO_RE.search(lowered)
            if m:
                anchor = today or date.today()
                return _format(anchor - timedelta(days=int(m.group(1))))

        m = _FRENCH_DATE_RE.search(lowered)
        if m:
            day = m.group(1).zfill(2)
            month = FRENCH_MONTHS[m.group(2)]
            return f"{day}/{month}/{m.group(3)}"

        stripped = raw.strip()
        if _EPOCH_RE.match(stripped):
            return _format(_from_epoch(stripped))
        # Bare digits are only trusted as epochs or YYYYMMDD.
        if stripped.isdigit() and len(stripped) != 8:
            log.warning("Unable to parse date: %r", raw)
            return raw

        try:
            return _format(date_parser.isoparse(stripped))
        except (ValueError, OverflowError):
            pass
        # dayfirst reads 2024-11-05 as 11 May; ISO dates must not reach it.
        try:
            return _format(date_parser.parse(stripped, dayfirst=True))
        except (ValueError, OverflowError):
            log.warning("Unable to parse date: %r", raw)
            return raw
    except (ParseError, ValueError, OverflowError, OSError) as exc:
        log.warning("Error formatting date %r: %s", raw, exc)
        return raw
