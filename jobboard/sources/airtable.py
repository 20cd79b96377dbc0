"""Airtable-backed job tables filled by the scrape automation.

Docs: https://airtable.com/developers/web/api/list-records
"""
from __future__ import annotations

from typing import Any

import requests

from jobboard.config import AirtableBase
from jobboard.errors import TransportError
from jobboard.log import get_logger
from jobboard.models import JobRecord, Page
from jobboard.retry import retry
from jobboard.sources.base import RecordSource

log = get_logger(__name__)

API_URL = "https://api.airtable.com/v0"

# Column names used by the scraper's Airtable base.
FIELD_TITLE = "Poste"
FIELD_LOCATION = "Localisation"
FIELD_LINK = "lien"
FIELD_PUBLISHED = "Publication date"


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, list):
        value = ", ".join(str(v) for v in value if v is not None)
    value = str(value).strip()
    return value or None


def record_from_airtable(hit: dict, offset: str | None = None, search_id: str | None = None) -> JobRecord:
    fields = hit.get("fields") or {}
    return JobRecord(
        id=str(hit.get("id", "")),
        title=_text(fields.get(FIELD_TITLE)) or "",
        location=_text(fields.get(FIELD_LOCATION)),
        link=_text(fields.get(FIELD_LINK)) or "",
        publication_date_raw=_text(fields.get(FIELD_PUBLISHED)),
        source_offset=offset,
        source="airtable",
        search_id=search_id,
    )


class AirtableSource(RecordSource):
    name = "airtable"

    def __init__(
        self,
        api_key: str,
        base: AirtableBase,
        search_id: str | None = None,
        timeout_s: float = 15.0,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.base = base
        self.search_id = search_id
        self.timeout_s = timeout_s
        self.session = session or requests.Session()

    @property
    def url(self) -> str:
        return f"{API_URL}/{self.base.base_id}/{self.base.table_id}"

    def _params(self, cursor: str | None) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.search_id:
            params["filterByFormula"] = f"SearchID='{self.search_id}'"
        if cursor:
            params["offset"] = cursor
        return params

    @retry(max_attempts=3, base_delay=2.0)
    def _get(self, cursor: str | None) -> dict:
        r = self.session.get(
            self.url,
            params=self._params(cursor),
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            timeout=self.timeout_s,
        )
        r.raise_for_status()
        return r.json()

    def fetch_page(self, cursor: str | None = None) -> Page:
        try:
            data = self._get(cursor)
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            if status in (401, 403):
                log.error("Airtable refused the API key (HTTP %s)", status)
            raise TransportError(f"Failed to fetch data from Airtable (HTTP {status})", status_code=status) from exc
        except (requests.RequestException, ValueError) as exc:
            raise TransportError(f"Failed to fetch data from Airtable: {exc}") from exc

        records = [
            record_from_airtable(hit, offset=cursor, search_id=self.search_id)
            for hit in data.get("records", [])
        ]
        next_cursor = data.get("offset") or None
        log.debug("Airtable offset=%r returned %d records (next=%r)", cursor, len(records), next_cursor)
        return Page(records=records, next_cursor=next_cursor)
