"""Job results written to the hosted database by the custom-search scraper."""
from __future__ import annotations

from jobboard.log import get_logger
from jobboard.models import JobRecord, Page
from jobboard.postgrest import PostgrestClient, eq, ilike
from jobboard.sources.base import RecordSource

log = get_logger(__name__)

DEFAULT_PAGE_SIZE = 100


def record_from_row(row: dict, offset: str | None = None) -> JobRecord:
    return JobRecord(
        id=str(row.get("id", "")),
        title=(row.get("job_title") or "").strip(),
        location=row.get("job_location"),
        link=(row.get("job_link") or "").strip(),
        publication_date_raw=row.get("publication_date"),
        source_offset=offset,
        source="supabase",
        search_id=row.get("search_id"),
    )


class SupabaseJobSource(RecordSource):
    name = "supabase"

    def __init__(
        self,
        client: PostgrestClient,
        search_id: str | None,
        title_query: str | None = None,
        table: str = "job_results",
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self.client = client
        self.search_id = search_id
        self.title_query = title_query
        self.table = table
        self.page_size = page_size

    def fetch_page(self, cursor: str | None = None) -> Page:
        if not self.search_id:
            return Page(records=[], next_cursor=None, total=0)

        offset = int(cursor) if cursor else 0
        filters = {"search_id": eq(self.search_id)}
        if self.title_query:
            filters["job_title"] = ilike(self.title_query)

        rows, total = self.client.select(
            self.table,
            filters,
            order="created_at.asc,id.asc",
            offset=offset,
            limit=self.page_size,
            count=True,
        )
        records = [record_from_row(row, offset=cursor) for row in rows]

        end = offset + len(rows)
        more = len(rows) == self.page_size and (total is None or end < total)
        next_cursor = str(end) if more else None
        log.debug("job_results search_id=%r offset=%d -> %d rows of %s", self.search_id, offset, len(rows), total)
        return Page(records=records, next_cursor=next_cursor, total=total)
