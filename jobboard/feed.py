"""Accumulate pages from a record source, in arrival order."""
from __future__ import annotations

from typing import Iterable

from jobboard.errors import TransportError
from jobboard.log import get_logger
from jobboard.models import JobRecord
from jobboard.sources.base import RecordSource

log = get_logger(__name__)

DEFAULT_MAX_PAGES = 50


def merge_records(*batches: Iterable[JobRecord]) -> list[JobRecord]:
    """Concatenate batches, keeping the first record seen for each id."""
    seen: set[str] = set()
    merged: list[JobRecord] = []
    for batch in batches:
        for record in batch:
            if record.id in seen:
                continue
            seen.add(record.id)
            merged.append(record)
    return merged


class RecordFeed:
    """Everything fetched so far from one source, plus where to resume.

    A failed fetch raises and leaves both the records and the cursor as they
    were, so the caller can retry the same page later.
    """

    def __init__(self, source: RecordSource) -> None:
        self.source = source
        self._records: list[JobRecord] = []
        self._ids: set[str] = set()
        self._cursor: str | None = None
        self._exhausted = False
        self.pages_loaded = 0
        self.total: int | None = None

    @property
    def records(self) -> list[JobRecord]:
        return list(self._records)

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    @property
    def cursor(self) -> str | None:
        return self._cursor

    def reset(self) -> None:
        self._records = []
        self._ids = set()
        self._cursor = None
        self._exhausted = False
        self.pages_loaded = 0
        self.total = None

    def load_next(self) -> list[JobRecord]:
        """Fetch one page and append its new records; returns what was added."""
        if self._exhausted:
            return []

        page = self.source.fetch_page(self._cursor)

        added: list[JobRecord] = []
        for record in page.records:
            if record.id in self._ids:
                continue
            self._ids.add(record.id)
            added.append(record)
        self._records.extend(added)

        self.pages_loaded += 1
        if page.total is not None:
            self.total = page.total
        if page.next_cursor and page.next_cursor != self._cursor:
            self._cursor = page.next_cursor
        else:
            self._exhausted = True
        log.debug(
            "[%s] page %d: +%d records (%d total)",
            self.source.name, self.pages_loaded, len(added), len(self._records),
        )
        return added

    def load_all(self, max_pages: int = DEFAULT_MAX_PAGES) -> list[JobRecord]:
        """Load pages until the source runs out or ``max_pages`` more pages were read."""
        for _ in range(max_pages):
            if self._exhausted:
                break
            try:
                self.load_next()
            except TransportError as exc:
                log.error("[%s] fetch failed after %d page(s): %s", self.source.name, self.pages_loaded, exc)
                raise
        else:
            if not self._exhausted:
                log.warning("[%s] stopped after %d pages; more are available", self.source.name, max_pages)
        return self.records

    def refresh(self, max_pages: int = DEFAULT_MAX_PAGES) -> list[JobRecord]:
        """Re-read from the first page, keeping the old records if that fails."""
        snapshot = (list(self._records), set(self._ids), self._cursor, self._exhausted, self.pages_loaded, self.total)
        self.reset()
        try:
            return self.load_all(max_pages)
        except TransportError:
            (self._records, self._ids, self._cursor, self._exhausted, self.pages_loaded, self.total) = snapshot
            raise
