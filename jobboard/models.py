"""Data models for job records, favorites and filter state."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class JobRecord:
    id: str
    title: str
    link: str
    location: str | None = None
    publication_date_raw: str | None = None
    source_offset: str | None = None
    source: str = "unknown"
    search_id: str | None = None


@dataclass(frozen=True)
class Page:
    records: list[JobRecord]
    next_cursor: str | None = None
    total: int | None = None


@dataclass(frozen=True)
class FavoriteEntry:
    id: str
    user_id: str
    job_title: str
    job_location: str | None
    job_link: str

    @classmethod
    def from_row(cls, row: dict) -> "FavoriteEntry":
        return cls(
            id=str(row.get("id", "")),
            user_id=str(row.get("user_id", "")),
            job_title=row.get("job_title") or "",
            job_location=row.get("job_location"),
            job_link=row.get("job_link") or "",
        )


class SortOrder(str, Enum):
    TITLE_ASC = "title_asc"
    TITLE_DESC = "title_desc"
    AGENCY_ASC = "agency_asc"
    AGENCY_DESC = "agency_desc"

    @property
    def descending(self) -> bool:
        return self in (SortOrder.TITLE_DESC, SortOrder.AGENCY_DESC)

    @property
    def by_agency(self) -> bool:
        return self in (SortOrder.AGENCY_ASC, SortOrder.AGENCY_DESC)


@dataclass(frozen=True)
class FilterState:
    search_query: str = ""
    excluded_words: frozenset[str] = field(default_factory=frozenset)
    sort_order: SortOrder | None = None

    def with_excluded(self, *words: str) -> "FilterState":
        return FilterState(
            search_query=self.search_query,
            excluded_words=self.excluded_words | {w for w in words if w},
            sort_order=self.sort_order,
        )


@dataclass
class UserFilters:
    user_id: str
    excluded_words: list[str] = field(default_factory=list)
