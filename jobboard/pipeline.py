"""Search, exclusion and sort over the accumulated job records."""
from __future__ import annotations

import unicodedata
from typing import Iterable

from jobboard.agencies import resolve_domain
from jobboard.models import FilterState, JobRecord, SortOrder

# Names used by the first version of the board's sort selector.
_LEGACY_SORT_NAMES: dict[str, SortOrder] = {
    "asc": SortOrder.TITLE_ASC,
    "desc": SortOrder.TITLE_DESC,
}


def parse_sort_order(text: str | None) -> SortOrder | None:
    if not text:
        return None
    key = text.strip().lower()
    if key in _LEGACY_SORT_NAMES:
        return _LEGACY_SORT_NAMES[key]
    try:
        return SortOrder(key)
    except ValueError:
        raise ValueError(
            f"unknown sort order {text!r}; expected one of "
            + ", ".join(o.value for o in SortOrder)
        ) from None


def collation_key(text: str) -> tuple[str, str]:
    """Accent- and case-insensitive primary key; on ties lowercase sorts first."""
    decomposed = unicodedata.normalize("NFKD", text)
    folded = "".join(c for c in decomposed if not unicodedata.combining(c))
    return folded.casefold(), text.swapcase()


def matches(record: JobRecord, state: FilterState) -> bool:
    title = (record.title or "").lower()
    location = (record.location or "").lower()
    term = (state.search_query or "").lower()

    if term and term not in title and term not in location:
        return False

    for word in state.excluded_words:
        w = word.lower()
        if w and (w in title or w in location):
            return False
    return True


def _sort_key(order: SortOrder):
    if order.by_agency:
        return lambda r: collation_key(resolve_domain(r.link))
    return lambda r: collation_key(r.title or "")


def apply_filters(records: Iterable[JobRecord], state: FilterState) -> list[JobRecord]:
    """Records matching ``state``, ordered by ``state.sort_order``.

    Pure: the input is not modified, and ties (or no sort order at all) keep
    the original relative order.
    """
    kept = [r for r in records if matches(r, state)]
    if state.sort_order is None:
        return kept
    return sorted(kept, key=_sort_key(state.sort_order), reverse=state.sort_order.descending)
