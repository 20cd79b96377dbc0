from abc import ABC, abstractmethod

from jobboard.models import Page


class RecordSource(ABC):
    name: str = "unknown"

    @abstractmethod
    def fetch_page(self, cursor: str | None = None) -> Page:
        """Fetch the page starting at ``cursor``; ``next_cursor`` is None on the last page."""
