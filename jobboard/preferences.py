"""Default exclusion words saved per user, applied at every sign-in."""
from __future__ import annotations

from jobboard.errors import NotAuthenticatedError
from jobboard.log import get_logger
from jobboard.models import FilterState, UserFilters
from jobboard.postgrest import PostgrestClient, eq

log = get_logger(__name__)


class UserFiltersStore:
    def __init__(self, client: PostgrestClient, table: str = "user_filters") -> None:
        self.client = client
        self.table = table

    def load(self, user_id: str | None) -> UserFilters | None:
        if not user_id:
            return None
        rows, _ = self.client.select(self.table, {"user_id": eq(user_id)}, limit=1)
        if not rows:
            return None
        return UserFilters(user_id=user_id, excluded_words=list(rows[0].get("excluded_words") or []))

    def get(self, user_id: str | None) -> list[str]:
        filters = self.load(user_id)
        return filters.excluded_words if filters else []

    def save(self, user_id: str | None, words: list[str]) -> list[str]:
        if not user_id:
            raise NotAuthenticatedError("Must be logged in to save filters")
        cleaned: list[str] = []
        for w in words:
            w = w.strip()
            if w and w not in cleaned:
                cleaned.append(w)

        if self.load(user_id) is not None:
            self.client.update(self.table, {"excluded_words": cleaned}, {"user_id": eq(user_id)})
        else:
            self.client.insert(self.table, {"user_id": user_id, "excluded_words": cleaned})
        log.info("Saved %d excluded word(s) for %s", len(cleaned), user_id)
        return cleaned

    def add_word(self, user_id: str | None, word: str) -> list[str]:
        current = self.get(user_id)
        if not word.strip() or word.strip() in current:
            return current
        return self.save(user_id, current + [word])

    def remove_word(self, user_id: str | None, word: str) -> list[str]:
        current = self.get(user_id)
        return self.save(user_id, [w for w in current if w != word])

    def initial_state(self, user_id: str | None, base: FilterState | None = None) -> FilterState:
        """Filter state for a new session, pre-loaded with the user's defaults."""
        state = base or FilterState()
        return state.with_excluded(*self.get(user_id))
