"""Per-user saved jobs.

Uniqueness of (user_id, job_link) is enforced here with a check before every
insert; the table itself is not assumed to have a unique constraint. Two
concurrent writers for the same job are last-write-wins.
"""
from __future__ import annotations

import itertools
from abc import ABC, abstractmethod

from jobboard.errors import NotAuthenticatedError
from jobboard.log import get_logger
from jobboard.models import FavoriteEntry, JobRecord
from jobboard.postgrest import PostgrestClient, eq

log = get_logger(__name__)


class FavoritesBackend(ABC):
    @abstractmethod
    def rows_for(self, user_id: str) -> list[dict]:
        pass

    @abstractmethod
    def exists(self, user_id: str, job_link: str) -> bool:
        pass

    @abstractmethod
    def insert(self, row: dict) -> None:
        pass

    @abstractmethod
    def delete(self, user_id: str, job_link: str) -> None:
        pass


class PostgrestFavoritesBackend(FavoritesBackend):
    def __init__(self, client: PostgrestClient, table: str = "favorites") -> None:
        self.client = client
        self.table = table

    def rows_for(self, user_id: str) -> list[dict]:
        rows, _ = self.client.select(self.table, {"user_id": eq(user_id)}, order="id.asc")
        return rows

    def exists(self, user_id: str, job_link: str) -> bool:
        rows, _ = self.client.select(
            self.table,
            {"user_id": eq(user_id), "job_link": eq(job_link)},
            columns="id",
            limit=1,
        )
        return bool(rows)

    def insert(self, row: dict) -> None:
        self.client.insert(self.table, row)

    def delete(self, user_id: str, job_link: str) -> None:
        self.client.delete(self.table, {"user_id": eq(user_id), "job_link": eq(job_link)})


class InMemoryFavoritesBackend(FavoritesBackend):
    """Favorites kept in process; used offline and in tests."""

    def __init__(self) -> None:
        self.rows: list[dict] = []
        self._ids = itertools.count(1)

    def rows_for(self, user_id: str) -> list[dict]:
        return [dict(r) for r in self.rows if r["user_id"] == user_id]

    def exists(self, user_id: str, job_link: str) -> bool:
        return any(r["user_id"] == user_id and r["job_link"] == job_link for r in self.rows)

    def insert(self, row: dict) -> None:
        self.rows.append({"id": str(next(self._ids)), **row})

    def delete(self, user_id: str, job_link: str) -> None:
        self.rows = [
            r for r in self.rows
            if not (r["user_id"] == user_id and r["job_link"] == job_link)
        ]


def _require_user(user_id: str | None, action: str) -> str:
    if not user_id:
        log.warning("Refused to %s favorites without a signed-in user", action)
        raise NotAuthenticatedError(f"Must be logged in to {action} favorites")
    return user_id


class FavoritesStore:
    def __init__(self, backend: FavoritesBackend) -> None:
        self.backend = backend
        self._cache: dict[str, list[FavoriteEntry]] = {}

    def invalidate(self, user_id: str | None = None) -> None:
        if user_id is None:
            self._cache.clear()
        else:
            self._cache.pop(user_id, None)

    def list(self, user_id: str | None) -> list[FavoriteEntry]:
        if not user_id:
            return []
        if user_id not in self._cache:
            self._cache[user_id] = [FavoriteEntry.from_row(r) for r in self.backend.rows_for(user_id)]
        return list(self._cache[user_id])

    def is_favorited(self, user_id: str | None, job_link: str) -> bool:
        return any(f.job_link == job_link for f in self.list(user_id))

    def add(self, user_id: str | None, job: JobRecord) -> None:
        """Save ``job`` for the user; a job already saved is left as is."""
        uid = _require_user(user_id, "add")
        try:
            if self.backend.exists(uid, job.link):
                log.debug("Already a favorite: %s", job.link)
                return
            self.backend.insert({
                "user_id": uid,
                "job_title": job.title,
                "job_location": job.location,
                "job_link": job.link,
            })
            log.info("Added favorite for %s: %s", uid, job.title)
        finally:
            self.invalidate(uid)

    def remove(self, user_id: str | None, job_link: str) -> None:
        uid = _require_user(user_id, "remove")
        try:
            self.backend.delete(uid, job_link)
            log.info("Removed favorite for %s: %s", uid, job_link)
        finally:
            self.invalidate(uid)

    def toggle(self, user_id: str | None, job: JobRecord) -> bool:
        """Add or remove ``job``; returns True when it ends up saved."""
        uid = _require_user(user_id, "change")
        if self.is_favorited(uid, job.link):
            self.remove(uid, job.link)
            return False
        self.add(uid, job)
        return True
