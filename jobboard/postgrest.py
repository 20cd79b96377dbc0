"""Thin client for the hosted database's REST (PostgREST) endpoint.

Filters are passed PostgREST-style, e.g. ``{"user_id": "eq.42"}``. Every
request carries the project's anon key as ``apikey``; the bearer token is the
signed-in user's access token when we have one, else the anon key.
"""
from __future__ import annotations

import re
from typing import Any

import requests

from jobboard.errors import TransportError
from jobboard.log import get_logger
from jobboard.retry import retry

log = get_logger(__name__)

_CONTENT_RANGE_RE = re.compile(r"^\s*(?:\d+-\d+|\*)/(\d+|\*)\s*$")


def parse_content_range(header: str | None) -> int | None:
    """Total row count from a ``Content-Range: 0-49/1234`` header."""
    if not header:
        return None
    m = _CONTENT_RANGE_RE.match(header)
    if not m or m.group(1) == "*":
        return None
    return int(m.group(1))


class PostgrestClient:
    def __init__(
        self,
        base_url: str,
        anon_key: str,
        access_token: str | None = None,
        timeout_s: float = 15.0,
        session: requests.Session | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("SUPABASE_URL is not configured")
        self.rest_url = base_url.rstrip("/") + "/rest/v1"
        self.anon_key = anon_key
        self.access_token = access_token
        self.timeout_s = timeout_s
        self.session = session or requests.Session()

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {self.access_token or self.anon_key}",
            "Content-Type": "application/json",
        }
        if extra:
            headers.update(extra)
        return headers

    @retry(max_attempts=3, base_delay=1.0)
    def _send(self, method: str, table: str, **kwargs: Any) -> requests.Response:
        r = self.session.request(
            method, f"{self.rest_url}/{table}", timeout=self.timeout_s, **kwargs
        )
        r.raise_for_status()
        return r

    def _request(self, method: str, table: str, **kwargs: Any) -> requests.Response:
        try:
            return self._send(method, table, **kwargs)
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            log.error("%s %s failed with HTTP %s", method, table, status)
            raise TransportError(f"{method} {table} failed (HTTP {status})", status_code=status) from exc
        except requests.RequestException as exc:
            log.error("%s %s failed: %s", method, table, exc)
            raise TransportError(f"{method} {table} failed: {exc}") from exc

    def select(
        self,
        table: str,
        filters: dict[str, str] | None = None,
        *,
        columns: str = "*",
        order: str | None = None,
        offset: int | None = None,
        limit: int | None = None,
        count: bool = False,
    ) -> tuple[list[dict], int | None]:
        params: dict[str, str] = {"select": columns}
        params.update(filters or {})
        if order:
            params["order"] = order

        extra: dict[str, str] = {}
        if count:
            extra["Prefer"] = "count=exact"
        if limit is not None:
            start = offset or 0
            extra["Range-Unit"] = "items"
            extra["Range"] = f"{start}-{start + limit - 1}"

        r = self._request("GET", table, params=params, headers=self._headers(extra))
        rows = r.json() or []
        total = parse_content_range(r.headers.get("Content-Range")) if count else None
        log.debug("select %s %s -> %d row(s), total=%s", table, filters, len(rows), total)
        return rows, total

    def insert(self, table: str, row: dict[str, Any]) -> dict | None:
        r = self._request(
            "POST",
            table,
            json=row,
            headers=self._headers({"Prefer": "return=representation"}),
        )
        created = r.json() if r.content else []
        return created[0] if created else None

    def update(self, table: str, values: dict[str, Any], filters: dict[str, str]) -> list[dict]:
        r = self._request(
            "PATCH",
            table,
            params=filters,
            json=values,
            headers=self._headers({"Prefer": "return=representation"}),
        )
        return r.json() if r.content else []

    def delete(self, table: str, filters: dict[str, str]) -> None:
        if not filters:
            raise ValueError("refusing to delete without filters")
        self._request("DELETE", table, params=filters, headers=self._headers())


def eq(value: Any) -> str:
    return f"eq.{value}"


def ilike(fragment: str) -> str:
    return f"ilike.*{fragment}*"
