"""
Trigger the external scrape automation and wait for its results.

The automation gives no completion signal: a trigger is a bare GET, success
is the HTTP status, and results show up in the job tables some time later.
``ScrapeWatcher`` waits a fixed window, then refreshes on an interval a
bounded number of times:

    IDLE -> TRIGGERED -> WAITING -> POLLING(1..n) -> DONE
    IDLE -> FAILED                  (trigger rejected)
    WAITING | POLLING -> CANCELLED  (token cancelled)
"""
from __future__ import annotations

import re
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

import requests

from jobboard.config import WatcherTimings
from jobboard.errors import TransportError, ValidationError
from jobboard.log import get_logger

log = get_logger(__name__)

RADIUS_CHOICES_KM: tuple[int, ...] = (10, 25, 50, 100)
_POSTAL_CODE_RE = re.compile(r"^\d{4}$")


@dataclass(frozen=True)
class ScrapeRequest:
    job_name: str
    postal_code: str
    radius_km: int = 25

    def validate(self) -> "ScrapeRequest":
        if not self.job_name.strip():
            raise ValidationError("job_name", "Le nom du job est requis")
        if not _POSTAL_CODE_RE.match(self.postal_code.strip()):
            raise ValidationError("postal_code", "Le code postal doit contenir 4 chiffres")
        if self.radius_km not in RADIUS_CHOICES_KM:
            raise ValidationError(
                "radius_km",
                "Le rayon doit être l'un de " + ", ".join(f"{r} km" for r in RADIUS_CHOICES_KM),
            )
        return self


def new_search_id(now: Callable[[], float] = time.time) -> str:
    return f"search_{int(now() * 1000)}"


class ScrapeWebhook:
    def __init__(
        self,
        url: str,
        timeout_s: float = 15.0,
        session: requests.Session | None = None,
    ) -> None:
        if not url:
            raise ValueError("SCRAPE_WEBHOOK_URL is not configured")
        self.url = url
        self.timeout_s = timeout_s
        self.session = session or requests.Session()

    def _call(self, params: dict[str, str]) -> None:
        action = params.get("action")
        try:
            r = self.session.get(self.url, params=params, timeout=self.timeout_s)
        except requests.RequestException as exc:
            log.error("Webhook action=%s unreachable: %s", action, exc)
            raise TransportError(f"Webhook action={action} failed: {exc}") from exc
        if not r.ok:
            log.error("Webhook action=%s returned HTTP %s", action, r.status_code)
            raise TransportError(f"Webhook action={action} failed (HTTP {r.status_code})", status_code=r.status_code)

    def trigger(self, request: ScrapeRequest, search_id: str | None = None) -> str:
        """Start a custom search; returns the search id results will carry."""
        request.validate()
        search_id = search_id or new_search_id()
        self._call({
            "action": "scrape",
            "nom_du_job": request.job_name.strip(),
            "code_postale": request.postal_code.strip(),
            "rayon": str(request.radius_km),
            "searchId": search_id,
        })
        log.info("Scrape started for %r near %s (%d km) -> %s",
                 request.job_name, request.postal_code, request.radius_km, search_id)
        return search_id

    def trigger_query(self, query: str) -> None:
        """Start a scrape of the shared board for a free-text query."""
        if not query.strip():
            raise ValidationError("search", "Veuillez remplir le champ de recherche.")
        self._call({"action": "scrape", "search": query.strip()})
        log.info("Scrape started for %r", query)

    def reset(self) -> None:
        """Ask the automation to wipe the shared board. Destructive."""
        self._call({"action": "delete"})
        log.info("Reset requested")


class CancellationToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; True if cancelled meanwhile."""
        return self._event.wait(seconds)


class WatchState(str, Enum):
    IDLE = "idle"
    TRIGGERED = "triggered"
    WAITING = "waiting"
    POLLING = "polling"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class WatchOutcome:
    state: WatchState
    polls: int = 0
    error: Exception | None = None
    history: list[WatchState] = field(default_factory=list)


class ScrapeWatcher:
    """Run a trigger, then refresh until the poll limit is reached.

    ``refresh`` is called once per poll; it returns True to stop early (for
    example when new records have appeared). ``sleep`` must behave like
    ``CancellationToken.wait``; tests pass a fake one.
    """

    def __init__(
        self,
        refresh: Callable[[int], bool | None],
        timings: WatcherTimings | None = None,
        token: CancellationToken | None = None,
        sleep: Callable[[float], bool] | None = None,
    ) -> None:
        self.refresh = refresh
        self.timings = timings or WatcherTimings()
        self.token = token or CancellationToken()
        self._sleep = sleep or self.token.wait
        self.state = WatchState.IDLE
        self.polls = 0
        self.history: list[WatchState] = [WatchState.IDLE]

    def _enter(self, state: WatchState) -> None:
        self.state = state
        self.history.append(state)
        log.debug("watcher -> %s (poll %d)", state.value, self.polls)

    def _pause(self, seconds: float) -> bool:
        """False when the watch must stop (cancelled)."""
        if self.token.cancelled or self._sleep(seconds) or self.token.cancelled:
            self._enter(WatchState.CANCELLED)
            return False
        return True

    def _outcome(self, error: Exception | None = None) -> WatchOutcome:
        return WatchOutcome(self.state, self.polls, error, list(self.history))

    def run(self, trigger: Callable[[], object], initial_wait_s: float | None = None) -> WatchOutcome:
        if self.state is not WatchState.IDLE:
            raise RuntimeError(f"watcher already used (state={self.state.value})")

        try:
            trigger()
        except (TransportError, ValidationError) as exc:
            self._enter(WatchState.FAILED)
            return self._outcome(exc)
        self._enter(WatchState.TRIGGERED)

        self._enter(WatchState.WAITING)
        wait_s = self.timings.initial_wait_s if initial_wait_s is None else initial_wait_s
        if not self._pause(wait_s):
            return self._outcome()

        while self.polls < self.timings.max_polls:
            self.polls += 1
            self._enter(WatchState.POLLING)
            try:
                if self.refresh(self.polls):
                    break
            except TransportError as exc:
                log.warning("Refresh %d/%d failed: %s", self.polls, self.timings.max_polls, exc)
            if self.polls < self.timings.max_polls and not self._pause(self.timings.poll_interval_s):
                return self._outcome()

        self._enter(WatchState.DONE)
        log.info("Scrape watch finished after %d refresh(es)", self.polls)
        return self._outcome()

    def run_reset(self, webhook: ScrapeWebhook) -> WatchOutcome:
        """Reset the board, wait for the automation, then refresh once."""
        saved = self.timings
        self.timings = WatcherTimings(
            initial_wait_s=saved.reset_wait_s,
            poll_interval_s=saved.poll_interval_s,
            max_polls=1,
            reset_wait_s=saved.reset_wait_s,
        )
        try:
            return self.run(webhook.reset)
        finally:
            self.timings = saved

    def cancel(self) -> None:
        self.token.cancel()
