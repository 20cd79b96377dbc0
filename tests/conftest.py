from __future__ import annotations

import os

os.environ.setdefault("JOBBOARD_LOG_FILE", "0")

import pytest

from jobboard.models import JobRecord


@pytest.fixture(autouse=True)
def no_retry_sleep(monkeypatch):
    monkeypatch.setattr("jobboard.retry.time.sleep", lambda _s: None)


@pytest.fixture
def job():
    def _make(id="rec1", title="Cariste", location="Liège", link="https://www.randstad.be/jobs/1", **kw):
        return JobRecord(id=id, title=title, location=location, link=link, **kw)
    return _make
