"""Load settings from config/settings.yaml and the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from jobboard.log import get_logger

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "settings.yaml"


@dataclass(frozen=True)
class AirtableBase:
    base_id: str
    table_id: str


@dataclass(frozen=True)
class WatcherTimings:
    initial_wait_s: float = 3.0
    poll_interval_s: float = 5.0
    max_polls: int = 12
    reset_wait_s: float = 7.0


@dataclass
class Settings:
    airtable_api_key: str = ""
    airtable_bases: dict[str, AirtableBase] = field(default_factory=dict)
    default_base: str = "logistics_liege"
    supabase_url: str = ""
    supabase_anon_key: str = ""
    jobs_table: str = "job_results"
    favorites_table: str = "favorites"
    filters_table: str = "user_filters"
    webhook_url: str = ""
    default_radius_km: int = 25
    watcher: WatcherTimings = field(default_factory=WatcherTimings)
    request_timeout_s: float = 15.0


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        log.debug("No settings file at %s, using defaults", path)
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data or {}


def load_settings(path: Path | None = None) -> Settings:
    """Merge the YAML file with secrets and overrides from the environment."""
    data = _read_yaml(path or SETTINGS_PATH)

    airtable = data.get("airtable", {}) or {}
    bases = {
        name: AirtableBase(base_id=str(b["base_id"]), table_id=str(b["table_id"]))
        for name, b in (airtable.get("bases") or {}).items()
    }

    supabase = data.get("supabase", {}) or {}
    tables = supabase.get("tables", {}) or {}
    scrape = data.get("scrape", {}) or {}
    watcher = scrape.get("watcher", {}) or {}

    return Settings(
        airtable_api_key=get_env("AIRTABLE_API_KEY"),
        airtable_bases=bases,
        default_base=airtable.get("default_base", "logistics_liege"),
        supabase_url=get_env("SUPABASE_URL", supabase.get("url", "")),
        supabase_anon_key=get_env("SUPABASE_ANON_KEY"),
        jobs_table=tables.get("jobs", "job_results"),
        favorites_table=tables.get("favorites", "favorites"),
        filters_table=tables.get("filters", "user_filters"),
        webhook_url=get_env("SCRAPE_WEBHOOK_URL", scrape.get("webhook_url", "")),
        default_radius_km=int(scrape.get("default_radius_km", 25)),
        watcher=WatcherTimings(
            initial_wait_s=float(watcher.get("initial_wait_s", 3.0)),
            poll_interval_s=float(watcher.get("poll_interval_s", 5.0)),
            max_polls=int(watcher.get("max_polls", 12)),
            reset_wait_s=float(watcher.get("reset_wait_s", 7.0)),
        ),
        request_timeout_s=float(data.get("request_timeout_s", 15.0)),
    )
