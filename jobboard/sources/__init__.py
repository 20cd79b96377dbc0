from .airtable import AirtableSource
from .base import RecordSource
from .supabase import SupabaseJobSource

from jobboard.config import Settings
from jobboard.log import get_logger
from jobboard.postgrest import PostgrestClient

log = get_logger(__name__)

__all__ = [
    "RecordSource", "AirtableSource", "SupabaseJobSource",
    "get_source",
]


def get_source(
    settings: Settings,
    name: str = "airtable",
    *,
    base: str | None = None,
    search_id: str | None = None,
    title_query: str | None = None,
) -> RecordSource:
    if name == "airtable":
        base_key = base or settings.default_base
        if base_key not in settings.airtable_bases:
            raise KeyError(
                f"unknown Airtable base {base_key!r}; configured: "
                + ", ".join(sorted(settings.airtable_bases))
            )
        if not settings.airtable_api_key:
            log.warning("AIRTABLE_API_KEY is not set; requests will be rejected")
        log.info("Using source: Airtable (%s)", base_key)
        return AirtableSource(
            settings.airtable_api_key,
            settings.airtable_bases[base_key],
            search_id=search_id,
            timeout_s=settings.request_timeout_s,
        )

    if name == "supabase":
        client = PostgrestClient(
            settings.supabase_url,
            settings.supabase_anon_key,
            timeout_s=settings.request_timeout_s,
        )
        log.info("Using source: job_results (search_id=%s)", search_id)
        return SupabaseJobSource(
            client,
            search_id=search_id,
            title_query=title_query,
            table=settings.jobs_table,
        )

    raise KeyError(f"unknown source {name!r}; expected 'airtable' or 'supabase'")
