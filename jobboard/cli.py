"""Command-line front end for the job board.

Examples:
    python run_board.py list --exclude intérim --sort agency_asc
    python run_board.py list --source supabase --search-id search_1736500000000
    python run_board.py scrape --job "cariste" --postal-code 4000 --radius 25
    python run_board.py favorites add --title "Cariste" --link https://www.randstad.be/jobs/1
    python run_board.py filters add "nuit"
"""
from __future__ import annotations

import argparse
import sys
from typing import Sequence

from jobboard.agencies import resolve_domain
from jobboard.config import Settings, get_env, load_settings
from jobboard.dates import normalize_date
from jobboard.errors import JobBoardError, NotAuthenticatedError, TransportError, ValidationError
from jobboard.favorites import FavoritesStore, PostgrestFavoritesBackend
from jobboard.feed import RecordFeed, merge_records
from jobboard.log import get_logger
from jobboard.models import FilterState, JobRecord
from jobboard.pipeline import apply_filters, parse_sort_order
from jobboard.postgrest import PostgrestClient
from jobboard.preferences import UserFiltersStore
from jobboard.scrape import ScrapeRequest, ScrapeWatcher, ScrapeWebhook, WatchState
from jobboard.sources import get_source

log = get_logger(__name__)


def _client(settings: Settings) -> PostgrestClient:
    return PostgrestClient(
        settings.supabase_url,
        settings.supabase_anon_key,
        access_token=get_env("JOBBOARD_ACCESS_TOKEN") or None,
        timeout_s=settings.request_timeout_s,
    )


def _user(args: argparse.Namespace) -> str | None:
    return args.user or get_env("JOBBOARD_USER_ID") or None


def _print_records(records: list[JobRecord], total_fetched: int) -> None:
    for r in records:
        print(
            f"{normalize_date(r.publication_date_raw):<12} "
            f"{resolve_domain(r.link):<18} "
            f"{r.title}  |  {r.location or 'Non spécifié'}  |  {r.link}"
        )
    print(f"\n{len(records)} offre(s) affichée(s) sur {total_fetched} chargée(s)")


# ── Commands ─────────────────────────────────────────────────────────────


def cmd_list(args: argparse.Namespace, settings: Settings) -> int:
    state = FilterState(
        search_query=args.query or "",
        excluded_words=frozenset(args.exclude or []),
        sort_order=parse_sort_order(args.sort),
    )

    batches = []
    failures = 0
    for name in args.source or ["airtable"]:
        feed = RecordFeed(get_source(
            settings,
            name,
            base=args.base,
            search_id=args.search_id,
            title_query=args.title_like,
        ))
        try:
            feed.load_all(max_pages=args.max_pages)
        except TransportError as exc:
            failures += 1
            print(f"Chargement incomplet ({name}, {feed.pages_loaded} page(s) lue(s)) : {exc}", file=sys.stderr)
        batches.append(feed.records)
    records = merge_records(*batches)

    user_id = _user(args)
    if user_id and not args.no_defaults and settings.supabase_url:
        try:
            state = UserFiltersStore(_client(settings), settings.filters_table).initial_state(user_id, state)
        except TransportError as exc:
            print(f"Filtres enregistrés indisponibles : {exc}", file=sys.stderr)

    shown = apply_filters(records, state)
    if args.limit:
        shown = shown[: args.limit]
    _print_records(shown, len(records))
    return 1 if failures and not records else 0


def cmd_scrape(args: argparse.Namespace, settings: Settings) -> int:
    webhook = ScrapeWebhook(settings.webhook_url, timeout_s=settings.request_timeout_s)
    search_ids: list[str] = []
    feed_holder: dict[str, RecordFeed] = {}

    if args.query:
        # Shared board: results land in the default Airtable base.
        def trigger() -> None:
            webhook.trigger_query(args.query)
            search_ids.append(args.query)

        def open_feed() -> RecordFeed:
            return RecordFeed(get_source(settings, "airtable"))
    else:
        if not (args.job and args.postal_code):
            raise ValidationError("job_name", "--job et --postal-code sont requis (ou --query)")
        request = ScrapeRequest(args.job, args.postal_code, args.radius or settings.default_radius_km).validate()

        def trigger() -> None:
            search_ids.append(webhook.trigger(request))

        def open_feed() -> RecordFeed:
            return RecordFeed(get_source(settings, "supabase", search_id=search_ids[-1]))

    def refresh(poll: int) -> bool:
        feed = feed_holder.get("feed")
        if feed is None:
            feed = feed_holder["feed"] = open_feed()
        feed.refresh()
        print(f"  [{poll}/{settings.watcher.max_polls}] {len(feed.records)} offre(s)")
        return False

    watcher = ScrapeWatcher(refresh, settings.watcher)
    try:
        outcome = watcher.run(trigger)
    except KeyboardInterrupt:
        watcher.cancel()
        print("Interrompu.")
        return 130

    if outcome.state is WatchState.FAILED:
        raise outcome.error or TransportError("scrape trigger failed")
    print(f"Recherche {search_ids[-1]} : {outcome.state.value} après {outcome.polls} actualisation(s)")
    return 0


def cmd_reset(args: argparse.Namespace, settings: Settings) -> int:
    if not args.yes:
        print("Réinitialisation annulée : relancez avec --yes pour confirmer.", file=sys.stderr)
        return 2
    webhook = ScrapeWebhook(settings.webhook_url, timeout_s=settings.request_timeout_s)
    remaining: list[int] = []

    def refresh(_poll: int) -> bool:
        feed = RecordFeed(get_source(settings, "airtable"))
        remaining.append(len(feed.refresh()))
        return True

    watcher = ScrapeWatcher(refresh, settings.watcher)
    outcome = watcher.run_reset(webhook)
    if outcome.state is WatchState.FAILED:
        raise outcome.error or TransportError("reset failed")
    if remaining:
        print(f"Réinitialisation terminée : {remaining[-1]} offre(s) restante(s).")
    else:
        print("Réinitialisation demandée ; le tableau n'a pas pu être relu.")
    return 0


def cmd_favorites(args: argparse.Namespace, settings: Settings) -> int:
    user_id = _user(args)
    store = FavoritesStore(PostgrestFavoritesBackend(_client(settings), settings.favorites_table))

    if args.action == "add":
        store.add(user_id, JobRecord(id="", title=args.title, location=args.location, link=args.link))
        print("Offre ajoutée aux favoris")
    elif args.action == "remove":
        store.remove(user_id, args.link)
        print("Offre retirée des favoris")
    else:
        if not user_id:
            raise NotAuthenticatedError("Must be logged in to see favorites")
        for fav in store.list(user_id):
            print(f"{resolve_domain(fav.job_link):<18} {fav.job_title}  |  {fav.job_location or '-'}  |  {fav.job_link}")
    return 0


def cmd_filters(args: argparse.Namespace, settings: Settings) -> int:
    user_id = _user(args)
    if not user_id:
        raise NotAuthenticatedError("Must be logged in to manage filters")
    store = UserFiltersStore(_client(settings), settings.filters_table)

    if args.action == "add":
        words = store.add_word(user_id, args.word)
    elif args.action == "remove":
        words = store.remove_word(user_id, args.word)
    else:
        words = store.get(user_id)
    print(", ".join(words) if words else "(aucun mot exclu)")
    return 0


# ── Parser ───────────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="jobboard", description="Interim job board: list, filter and scrape job offers.")
    p.add_argument("--user", default=None, help="User id (defaults to JOBBOARD_USER_ID).")
    sub = p.add_subparsers(dest="command", required=True)

    ls = sub.add_parser("list", help="Fetch, filter and print job offers.")
    ls.add_argument("--source", choices=("airtable", "supabase"), action="append",
                    help="Source to read (repeatable; records are merged). Default: airtable.")
    ls.add_argument("--base", default=None, help="Airtable base name from settings.yaml.")
    ls.add_argument("--search-id", default=None)
    ls.add_argument("--title-like", default=None, help="Server-side title filter (supabase only).")
    ls.add_argument("--query", "-q", default="", help="Search in title or location.")
    ls.add_argument("--exclude", "-x", action="append", help="Word to exclude (repeatable).")
    ls.add_argument("--sort", default=None, help="title_asc, title_desc, agency_asc or agency_desc.")
    ls.add_argument("--max-pages", type=int, default=50)
    ls.add_argument("--limit", type=int, default=0)
    ls.add_argument("--no-defaults", action="store_true", help="Ignore the user's saved exclusion words.")
    ls.set_defaults(func=cmd_list)

    sc = sub.add_parser("scrape", help="Start a custom search and watch for results.")
    sc.add_argument("--job", default=None)
    sc.add_argument("--postal-code", default=None)
    sc.add_argument("--query", default=None, help="Free-text scrape of the shared board instead of a custom search.")
    sc.add_argument("--radius", type=int, default=None)
    sc.set_defaults(func=cmd_scrape)

    rs = sub.add_parser("reset", help="Wipe the shared board (destructive).")
    rs.add_argument("--yes", action="store_true")
    rs.set_defaults(func=cmd_reset)

    fav = sub.add_parser("favorites", help="Manage saved offers.")
    fav_sub = fav.add_subparsers(dest="action", required=True)
    fav_sub.add_parser("list")
    fa = fav_sub.add_parser("add")
    fa.add_argument("--title", required=True)
    fa.add_argument("--link", required=True)
    fa.add_argument("--location", default=None)
    fr = fav_sub.add_parser("remove")
    fr.add_argument("--link", required=True)
    fav.set_defaults(func=cmd_favorites)

    flt = sub.add_parser("filters", help="Manage default exclusion words.")
    flt_sub = flt.add_subparsers(dest="action", required=True)
    flt_sub.add_parser("show")
    for action in ("add", "remove"):
        a = flt_sub.add_parser(action)
        a.add_argument("word")
    flt.set_defaults(func=cmd_filters)

    return p


def main(argv: Sequence[str] | None = None, settings: Settings | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings or load_settings()
    try:
        return args.func(args, settings)
    except NotAuthenticatedError as exc:
        print(f"Connexion requise : {exc}", file=sys.stderr)
        return 1
    except ValidationError as exc:
        print(f"Saisie invalide ({exc.field}) : {exc.message}", file=sys.stderr)
        return 2
    except TransportError as exc:
        print(f"Erreur : {exc}", file=sys.stderr)
        return 1
    except (JobBoardError, KeyError, ValueError) as exc:
        log.error("%s failed: %s", args.command, exc)
        print(f"Erreur : {exc}", file=sys.stderr)
        return 1
