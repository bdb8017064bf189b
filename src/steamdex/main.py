from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, NoReturn, Optional

import typer

from .cache.detail_cache import DetailCache
from .catalog.models import Family
from .catalog.repository import CatalogRepository
from .catalog.seed import install_snapshot, load_bundled_snapshot, seed_if_absent
from .config import SteamdexSettings, get_settings
from .envelope import DataSource, Envelope, wrap_exception, wrap_ok
from .errors import SteamdexError
from .sdk.client import StoreClient, WebApiClient
from .services.details import DetailService
from .services.library import LibraryService
from .services.lookup import CatalogLookupService
from .shared.logging import setup_logging

cli = typer.Typer(help="Local Steam catalog lookups and cached app details", no_args_is_help=True)
catalog_cli = typer.Typer(help="Manage the local catalog database", no_args_is_help=True)
user_cli = typer.Typer(help="Web API lookups for a user", no_args_is_help=True)


class OutputFormat(str, Enum):
    human = "human"
    json = "json"


Renderer = Callable[[Dict[str, Any]], None]


def _settings(ctx: typer.Context) -> SteamdexSettings:
    return ctx.obj["settings"]


def _as_json(ctx: typer.Context) -> bool:
    return ctx.obj["format"] is OutputFormat.json


def _fail(ctx: typer.Context, envelope: Envelope) -> NoReturn:
    if _as_json(ctx):
        typer.echo(envelope.model_dump_json(indent=2), err=True)
    else:
        typer.echo(f"Error [{envelope.error.kind}]: {envelope.error.message}", err=True)
    raise typer.Exit(code=1)


def _emit(ctx: typer.Context, envelope: Envelope, human: Renderer) -> None:
    if not envelope.ok:
        _fail(ctx, envelope)
    if _as_json(ctx):
        typer.echo(envelope.model_dump_json(indent=2))
    else:
        human(envelope.data or {})


def _ensure_catalog(ctx: typer.Context) -> None:
    """Install the bundled catalog on first run; a broken seed stops the command.

    Called by every command, including ``app`` and ``user owned`` which never
    read the catalog, so whichever command runs first leaves an installed
    catalog behind and a corrupt seed is reported as STORAGE_FAULT before
    any remote call is made.
    """
    try:
        seed_if_absent(_settings(ctx).catalog_db)
    except SteamdexError as exc:
        _fail(ctx, wrap_exception(exc, DataSource.LOCAL_DB))


def _open_catalog(ctx: typer.Context) -> CatalogRepository:
    _ensure_catalog(ctx)
    settings = _settings(ctx)
    try:
        return CatalogRepository(settings.catalog_db, max_limit=settings.max_limit)
    except SteamdexError as exc:
        _fail(ctx, wrap_exception(exc, DataSource.LOCAL_DB))


def _limit(ctx: typer.Context, limit: Optional[int]) -> int:
    return _settings(ctx).default_limit if limit is None else limit


def _render_records(data: Dict[str, Any]) -> None:
    header = data["family"]
    if "query" in data:
        header = f"{header} find '{data['query']}'"
    typer.echo(f"{header} ({len(data['items'])})")
    for item in data["items"]:
        columns = [str(item["id"]), item["name"]]
        if "rank" in item:
            columns.append(str(item["rank"]))
        typer.echo("\t".join(columns))


def _render_app(data: Dict[str, Any]) -> None:
    app = data["app"]
    typer.echo(f"{app['name']} ({app['appid']})")
    if app.get("short_description"):
        typer.echo(app["short_description"])
    typer.echo("genres: " + ", ".join(label["name"] for label in app["genres"]))
    typer.echo("categories: " + ", ".join(label["name"] for label in app["categories"]))


def _render_owned(data: Dict[str, Any]) -> None:
    typer.echo(f"owned games for {data['steamid']} ({len(data['items'])})")
    for game in data["items"]:
        typer.echo(f"{game['appid']}\t{game['name'] or 'Unknown'}\t{game['playtime_forever_min']}m")


def _render_info(data: Dict[str, Any]) -> None:
    catalog = data["catalog"]
    typer.echo(f"catalog: {catalog['path']}")
    typer.echo(f"checksum: {catalog['checksum']}")
    for family, count in catalog["counts"].items():
        typer.echo(f"{family}: {count}")


@cli.callback()
def main(
    ctx: typer.Context,
    output_format: OutputFormat = typer.Option(OutputFormat.human, "--format", help="Output format"),
    json_output: bool = typer.Option(False, "--json", help="Shortcut for --format json"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level (default from STEAMDEX_LOG_LEVEL)"),
) -> None:
    settings = get_settings()
    setup_logging(log_level or settings.log_level)
    ctx.obj = {
        "settings": settings,
        "format": OutputFormat.json if json_output else output_format,
    }


def _family_cli(family: Family) -> typer.Typer:
    family_cli = typer.Typer(help=f"List and search {family.plural}", no_args_is_help=True)

    @family_cli.command("list")
    def list_records(
        ctx: typer.Context,
        limit: Optional[int] = typer.Option(None, "--limit", help="Page size (max 100)"),
        offset: int = typer.Option(0, "--offset", help="Records to skip"),
    ) -> None:
        """List records ordered by id."""
        with _open_catalog(ctx) as repository:
            envelope = CatalogLookupService(repository).list_family(
                family, _limit(ctx, limit), offset
            )
        _emit(ctx, envelope, _render_records)

    @family_cli.command("find")
    def find_records(
        ctx: typer.Context,
        query: str = typer.Argument(..., help="Text to match against names"),
        limit: Optional[int] = typer.Option(None, "--limit", help="Page size (max 100)"),
        offset: int = typer.Option(0, "--offset", help="Records to skip"),
    ) -> None:
        """Find records whose names match QUERY, best match first."""
        with _open_catalog(ctx) as repository:
            envelope = CatalogLookupService(repository).find(
                family, query, _limit(ctx, limit), offset
            )
        _emit(ctx, envelope, _render_records)

    return family_cli


for _family in Family:
    cli.add_typer(_family_cli(_family), name=_family.plural)


@cli.command("app")
def app_details(
    ctx: typer.Context,
    appid: int = typer.Argument(..., help="Store app id"),
    ttl_sec: Optional[int] = typer.Option(None, "--ttl-sec", help="Accept cached details younger than this"),
    refresh: bool = typer.Option(False, "--refresh", help="Ignore the cache and fetch again"),
) -> None:
    """Show store details for one app, cached locally."""
    settings = _settings(ctx)
    _ensure_catalog(ctx)
    client = StoreClient(settings.store_url, language=settings.language, timeout=settings.http_timeout)
    try:
        with DetailCache(settings.cache_db, client.fetch_appdetails) as cache:
            envelope = DetailService(cache, settings.default_ttl).get(appid, ttl_sec, refresh)
    except SteamdexError as exc:
        envelope = wrap_exception(exc, DataSource.REMOTE_STORE)
    _emit(ctx, envelope, _render_app)


@user_cli.command("owned")
def user_owned(
    ctx: typer.Context,
    steamid: Optional[str] = typer.Option(None, "--steamid", help="64-bit Steam id"),
    vanity: Optional[str] = typer.Option(None, "--vanity", help="Custom profile URL name"),
    limit: Optional[int] = typer.Option(None, "--limit", help="Page size (max 100)"),
    offset: int = typer.Option(0, "--offset", help="Games to skip"),
) -> None:
    """List games owned by a user, most played first."""
    settings = _settings(ctx)
    _ensure_catalog(ctx)
    client = WebApiClient(settings.webapi_url, api_key=settings.api_key, timeout=settings.http_timeout)
    envelope = LibraryService(client, settings.max_limit).owned(
        steamid=steamid,
        vanity=vanity,
        limit=_limit(ctx, limit),
        offset=offset,
    )
    _emit(ctx, envelope, _render_owned)


@catalog_cli.command("info")
def catalog_info(ctx: typer.Context) -> None:
    """Show where the catalog lives and what it holds."""
    with _open_catalog(ctx) as repository:
        envelope = wrap_ok({"catalog": repository.info()}, source=DataSource.LOCAL_DB)
    _emit(ctx, envelope, _render_info)


@catalog_cli.command("reseed")
def catalog_reseed(ctx: typer.Context) -> None:
    """Reinstall the catalog from the bundled seed snapshot."""
    settings = _settings(ctx)
    try:
        install_snapshot(settings.catalog_db, load_bundled_snapshot())
        with CatalogRepository(settings.catalog_db, max_limit=settings.max_limit) as repository:
            envelope = wrap_ok({"catalog": repository.info()}, source=DataSource.LOCAL_DB)
    except SteamdexError as exc:
        envelope = wrap_exception(exc, DataSource.LOCAL_DB)
    _emit(ctx, envelope, _render_info)


cli.add_typer(catalog_cli, name="catalog")
cli.add_typer(user_cli, name="user")


if __name__ == "__main__":
    cli()
