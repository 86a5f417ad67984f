"""
Main CLI entry point for datagate.

Provides commands for serving the REST API, checking backend health and
querying tables from the terminal.
"""

import asyncio
import logging
import sys
from typing import Optional

import click

from datagate import __version__
from datagate.api import PROVIDERS, create_adapter, create_service, query as run_query
from datagate.cli.output import (
    print_error,
    print_health,
    print_info,
    print_json,
    print_records_table,
)
from datagate.core.exceptions import DatagateError
from datagate.core.query import parse_filters

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def run_async(coro):
    """Run an async coroutine to completion."""
    return asyncio.run(coro)


def _adapter_from_context(ctx: click.Context):
    obj = ctx.obj
    return create_adapter(
        obj["provider"],
        url=obj.get("supabase_url"),
        key=obj.get("supabase_key"),
    )


@click.group()
@click.version_option(version=__version__, prog_name="datagate")
@click.option(
    "--provider",
    envvar="DATAGATE_PROVIDER",
    type=click.Choice(PROVIDERS),
    default="memory",
    show_default=True,
    help="Backend adapter to use.",
)
@click.option(
    "--supabase-url",
    envvar="SUPABASE_URL",
    help="Supabase project URL.",
)
@click.option(
    "--supabase-key",
    envvar="SUPABASE_KEY",
    help="Supabase service role or anon key.",
)
@click.option(
    "--log-level",
    envvar="DATAGATE_LOG_LEVEL",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    provider: str,
    supabase_url: Optional[str],
    supabase_key: Optional[str],
    log_level: str,
) -> None:
    """datagate - a generic REST API over pluggable data backends.

    Translates HTTP requests into CRUD calls against an in-memory store or
    a Supabase project, with validation, caching and rate limiting.
    """
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["provider"] = provider
    ctx.obj["supabase_url"] = supabase_url
    ctx.obj["supabase_key"] = supabase_key


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Interface to bind.")
@click.option(
    "--port",
    envvar="DATAGATE_PORT",
    type=int,
    default=8080,
    show_default=True,
    help="Port to listen on.",
)
@click.option(
    "--cache-ttl",
    envvar="DATAGATE_CACHE_TTL",
    type=click.FloatRange(min=0),
    default=0,
    show_default=True,
    help="Seconds single-record reads stay cached (0 disables).",
)
@click.option(
    "--allowed-table",
    "allowed_tables",
    multiple=True,
    help="Restrict access to this table. Repeatable.",
)
@click.option(
    "--cors-origin",
    "cors_origins",
    multiple=True,
    help="Allowed CORS origin. Repeatable. Defaults to any origin.",
)
@click.option("--rate-limit", type=click.IntRange(min=1), default=60, show_default=True,
              help="Requests per client per window.")
@click.option("--rate-limit-window", type=click.FloatRange(min=1), default=60.0, show_default=True,
              help="Rate limit window in seconds.")
@click.pass_context
def serve(
    ctx: click.Context,
    host: str,
    port: int,
    cache_ttl: float,
    allowed_tables: tuple[str, ...],
    cors_origins: tuple[str, ...],
    rate_limit: int,
    rate_limit_window: float,
) -> None:
    """Run the REST API server.

    Resources are served under /api/v1.

    \b
    Examples:
        datagate serve                          # In-memory backend on :8080
        datagate --provider supabase serve      # Uses SUPABASE_URL / SUPABASE_KEY
        datagate serve --cache-ttl 30 --allowed-table users
    """
    from aiohttp import web

    from datagate.server.app import AppConfig, create_app

    try:
        adapter = _adapter_from_context(ctx)
    except DatagateError as e:
        print_error(str(e))
        sys.exit(1)

    config = AppConfig(
        adapter=adapter,
        cors_origins=list(cors_origins) or ["*"],
        rate_limit=rate_limit,
        rate_limit_window=rate_limit_window,
        cache_ttl=cache_ttl,
        allowed_tables=list(allowed_tables) or None,
    )

    print_info(f"Serving {adapter.provider} backend on http://{host}:{port}/api/v1")
    web.run_app(create_app(config), host=host, port=port, print=None)


@cli.command()
@click.pass_context
def health(ctx: click.Context) -> None:
    """Check that the configured backend is reachable.

    Exits non-zero if the backend is down.
    """

    async def check():
        async with _adapter_from_context(ctx) as adapter:
            return adapter.provider, await create_service(adapter).health_check()

    try:
        provider, status = run_async(check())
    except DatagateError as e:
        print_error(str(e))
        sys.exit(1)

    print_health(provider, status)
    if not status.ok:
        sys.exit(1)


@cli.command()
@click.argument("table")
@click.option("--filter", "-f", "filters", multiple=True, help="Filter as field:operator:value.")
@click.option("--order-by", "-o", "order_by", multiple=True, help="Ordering as field[:desc].")
@click.option("--limit", type=click.IntRange(min=0), help="Page size (default 50).")
@click.option("--offset", type=click.IntRange(min=0), help="Records to skip.")
@click.option("--select", help="Comma-separated columns to return.")
@click.option(
    "--format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format.",
)
@click.pass_context
def query(
    ctx: click.Context,
    table: str,
    filters: tuple[str, ...],
    order_by: tuple[str, ...],
    limit: Optional[int],
    offset: Optional[int],
    select: Optional[str],
    format: str,
) -> None:
    """Query records in TABLE.

    The memory provider starts empty on every invocation, so this is only
    useful against a persistent backend.

    \b
    Examples:
        datagate --provider supabase query users -f age:gte:18 -o name
        datagate --provider supabase query users -f 'role:in:["admin","owner"]' --format json
    """

    async def fetch():
        async with _adapter_from_context(ctx) as adapter:
            return await run_query(
                create_service(adapter),
                table,
                filters=filters,
                order_by=order_by,
                limit=limit,
                offset=offset,
                select=select,
            )

    try:
        result = run_async(fetch())
    except DatagateError as e:
        print_error(f"Query failed: {e}")
        sys.exit(1)

    if format == "json":
        print_json(result.to_dict())
    else:
        print_records_table(table, result)


@cli.command()
@click.argument("table")
@click.option("--filter", "-f", "filters", multiple=True, help="Filter as field:operator:value.")
@click.pass_context
def count(ctx: click.Context, table: str, filters: tuple[str, ...]) -> None:
    """Count records in TABLE matching the filters.

    Like query, this reads an empty store under the memory provider.

    \b
    Example:
        datagate --provider supabase count users -f role:eq:admin
    """

    async def fetch():
        async with _adapter_from_context(ctx) as adapter:
            return await create_service(adapter).count(table, parse_filters(list(filters)))

    try:
        total = run_async(fetch())
    except DatagateError as e:
        print_error(f"Count failed: {e}")
        sys.exit(1)

    click.echo(total)


if __name__ == "__main__":
    cli()
