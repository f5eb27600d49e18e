"""
Job Catalog CLI.

Command-line interface for serving the API and operating the catalog.

Usage:
    job-catalog serve --port 8000
    job-catalog search "python" --category IT --lang ka
    job-catalog cache-clear job city
    job-catalog init-db
"""

import asyncio
import csv
import json
import logging
import sys
from enum import Enum
from io import StringIO
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from job_catalog import __version__
from job_catalog.cache.backends import RedisCacheBackend
from job_catalog.cache.config import get_cache_settings
from job_catalog.cache.keys import prefix_pattern
from job_catalog.cache.read_through import build_cache
from job_catalog.core.models import EntityType, Experience, JobType, Page
from job_catalog.localization.views import JobView
from job_catalog.services import JobsService
from job_catalog.storage.config import get_database_settings
from job_catalog.storage.connection import DatabaseConnection
from job_catalog.storage.sql import SqlStore

console = Console()


class OutputFormat(str, Enum):
    """Output format options."""

    JSON = "json"
    JSONL = "jsonl"
    CSV = "csv"
    TABLE = "table"


CSV_FIELDS = ["id", "title", "company", "type", "salaryMin", "salaryMax", "postedAt"]


# =============================================================================
# Helper Functions
# =============================================================================


def format_output(page: Page[JobView], format_type: OutputFormat) -> str:
    """
    Format a result page for output.

    Args:
        page: Search result page
        format_type: Output format

    Returns:
        Formatted string (empty for tables, which print directly)
    """
    data = page.model_dump(mode="json", by_alias=True, exclude_none=True)
    items = data["data"]

    if format_type == OutputFormat.JSON:
        return json.dumps(data, indent=2, ensure_ascii=False)

    elif format_type == OutputFormat.JSONL:
        return "\n".join(json.dumps(item, ensure_ascii=False) for item in items)

    elif format_type == OutputFormat.CSV:
        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(CSV_FIELDS)
        for item in items:
            writer.writerow([item.get(field, "") for field in CSV_FIELDS])
        return output.getvalue()

    _print_table(page)
    return ""


def _print_table(page: Page[JobView]) -> None:
    if not page.data:
        console.print("[yellow]No results found.[/yellow]")
        return

    table = Table(
        title=f"Jobs ({len(page.data)} of {page.total_items})",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Title", style="bold white", max_width=40)
    table.add_column("Company", style="green", max_width=25)
    table.add_column("City", style="blue")
    table.add_column("Type")
    table.add_column("Salary", justify="right")
    table.add_column("Posted", style="dim")

    for job in page.data:
        if job.salary_min is None and job.salary_max is None:
            salary = "-"
        else:
            low = f"{job.salary_min:g}" if job.salary_min is not None else "?"
            high = f"{job.salary_max:g}" if job.salary_max is not None else "?"
            salary = f"{low}-{high}"

        table.add_row(
            str(job.id),
            job.title or "-",
            job.company or "-",
            job.city.name if job.city and job.city.name else "-",
            job.type.value,
            salary,
            job.posted_at.date().isoformat() if job.posted_at else "-",
        )

    console.print(table)

    if page.has_next_page:
        console.print(
            f"\n[dim]Page {page.page} of {page.total_pages}. "
            f"Use --page N to see more results.[/dim]"
        )


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


def _require_database() -> DatabaseConnection:
    settings = get_database_settings()
    if not settings.is_enabled:
        console.print(
            "[red]Error:[/red] Database not configured. "
            "Set DATABASE_URL or DATABASE_PASSWORD."
        )
        sys.exit(1)
    return DatabaseConnection(settings)


# =============================================================================
# CLI Commands
# =============================================================================


@click.group()
@click.version_option(__version__, prog_name="job-catalog")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="warning",
    help="Logging verbosity",
)
def cli(log_level: str) -> None:
    """
    Job Catalog - Multilingual job catalog with cached search.

    \b
    Examples:
        job-catalog serve --port 8000
        job-catalog search "python" --job-type FULL_TIME --lang en
        job-catalog cache-clear job
        job-catalog init-db
    """
    _configure_logging(log_level)


@cli.command()
@click.argument("query", required=False)
@click.option(
    "-c", "--category", "categories", multiple=True, help="Category name (repeatable)"
)
@click.option(
    "-t",
    "--job-type",
    "job_types",
    multiple=True,
    type=click.Choice([t.value for t in JobType], case_sensitive=False),
    help="Employment type (repeatable)",
)
@click.option(
    "-e",
    "--experience",
    "experience",
    multiple=True,
    type=click.Choice([e.value for e in Experience], case_sensitive=False),
    help="Experience level (repeatable)",
)
@click.option("--country-id", type=int, help="Country ID")
@click.option("--city-id", type=int, help="City ID")
@click.option("--remote/--on-site", default=None, help="Remote jobs only / on-site only")
@click.option("--salary-min", type=float, help="Minimum salary")
@click.option("--salary-max", type=float, help="Maximum salary")
@click.option("--page", type=int, default=1, help="Page number (1-indexed)")
@click.option("--limit", type=int, default=10, help="Results per page (max 100)")
@click.option(
    "--sort",
    type=click.Choice(["postedAt", "salaryMin", "salaryMax", "createdAt"]),
    default="postedAt",
    help="Sort field",
)
@click.option(
    "--order", type=click.Choice(["asc", "desc"]), default="desc", help="Sort order"
)
@click.option("--lang", default="en", help="Response language")
@click.option(
    "-f",
    "--format",
    "output_format",
    type=click.Choice([f.value for f in OutputFormat]),
    default="table",
    help="Output format",
)
def search(
    query: str | None,
    categories: tuple[str, ...],
    job_types: tuple[str, ...],
    experience: tuple[str, ...],
    country_id: int | None,
    city_id: int | None,
    remote: bool | None,
    salary_min: float | None,
    salary_max: float | None,
    page: int,
    limit: int,
    sort: str,
    order: str,
    lang: str,
    output_format: str,
) -> None:
    """
    Search active jobs in the configured database.

    \b
    Examples:
        job-catalog search "python"
        job-catalog search -c IT -t FULL_TIME -t CONTRACT --lang ka
        job-catalog search --remote --salary-min 3000 -f json
    """
    params: dict[str, Any] = {
        "search": query,
        "category": list(categories),
        "jobTypes": list(job_types),
        "experience": list(experience),
        "countryId": country_id,
        "cityId": city_id,
        "remote": remote,
        "salaryMin": salary_min,
        "salaryMax": salary_max,
        "page": page,
        "limit": limit,
        "sort": sort,
        "order": order,
        "lang": lang,
    }
    connection = _require_database()

    async def _search() -> Page[JobView]:
        await connection.connect()
        cache = build_cache()
        try:
            service = JobsService(SqlStore(connection), cache)
            return await service.search(params)
        finally:
            await cache.close()
            await connection.disconnect()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(description="Searching...", total=None)
        try:
            result = asyncio.run(_search())
        except Exception as e:
            console.print(f"[red]Error:[/red] {e}")
            sys.exit(1)

    fmt = OutputFormat(output_format)
    output = format_output(result, fmt)
    if output:
        click.echo(output)


@cli.command("cache-clear")
@click.argument("prefixes", nargs=-1)
def cache_clear(prefixes: tuple[str, ...]) -> None:
    """
    Purge cache namespaces from the shared Redis mirror.

    Defaults to every entity namespace. In-process caches of running API
    servers are not reachable from here and expire within their TTL.

    \b
    Examples:
        job-catalog cache-clear
        job-catalog cache-clear job country
    """
    settings = get_cache_settings()
    if not settings.is_mirror_enabled:
        console.print(
            "[yellow]No Redis mirror configured (REDIS_URL / REDIS_HOST); "
            "nothing to clear.[/yellow]"
        )
        return

    targets = prefixes or tuple(t.value for t in EntityType)

    async def _clear() -> dict[str, int]:
        mirror = RedisCacheBackend.from_url(
            settings.redis_url_effective, timeout=settings.redis_timeout
        )
        counts: dict[str, int] = {}
        try:
            for prefix in targets:
                keys = await mirror.keys(prefix_pattern(prefix))
                counts[prefix] = await mirror.delete(keys)
        finally:
            await mirror.close()
        return counts

    try:
        counts = asyncio.run(_clear())
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    table = Table(title="Cleared Cache Keys", show_header=True, header_style="bold cyan")
    table.add_column("Prefix", style="bold white")
    table.add_column("Keys", justify="right")
    for prefix, count in counts.items():
        table.add_row(f"{prefix}*", str(count))
    console.print(table)


@cli.command("init-db")
def init_db() -> None:
    """Create catalog tables and indexes (idempotent)."""
    connection = _require_database()

    async def _init() -> None:
        await connection.connect()
        await connection.disconnect()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(description="Running migrations...", total=None)
        try:
            asyncio.run(_init())
        except Exception as e:
            console.print(f"[red]Error:[/red] {e}")
            sys.exit(1)

    console.print("[green]Database schema is up to date.[/green]")


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8000, type=int, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
def serve(host: str, port: int, reload: bool) -> None:
    """Start the REST API server."""
    import uvicorn

    console.print(f"[green]Starting API server at http://{host}:{port}[/green]")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    uvicorn.run(
        "job_catalog.api.main:app",
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    cli()
