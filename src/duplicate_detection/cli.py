from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .config import DEFAULT_CONF_PATH, Settings, load_settings, write_default_config
from .database import init_database, save_customers
from .detector import DetectionResult, DuplicateDetector
from .errors import CustomerStoreError
from .io import read_customers
from .model import Customer, CustomerSearchInput
from .report import print_candidates, print_comparison, print_lookup_failed
from .scoring import calculate_similarity_score
from .store import CustomerStore, InMemoryCustomerStore, SqlCustomerStore

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="dupe-check: warn about likely duplicate customers before creating a new one.",
)
console = Console()

_SOURCE_HELP = "Customer export to search (.csv or .vcf)"
_DATABASE_HELP = "SQLAlchemy database URL. Falls back to database_url in the config file."


@app.callback()
def main(
    ctx: typer.Context,
    config: Path = typer.Option(DEFAULT_CONF_PATH, "--config", help="TOML settings file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    ctx.obj = load_settings(config)


# ── Shared helpers ─────────────────────────────────────────────────────────────

def _open_store(settings: Settings, source: Path | None, database: str | None) -> CustomerStore:
    if source is not None:
        try:
            customers = read_customers(source)
        except (OSError, ValueError) as exc:
            console.print(f"[bold red]Cannot read {source}: {exc}[/bold red]")
            raise typer.Exit(code=2)
        return InMemoryCustomerStore(customers)

    url = database or settings.database_url
    if not url:
        console.print("[bold red]Give --source FILE or --database URL.[/bold red]")
        raise typer.Exit(code=2)
    return SqlCustomerStore(_open_database(url))


def _open_database(url: str) -> Engine:
    try:
        return init_database(url)
    except CustomerStoreError as exc:
        print_lookup_failed(str(exc))
        raise typer.Exit(code=1)


def _report(result: DetectionResult, settings: Settings, title: str) -> None:
    if result.retrieval_failed:
        print_lookup_failed(result.error)
        raise typer.Exit(code=1)
    print_candidates(result.candidates, title=title, region=settings.default_region)


# ── `search` command ───────────────────────────────────────────────────────────

@app.command()
def search(
    ctx: typer.Context,
    company: str = typer.Option("", "--company", "-c", help="Company name (partial is fine)"),
    phone: str = typer.Option("", "--phone", "-p", help="Telephone, any format"),
    afm: str = typer.Option("", "--afm", "-a", help="Tax id (AFM)"),
    threshold: int | None = typer.Option(
        None, "--threshold", "-t", min=0, max=100,
        help="Minimum score. Falls back to default_threshold in the config file.",
    ),
    source: Path | None = typer.Option(None, "--source", "-s", help=_SOURCE_HELP),
    database: str | None = typer.Option(None, "--database", "-d", help=_DATABASE_HELP),
) -> None:
    """Rank existing customers that look like the one about to be created."""
    settings: Settings = ctx.obj
    criteria = CustomerSearchInput(company_name=company, telephone=phone, afm=afm)
    if criteria.is_empty():
        console.print("[bold red]Give at least one of --company, --phone, --afm.[/bold red]")
        raise typer.Exit(code=2)

    detector = DuplicateDetector(_open_store(settings, source, database), settings=settings)
    result = asyncio.run(detector.search(criteria, threshold))
    _report(result, settings, "POSSIBLE DUPLICATES")


# ── `phone` command ────────────────────────────────────────────────────────────

@app.command()
def phone(
    ctx: typer.Context,
    number: str = typer.Argument(..., help="Telephone to look up"),
    company: str = typer.Option("", "--company", "-c", help="Company name used for scoring only"),
    source: Path | None = typer.Option(None, "--source", "-s", help=_SOURCE_HELP),
    database: str | None = typer.Option(None, "--database", "-d", help=_DATABASE_HELP),
) -> None:
    """Every customer sharing a phone number, unfiltered and ranked."""
    settings: Settings = ctx.obj
    detector = DuplicateDetector(_open_store(settings, source, database), settings=settings)
    result = asyncio.run(detector.search_exact_phone(number, company or None))
    _report(result, settings, "PHONE MATCHES")


# ── `compare` command ──────────────────────────────────────────────────────────

@app.command()
def compare(
    name: str = typer.Option("", "--name"),
    other_name: str = typer.Option("", "--other-name"),
    phone: str = typer.Option("", "--phone"),
    other_phone: str = typer.Option("", "--other-phone"),
    afm: str = typer.Option("", "--afm"),
    other_afm: str = typer.Option("", "--other-afm"),
) -> None:
    """Score one pair of records field by field."""
    criteria = CustomerSearchInput(company_name=name, telephone=phone, afm=afm)
    other = Customer(id="other", company_name=other_name, telephone=other_phone, afm=other_afm)
    print_comparison(calculate_similarity_score(criteria, other))


# ── `load` command ─────────────────────────────────────────────────────────────

@app.command()
def load(
    ctx: typer.Context,
    source: Path = typer.Option(..., "--source", "-s", help=_SOURCE_HELP),
    database: str | None = typer.Option(None, "--database", "-d", help=_DATABASE_HELP),
) -> None:
    """Copy a customer export into a SQL database."""
    settings: Settings = ctx.obj
    url = database or settings.database_url
    if not url:
        console.print("[bold red]Give --database URL.[/bold red]")
        raise typer.Exit(code=2)
    try:
        customers = read_customers(source)
    except (OSError, ValueError) as exc:
        console.print(f"[bold red]Cannot read {source}: {exc}[/bold red]")
        raise typer.Exit(code=2)
    engine = _open_database(url)
    try:
        count = save_customers(engine, customers)
    except SQLAlchemyError as exc:
        console.print(f"[bold red]Cannot write to {url}: {exc}[/bold red]")
        raise typer.Exit(code=1)
    console.print(f"[bold green]✓ Loaded {count} customer(s) → {url}[/bold green]")


# ── `init-config` command ──────────────────────────────────────────────────────

@app.command("init-config")
def init_config(
    path: Path = typer.Option(DEFAULT_CONF_PATH, "--path", help="Where to write the file"),
) -> None:
    """Write the default settings file (kept if it already exists)."""
    conf = write_default_config(path)
    console.print(f"[dim]Config → {conf}[/dim]")


if __name__ == "__main__":
    app()
