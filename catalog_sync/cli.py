"""Command-line interface for Catalog Sync."""

import asyncio
import random
import sys

import click
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from .config import settings  # noqa: E402
from .database import create_db_engine, create_session_factory, drop_db, init_db, session_scope  # noqa: E402
from .exceptions import CatalogSyncError  # noqa: E402
from .models import SupplierSource  # noqa: E402
from .schemas import IngestionReport, SyncSummary  # noqa: E402
from .services import (  # noqa: E402
    IngestionService,
    ProductService,
    QuoteService,
    QuoteSimulationEngine,
)
from .utils.logger import logger  # noqa: E402

SUPPLIERS = [source.value for source in SupplierSource]


class CliState:
    """Lazily built engine and session factory shared by commands."""

    def __init__(self, database_url=None):
        self.database_url = database_url
        self._engine = None
        self._session_factory = None

    @property
    def engine(self):
        if self._engine is None:
            self._engine = create_db_engine(self.database_url)
        return self._engine

    @property
    def session_factory(self):
        if self._session_factory is None:
            self._session_factory = create_session_factory(self.engine)
        return self._session_factory


def fail(message):
    """Print an error and exit with status 1."""
    click.echo(f"❌ Error: {message}", err=True)
    sys.exit(1)


def echo_report(report: IngestionReport):
    """Print one supplier's ingestion report."""
    if report.failed:
        click.echo(f"❌ {report.source}: {report.feed_error}")
        return

    click.echo(
        f"✅ {report.source}: {report.saved_count} saved "
        f"({report.created_count} new, {report.updated_count} updated), "
        f"{report.skipped_count} skipped, {report.error_count} errors"
    )
    for detail in report.details:
        click.echo(f"   - {detail.code} [{detail.outcome.value}]: {detail.message}")


def echo_summary(summary: SyncSummary):
    """Print a multi-supplier sync summary."""
    for report in summary.per_supplier.values():
        echo_report(report)
    click.echo(f"\nImported: {summary.imported_count} | Errors: {summary.error_count}")


@click.group()
@click.option("--database-url", envvar="DATABASE_URL", default=None, help="SQLAlchemy database URL")
@click.pass_context
def cli(ctx, database_url):
    """Catalog Sync CLI."""
    ctx.obj = CliState(database_url)


# Database commands
@cli.group()
def db():
    """Database management commands."""
    pass


@db.command()
@click.option("--auto-import", is_flag=True, help="Import all configured feeds when the catalog is empty")
@click.option("--limit", type=int, default=None, help="Per-supplier record limit for the import")
@click.pass_obj
def init(state, auto_import, limit):
    """Initialize the database."""
    click.echo("Initializing database...")
    try:
        init_db(state.engine)
        click.echo("✅ Database initialized successfully!")

        if auto_import or settings.auto_import_on_empty:
            with IngestionService(state.session_factory) as service:
                future = service.schedule_initial_import(limit=limit)
                if future is None:
                    click.echo("Catalog already has products, skipping initial import.")
                    return
                click.echo("Catalog is empty, running initial import...")
                echo_summary(future.result())
    except CatalogSyncError as e:
        fail(e)
    except Exception as e:
        logger.exception("Database initialization failed")
        fail(e)


@db.command()
@click.confirmation_option(prompt="Are you sure you want to drop all tables?")
@click.pass_obj
def reset(state):
    """Reset the database (drop and recreate all tables)."""
    click.echo("Resetting database...")
    try:
        drop_db(state.engine)
        init_db(state.engine)
        click.echo("✅ Database reset successfully!")
    except Exception as e:
        fail(e)


# Ingestion commands
@cli.command()
@click.option(
    "--supplier",
    "suppliers",
    multiple=True,
    type=click.Choice(SUPPLIERS),
    help="Supplier to sync (repeatable, defaults to every configured feed)",
)
@click.option("--limit", type=int, default=None, help="Per-supplier record limit")
@click.pass_obj
def sync(state, suppliers, limit):
    """Fetch supplier feeds and ingest them."""
    try:
        with IngestionService(state.session_factory) as service:
            sources = list(suppliers) or sorted(service.clients)
            if not sources:
                fail("No supplier feeds configured (set MIDOCEAN_API_KEY or XD_CONNECTS_PRODUCT_DATA_URL)")

            click.echo(f"Syncing {', '.join(sources)}...")
            summary = service.sync(sources, limit=limit)
        echo_summary(summary)
    except CatalogSyncError as e:
        fail(e)


@cli.command("import-file")
@click.option("--supplier", required=True, type=click.Choice(SUPPLIERS), help="Supplier the feed belongs to")
@click.option("--file", "path", required=True, type=click.Path(exists=True, dir_okay=False), help="JSON feed dump")
@click.option("--limit", type=int, default=None, help="Record limit")
@click.pass_obj
def import_file(state, supplier, path, limit):
    """Ingest a feed dump stored on disk."""
    try:
        service = IngestionService(state.session_factory, clients={})
        click.echo(f"Importing {path} as {supplier}...")
        echo_report(service.ingest_file(supplier, path, limit=limit))
    except CatalogSyncError as e:
        fail(e)


# Product commands
@cli.group()
def products():
    """Catalog browsing commands."""
    pass


@products.command("list")
@click.option("--source", type=click.Choice(SUPPLIERS), help="Only this supplier")
@click.option("--search", help="Search name, code or description")
@click.option("--brand", help="Only this brand")
@click.option("--limit", default=20, help="Number of products to show")
@click.pass_obj
def list_products(state, source, search, brand, limit):
    """List catalog products."""
    service = ProductService()
    with session_scope(state.session_factory) as session:
        found = service.search_products(
            session, source=source, search_term=search, brand=brand, limit=limit
        )

        if found:
            click.echo(f"\nFound {len(found)} products:\n")
            for p in found:
                click.echo(f"ID: {p.id} | {p.name}")
                click.echo(f"   Source: {p.source} | Code: {p.product_code or 'N/A'} | Brand: {p.brand or 'N/A'}")
                click.echo()
        else:
            click.echo("No products found.")


@products.command("show")
@click.argument("product_id", type=int)
@click.pass_obj
def show_product(state, product_id):
    """Show a product with its variants and assets."""
    service = ProductService()
    with session_scope(state.session_factory) as session:
        details = service.get_with_children(session, product_id)
        if details is None:
            fail(f"Product {product_id} not found")

        p = details["product"]
        click.echo(f"ID: {p.id} | {p.name}")
        click.echo(f"   Source: {p.source} | Code: {p.product_code or 'N/A'} | External ID: {p.external_id or 'N/A'}")
        if p.price is not None:
            click.echo(f"   Price: {p.price} {p.currency or ''}".rstrip())

        click.echo(f"\nVariants ({len(details['variants'])}):")
        for entry in details["variants"]:
            variant = entry["variant"]
            click.echo(
                f"   - {variant.variant_id} | SKU: {variant.sku or 'N/A'} | "
                f"Color: {variant.color_description or 'N/A'} | {len(entry['assets'])} assets"
            )

        click.echo(f"\nMaster assets ({len(details['master_assets'])}):")
        for asset in details["master_assets"]:
            click.echo(f"   - [{asset.type}] {asset.url}")


# Quote commands
@cli.command()
@click.option("--product-id", type=int, required=True, help="Product ID")
@click.option("--quantity", type=float, required=True, help="Requested quantity")
@click.option("--remarks", help="Personalization remarks")
@click.option("--seed", type=int, default=None, help="Seed for reproducible quotes")
@click.pass_obj
def quote(state, product_id, quantity, remarks, seed):
    """Request simulated quotes from all providers."""
    engine = QuoteSimulationEngine(rng=random.Random(seed) if seed is not None else None)
    service = QuoteService(engine)
    with session_scope(state.session_factory) as session:
        try:
            request, quotes = asyncio.run(
                service.request_quotes(session, product_id, quantity, remarks)
            )
        except ValueError as e:
            fail(e)

        click.echo(f"✅ Request {request.id}: {request.quantity:g} x {request.product_name}")
        for q in sorted(quotes, key=lambda q: q.price):
            click.echo(
                f"   {q.provider_name}: {q.price:.2f} | {q.delivery_days} days | "
                f"reliability {q.reliability_score:.2f}% | {q.response_time} ms"
            )


if __name__ == "__main__":
    cli()
