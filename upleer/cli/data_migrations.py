# upleer/cli/data_migrations.py
"""
Run the data migration jobs by hand.

    python -m upleer.cli.data_migrations list
    python -m upleer.cli.data_migrations run
    python -m upleer.cli.data_migrations run --only renumber_vendor_orders --dry-run
"""
import asyncio

import click

from upleer.core.exceptions import BaseServiceError
from upleer.core.logging_config import configure_logging
from upleer.database import async_session
from upleer.services.data_migrations import MIGRATIONS, run_data_migrations


@click.group()
def cli():
    """Data migration jobs."""
    configure_logging()


@cli.command("list")
def list_migrations():
    """List the registered jobs in the order they run."""
    for name, job in MIGRATIONS.items():
        summary = (job.__doc__ or "").strip().splitlines()
        click.echo(f"{name:32} {summary[0] if summary else ''}")


@cli.command("run")
@click.option("--only", "only", multiple=True, type=click.Choice(list(MIGRATIONS)), help="Run just this job (repeatable)")
@click.option("--dry-run", is_flag=True, help="Report what would change and roll back")
def run(only, dry_run):
    """Run data migrations."""

    async def _run():
        async with async_session() as session:
            return await run_data_migrations(session, only=list(only) or None, dry_run=dry_run)

    try:
        results = asyncio.run(_run())
    except BaseServiceError as e:
        raise click.ClickException(str(e))

    for result in results:
        prefix = "[dry run] " if result.dry_run else ""
        click.echo(
            f"{prefix}{result.name}: examined={result.examined} changed={result.changed} skipped={result.skipped}"
        )


if __name__ == "__main__":
    cli()
