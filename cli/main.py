# cli/main.py
import click

from core.config import settings
from core.logging_config import configure_logging
from core.sa.database import Database
from .commands.database import init_db, seed
from .commands.server import serve
from .commands.circulation import checkout, return_book
from .commands.reports import overdue, export, stats


@click.group()
@click.option('--database-url', default=None, help='Database URL (default: DATABASE_URL)')
@click.option('--log-level', default=None, help='Log level (default: LOG_LEVEL)')
@click.pass_context
def cli(ctx, database_url, log_level):
    """Library circulation service"""
    configure_logging(log_level or settings.log_level)
    ctx.ensure_object(dict)
    ctx.obj.setdefault("settings", settings)
    if "database" not in ctx.obj:
        ctx.obj["database"] = Database(database_url or ctx.obj["settings"].database_url)


cli.add_command(init_db)
cli.add_command(seed)
cli.add_command(serve)
cli.add_command(checkout)
cli.add_command(return_book)
cli.add_command(overdue)
cli.add_command(export)
cli.add_command(stats)


def main():
    """Entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
