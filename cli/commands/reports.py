import click

from core.sa.models import utcnow
from core.services import ReportingService, export_filename
from ..utils import format_date, handle_library_errors, open_session

DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S"]


@click.command()
@click.option('--limit', type=int, default=10, show_default=True, help='Entries per page')
@click.option('--offset', type=int, default=0, show_default=True, help='Entries to skip')
@click.option('--as-of', type=click.DateTime(formats=DATE_FORMATS), default=None,
              help='Reference time in UTC (default: now)')
@click.pass_context
@handle_library_errors
def overdue(ctx, limit: int, offset: int, as_of):
    """List overdue borrowings, longest overdue first"""
    as_of = as_of or utcnow()
    with open_session(ctx) as session:
        page = ReportingService(session, ctx.obj["settings"]).list_overdue(as_of=as_of, limit=limit, offset=offset)

        if not page.items:
            click.echo(click.style("No overdue borrowings", fg='green'))
            return

        click.echo(click.style(f"Overdue borrowings ({page.total} total):", fg='blue'))
        for borrowing in page.items:
            click.echo(
                click.style(f"#{borrowing.id} ", fg='cyan') +
                f"{borrowing.book.title} - {borrowing.borrower.name} <{borrowing.borrower.email}> " +
                click.style(f"due {format_date(borrowing.due_date)}, "
                            f"{borrowing.days_overdue(as_of)} day(s) overdue", fg='red')
            )
        if page.has_next:
            click.echo(click.style(f"More results: --offset {page.offset + page.limit}", fg='yellow'))


@click.command()
@click.option('--overdue', 'overdue_only', is_flag=True, help='Only borrowings that are overdue now')
@click.option('--output', type=click.Path(dir_okay=False, writable=True), default=None,
              help='Write to this file instead of stdout; "auto" names it after the month')
@click.pass_context
def export(ctx, overdue_only: bool, output):
    """Export last month's borrowings as CSV"""
    now = utcnow()
    with open_session(ctx) as session:
        service = ReportingService(session, ctx.obj["settings"])
        if overdue_only:
            content = service.export_overdue_last_month(now)
        else:
            content = service.export_last_month(now)

    if output is None:
        click.echo(content, nl=False)
        return

    if output == "auto":
        output = export_filename("overdue" if overdue_only else "borrowings", now)
    with open(output, 'w', encoding='utf-8', newline='') as f:
        f.write(content)
    click.echo(click.style(f"Export written to {output}", fg='green'), err=True)


@click.command()
@click.pass_context
def stats(ctx):
    """Show borrowing counts by status"""
    with open_session(ctx) as session:
        counts = ReportingService(session, ctx.obj["settings"]).statistics()

    click.echo(click.style("Borrowing statistics:", fg='blue'))
    for name in ("total", "active", "overdue", "returned"):
        click.echo(click.style(f"{name.capitalize()}: ", fg='blue') + click.style(str(counts[name]), fg='cyan'))
