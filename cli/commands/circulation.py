import click

from core.services import CirculationService
from ..utils import format_date, handle_library_errors, open_session


@click.command()
@click.argument('borrower_id', type=int)
@click.argument('book_id', type=int)
@click.pass_context
@handle_library_errors
def checkout(ctx, borrower_id: int, book_id: int):
    """Lend BOOK_ID to BORROWER_ID"""
    with open_session(ctx) as session:
        borrowing = CirculationService(session, ctx.obj["settings"]).checkout(borrower_id, book_id)
        click.echo(click.style(f"Checked out '{borrowing.book.title}' to {borrowing.borrower.name}", fg='green'))
        click.echo(click.style("Borrowing ID: ", fg='blue') + click.style(str(borrowing.id), fg='cyan'))
        click.echo(click.style("Due: ", fg='blue') + click.style(format_date(borrowing.due_date), fg='cyan'))


@click.command(name="return")
@click.argument('borrowing_id', type=int)
@click.pass_context
@handle_library_errors
def return_book(ctx, borrowing_id: int):
    """Return the book of BORROWING_ID"""
    with open_session(ctx) as session:
        borrowing = CirculationService(session, ctx.obj["settings"]).return_book(borrowing_id)
        click.echo(click.style(f"Returned '{borrowing.book.title}'", fg='green'))
        click.echo(click.style("Returned at: ", fg='blue') + click.style(format_date(borrowing.return_date), fg='cyan'))
