import click

from core.seeder import seed_all
from ..utils import open_session


@click.command("init-db")
@click.option('--drop', is_flag=True, help='Drop all tables first')
@click.pass_context
def init_db(ctx, drop: bool):
    """Create the books, borrowers and borrowings tables"""
    database = ctx.obj["database"]
    if drop:
        click.confirm("This deletes all data. Continue?", abort=True)
        database.drop_db()
    database.init_db()
    click.echo(click.style("Database initialized", fg='green'))


@click.command()
@click.pass_context
def seed(ctx):
    """Load sample books, borrowers and borrowings"""
    ctx.obj["database"].init_db()
    with open_session(ctx) as session:
        created = seed_all(session, ctx.obj["settings"])

    click.echo(click.style("Seeding complete", fg='green'))
    for name, count in created.items():
        click.echo(click.style(f"{name.capitalize()}: ", fg='blue') + click.style(str(count), fg='cyan'))
