import functools
from contextlib import contextmanager
from typing import Iterator

import click
from sqlalchemy.orm import Session

from core.exceptions import LibraryError


@contextmanager
def open_session(ctx: click.Context) -> Iterator[Session]:
    """Session on the database configured for the command group"""
    session = ctx.obj["database"].get_session()
    try:
        yield session
    finally:
        session.close()


def handle_library_errors(func):
    """Turn domain errors into a red message and exit status 1"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except LibraryError as e:
            raise click.ClickException(f"{e.code}: {e.message}") from e
    return wrapper


def format_date(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "-"
