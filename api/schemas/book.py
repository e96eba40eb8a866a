# api/schemas/book.py
from typing import Optional

from .common import CamelModel, UtcDateTime


class BookBase(CamelModel):
    title: str
    author: str
    isbn: str
    total_quantity: int
    shelf_location: str


class BookCreate(BookBase):
    pass


class BookUpdate(CamelModel):
    title: Optional[str] = None
    author: Optional[str] = None
    isbn: Optional[str] = None
    total_quantity: Optional[int] = None
    shelf_location: Optional[str] = None


class Book(BookBase):
    id: int
    available_quantity: int
    created_at: UtcDateTime
    updated_at: UtcDateTime


class BookSummary(CamelModel):
    id: int
    title: str
    author: str
    isbn: str
