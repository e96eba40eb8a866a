# core/sa/__init__.py
from .database import Database
from .models import Base, Book, Borrower, Borrowing, BorrowingStatus

__all__ = [
    'Database',
    'Base',
    'Book',
    'Borrower',
    'Borrowing',
    'BorrowingStatus',
]
