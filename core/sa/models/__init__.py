# core/sa/models/__init__.py
from .base import Base, TimestampMixin, utcnow, as_naive_utc
from .book import Book
from .borrower import Borrower, normalize_email, EMAIL_PATTERN
from .borrowing import Borrowing, BorrowingStatus, calculate_due_date, LOAN_PERIOD_DAYS

__all__ = [
    'Base',
    'TimestampMixin',
    'utcnow',
    'as_naive_utc',
    'Book',
    'Borrower',
    'Borrowing',
    'BorrowingStatus',
    'calculate_due_date',
    'normalize_email',
    'EMAIL_PATTERN',
    'LOAN_PERIOD_DAYS',
]
