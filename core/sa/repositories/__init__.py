# core/sa/repositories/__init__.py
from .book import BookRepository
from .borrower import BorrowerRepository
from .borrowing import BorrowingRepository

__all__ = ['BookRepository', 'BorrowerRepository', 'BorrowingRepository']
