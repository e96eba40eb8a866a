# core/services/availability.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from core.exceptions import BookNotFoundError
from core.sa.models import Book
from core.sa.repositories import BookRepository, BorrowingRepository


class AvailabilityCalculator:
    """Derives a book's free copies from the ledger and caches it on the book.

    This is the only writer of ``Book.available_quantity``. The value is
    always recomputed from the count of unreturned borrowings, never patched
    incrementally, so repeated calls are idempotent.
    """

    def __init__(self, session: Session, logger: Optional[logging.Logger] = None):
        self.session = session
        self.books = BookRepository(session)
        self.borrowings = BorrowingRepository(session)
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def compute(total_quantity: int, active_count: int) -> int:
        """Free copies, clamped to ``[0, total_quantity]``."""
        return max(0, min(total_quantity, total_quantity - active_count))

    def available_for(self, book: Book) -> int:
        """Current free copies for a loaded book, without writing anything."""
        return self.compute(book.total_quantity, self.borrowings.count_active_for_book(book.id))

    def recalculate(self, book_id: int) -> Book:
        """Recompute and persist (flush) the book's available quantity.

        Raises:
            BookNotFoundError: If no book has this ID
        """
        book = self.books.get_by_id(book_id)
        if book is None:
            raise BookNotFoundError()

        active_count = self.borrowings.count_active_for_book(book_id)
        available = self.compute(book.total_quantity, active_count)
        if active_count > book.total_quantity:
            self.logger.warning(
                f"Active borrowings exceed total copies book_id={book_id} "
                f"active={active_count} total={book.total_quantity}"
            )
        if book.available_quantity != available:
            self.logger.debug(
                f"Availability recalculated book_id={book_id} "
                f"old={book.available_quantity} new={available}"
            )
            book.available_quantity = available
        self.session.flush()
        return book
