# core/services/circulation.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.exceptions import (
    AlreadyReturnedError,
    BookNotAvailableError,
    BookNotFoundError,
    BorrowerNotFoundError,
    BorrowingNotFoundError,
)
from core.sa.models import Borrowing, calculate_due_date, utcnow, as_naive_utc
from core.sa.repositories import BookRepository, BorrowerRepository, BorrowingRepository
from .availability import AvailabilityCalculator
from .base import Service, require_id


class CirculationService(Service):
    """Checkout and return of books.

    Each borrowing moves ``active -> returned`` exactly once. Checkout locks
    the book row so the availability check, the ledger insert and the
    availability recompute commit together.
    """

    def __init__(self, session, settings=None, logger=None):
        super().__init__(session, settings, logger)
        self.books = BookRepository(session)
        self.borrowers = BorrowerRepository(session)
        self.borrowings = BorrowingRepository(session)
        self.availability = AvailabilityCalculator(session, logger=self.logger)

    def checkout(self, borrower_id: int, book_id: int, now: Optional[datetime] = None) -> Borrowing:
        """Lend one copy of a book to a borrower.

        Args:
            borrower_id: ID of an existing borrower
            book_id: ID of an existing book
            now: Checkout time; defaults to the current UTC time

        Returns:
            The new active Borrowing with book and borrower loaded

        Raises:
            ValidationError: If either ID is missing or not a positive integer
            BorrowerNotFoundError: If the borrower does not exist
            BookNotFoundError: If the book does not exist
            BookNotAvailableError: If every copy is already lent out
        """
        require_id(borrower_id, "Borrower ID")
        require_id(book_id, "Book ID")
        checkout_date = as_naive_utc(now) if now else utcnow()
        self.logger.debug(f"Checking out book borrower_id={borrower_id} book_id={book_id}")

        with self.transaction():
            if self.borrowers.get_by_id(borrower_id) is None:
                raise BorrowerNotFoundError()

            book = self.books.get_by_id(book_id, for_update=True)
            if book is None:
                raise BookNotFoundError()

            if self.availability.available_for(book) <= 0:
                self.logger.warning(f"Checkout rejected, no copies available book_id={book_id}")
                raise BookNotAvailableError()

            borrowing = self.borrowings.create_borrowing(
                borrower_id=borrower_id,
                book_id=book_id,
                checkout_date=checkout_date,
                due_date=calculate_due_date(checkout_date, self.settings.loan_period_days)
            )
            self.availability.recalculate(book_id)

        borrowing = self.borrowings.get_by_id(borrowing.id)
        self.logger.info(
            f"Book checked out borrowing_id={borrowing.id} borrower_id={borrower_id} "
            f"book_id={book_id} due_date={borrowing.due_date.isoformat()}"
        )
        return borrowing

    def return_book(self, borrowing_id: int, return_date: Optional[datetime] = None) -> Borrowing:
        """Close an active borrowing.

        Returning twice is an error, not a no-op.

        Raises:
            ValidationError: If the ID is missing or invalid
            BorrowingNotFoundError: If the borrowing does not exist
            AlreadyReturnedError: If the borrowing already has a return date
        """
        require_id(borrowing_id, "Borrowing ID")
        return_date = as_naive_utc(return_date) if return_date else utcnow()
        self.logger.debug(f"Returning book borrowing_id={borrowing_id}")

        with self.transaction():
            borrowing = self.borrowings.get_by_id(borrowing_id, for_update=True)
            if borrowing is None:
                raise BorrowingNotFoundError()
            if borrowing.return_date is not None:
                self.logger.warning(f"Return rejected, already returned borrowing_id={borrowing_id}")
                raise AlreadyReturnedError()

            # Lock the book too so the recompute cannot interleave with a checkout
            self.books.get_by_id(borrowing.book_id, for_update=True)
            self.borrowings.mark_returned(borrowing, return_date)
            self.availability.recalculate(borrowing.book_id)

        self.logger.info(
            f"Book returned borrowing_id={borrowing.id} book_id={borrowing.book_id} "
            f"borrower_id={borrowing.borrower_id} return_date={return_date.isoformat()}"
        )
        return borrowing

    def get_borrowing(self, borrowing_id: int) -> Borrowing:
        require_id(borrowing_id, "Borrowing ID")
        borrowing = self.borrowings.get_by_id(borrowing_id)
        if borrowing is None:
            raise BorrowingNotFoundError()
        return borrowing

    def current_books(self, borrower_id: int) -> List[Borrowing]:
        """Active borrowings of a borrower, newest checkout first."""
        require_id(borrower_id, "Borrower ID")
        if self.borrowers.get_by_id(borrower_id) is None:
            raise BorrowerNotFoundError()
        borrowings = self.borrowings.find_by_borrower(borrower_id, active_only=True)
        self.logger.debug(f"Retrieved current books borrower_id={borrower_id} count={len(borrowings)}")
        return borrowings

    def check_eligibility(self, borrower_id: int, book_id: int) -> Dict[str, Any]:
        """Report whether a checkout would currently succeed, without side effects."""
        require_id(borrower_id, "Borrower ID")
        require_id(book_id, "Book ID")
        result: Dict[str, Any] = {"can_checkout": False, "reason": None}

        if self.borrowers.get_by_id(borrower_id) is None:
            result["reason"] = BorrowerNotFoundError.default_message
            return result

        book = self.books.get_by_id(book_id)
        if book is None:
            result["reason"] = BookNotFoundError.default_message
            return result

        if self.availability.available_for(book) <= 0:
            result["reason"] = BookNotAvailableError.default_message
            return result

        result["can_checkout"] = True
        self.logger.debug(f"Checkout eligibility passed borrower_id={borrower_id} book_id={book_id}")
        return result
