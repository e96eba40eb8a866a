# core/sa/repositories/borrowing.py
from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload
from core.sa.models import Borrowing


class BorrowingRepository:
    """Repository for the borrowing ledger.

    Entries are only ever inserted or given a return date; queries load the
    related book and borrower eagerly so callers can embed summaries.
    """

    def __init__(self, session: Session):
        self.session = session

    def _with_details(self):
        return self.session.query(Borrowing).options(
            joinedload(Borrowing.book),
            joinedload(Borrowing.borrower)
        )

    @staticmethod
    def _paginate(query, limit: Optional[int], offset: Optional[int]):
        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)
        return query

    def get_by_id(self, borrowing_id: int, for_update: bool = False) -> Optional[Borrowing]:
        """Get a ledger entry with its book and borrower loaded.

        Args:
            borrowing_id: The ID of the borrowing
            for_update: Lock the row until the current transaction ends

        Returns:
            The Borrowing object if found, None otherwise
        """
        query = self._with_details().filter(Borrowing.id == borrowing_id)
        if for_update:
            query = query.with_for_update(of=Borrowing)
        return query.first()

    def create_borrowing(
        self,
        borrower_id: int,
        book_id: int,
        checkout_date: datetime,
        due_date: datetime
    ) -> Borrowing:
        """Append an active entry to the ledger."""
        borrowing = Borrowing(
            borrower_id=borrower_id,
            book_id=book_id,
            checkout_date=checkout_date,
            due_date=due_date,
            return_date=None
        )
        self.session.add(borrowing)
        self.session.flush()
        return borrowing

    def mark_returned(self, borrowing: Borrowing, return_date: datetime) -> Borrowing:
        """Set the return date; the caller has already checked it was unset."""
        borrowing.return_date = return_date
        self.session.flush()
        return borrowing

    def find_by_borrower(
        self,
        borrower_id: int,
        active_only: bool = False,
        limit: Optional[int] = None,
        offset: Optional[int] = None
    ) -> List[Borrowing]:
        """Get a borrower's ledger entries, newest checkout first.

        Args:
            borrower_id: The borrower's ID
            active_only: Only return entries without a return date
            limit: Maximum number of results
            offset: Number of results to skip
        """
        query = self._with_details().filter(Borrowing.borrower_id == borrower_id)
        if active_only:
            query = query.filter(Borrowing.return_date.is_(None))
        query = query.order_by(Borrowing.checkout_date.desc(), Borrowing.id.desc())
        return self._paginate(query, limit, offset).all()

    def find_by_book(
        self,
        book_id: int,
        active_only: bool = False,
        limit: Optional[int] = None,
        offset: Optional[int] = None
    ) -> List[Borrowing]:
        """Get a book's ledger entries, newest checkout first."""
        query = self._with_details().filter(Borrowing.book_id == book_id)
        if active_only:
            query = query.filter(Borrowing.return_date.is_(None))
        query = query.order_by(Borrowing.checkout_date.desc(), Borrowing.id.desc())
        return self._paginate(query, limit, offset).all()

    def count_active_for_book(self, book_id: int) -> int:
        return (
            self.session.query(func.count(Borrowing.id))
            .filter(Borrowing.book_id == book_id, Borrowing.return_date.is_(None))
            .scalar() or 0
        )

    def count_active_for_borrower(self, borrower_id: int) -> int:
        return (
            self.session.query(func.count(Borrowing.id))
            .filter(Borrowing.borrower_id == borrower_id, Borrowing.return_date.is_(None))
            .scalar() or 0
        )

    def find_overdue(
        self,
        as_of: datetime,
        limit: Optional[int] = None,
        offset: Optional[int] = None
    ) -> List[Borrowing]:
        """Get unreturned entries whose due date is before ``as_of``.

        Ordered by due date ascending, so the longest overdue come first.
        """
        query = (
            self._with_details()
            .filter(Borrowing.return_date.is_(None), Borrowing.due_date < as_of)
            .order_by(Borrowing.due_date.asc())
        )
        return self._paginate(query, limit, offset).all()

    def count_overdue(self, as_of: datetime) -> int:
        return (
            self.session.query(func.count(Borrowing.id))
            .filter(Borrowing.return_date.is_(None), Borrowing.due_date < as_of)
            .scalar() or 0
        )

    def find_checked_out_between(
        self,
        start: datetime,
        end: datetime,
        overdue_as_of: Optional[datetime] = None
    ) -> List[Borrowing]:
        """Get entries checked out within ``[start, end]``.

        Args:
            start: Inclusive lower bound on checkout date
            end: Inclusive upper bound on checkout date
            overdue_as_of: When given, keep only entries overdue at this time
        """
        query = self._with_details().filter(
            Borrowing.checkout_date >= start,
            Borrowing.checkout_date <= end
        )
        if overdue_as_of is not None:
            query = query.filter(
                Borrowing.return_date.is_(None),
                Borrowing.due_date < overdue_as_of
            )
        return query.order_by(Borrowing.checkout_date.asc(), Borrowing.id.asc()).all()

    def delete_returned_for_book(self, book_id: int) -> int:
        """Remove closed history rows of a book that is being deleted."""
        return (
            self.session.query(Borrowing)
            .filter(Borrowing.book_id == book_id, Borrowing.return_date.isnot(None))
            .delete(synchronize_session="fetch")
        )

    def delete_returned_for_borrower(self, borrower_id: int) -> int:
        """Remove closed history rows of a borrower that is being deleted."""
        return (
            self.session.query(Borrowing)
            .filter(Borrowing.borrower_id == borrower_id, Borrowing.return_date.isnot(None))
            .delete(synchronize_session="fetch")
        )

    def statistics(self, as_of: datetime) -> Dict[str, int]:
        """Count ledger entries by derived status."""
        total = self.session.query(func.count(Borrowing.id)).scalar() or 0
        active = (
            self.session.query(func.count(Borrowing.id))
            .filter(Borrowing.return_date.is_(None))
            .scalar() or 0
        )
        return {
            "total": total,
            "active": active,
            "overdue": self.count_overdue(as_of),
            "returned": total - active,
        }
