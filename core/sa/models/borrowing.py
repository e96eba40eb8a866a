# core/sa/models/borrowing.py
import math
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional
from sqlalchemy import Integer, ForeignKey, DateTime, Index
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin, utcnow, as_naive_utc

LOAN_PERIOD_DAYS = 14
SECONDS_PER_DAY = 86400


class BorrowingStatus(str, Enum):
    ACTIVE = "active"
    OVERDUE = "overdue"
    RETURNED = "returned"


def calculate_due_date(checkout_date: datetime, loan_period_days: int = LOAN_PERIOD_DAYS) -> datetime:
    """Due date is a fixed loan period after checkout."""
    return checkout_date + timedelta(days=loan_period_days)


class Borrowing(Base, TimestampMixin):
    """One checkout-to-return ledger entry.

    Status and days overdue are derived from the dates relative to a
    reference time and are never stored.
    """
    __tablename__ = 'borrowings'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    borrower_id: Mapped[int] = mapped_column(
        ForeignKey('borrowers.id', ondelete='RESTRICT', onupdate='CASCADE'), nullable=False
    )
    book_id: Mapped[int] = mapped_column(
        ForeignKey('books.id', ondelete='RESTRICT', onupdate='CASCADE'), nullable=False
    )
    checkout_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    due_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    return_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Relationships
    borrower = relationship('Borrower', back_populates='borrowings')
    book = relationship('Book', back_populates='borrowings')

    __table_args__ = (
        Index('idx_borrowings_book_return', 'book_id', 'return_date'),
        Index('idx_borrowings_borrower_return', 'borrower_id', 'return_date'),
        Index('idx_borrowings_due_date', 'due_date'),
        Index('idx_borrowings_checkout_date', 'checkout_date'),
    )

    @property
    def is_active(self) -> bool:
        return self.return_date is None

    def is_overdue(self, as_of: Optional[datetime] = None) -> bool:
        if self.return_date is not None:
            return False
        as_of = as_naive_utc(as_of) if as_of else utcnow()
        return self.due_date < as_of

    def days_overdue(self, as_of: Optional[datetime] = None) -> int:
        """Whole days past due, rounded up; 0 when not overdue."""
        as_of = as_naive_utc(as_of) if as_of else utcnow()
        if not self.is_overdue(as_of):
            return 0
        return math.ceil((as_of - self.due_date).total_seconds() / SECONDS_PER_DAY)

    def status_as_of(self, as_of: Optional[datetime] = None) -> BorrowingStatus:
        if self.return_date is not None:
            return BorrowingStatus.RETURNED
        if self.is_overdue(as_of):
            return BorrowingStatus.OVERDUE
        return BorrowingStatus.ACTIVE

    @property
    def status(self) -> BorrowingStatus:
        return self.status_as_of()

    def __repr__(self) -> str:
        return f"<Borrowing id={self.id} book_id={self.book_id} borrower_id={self.borrower_id} returned={self.return_date is not None}>"
