# api/schemas/borrowing.py
from datetime import datetime
from typing import Optional

from core.sa.models import Borrowing as BorrowingModel, BorrowingStatus
from .book import BookSummary
from .borrower import BorrowerSummary
from .common import CamelModel, UtcDateTime


class CheckoutRequest(CamelModel):
    borrower_id: int
    book_id: int


class Borrowing(CamelModel):
    id: int
    borrower_id: int
    book_id: int
    checkout_date: UtcDateTime
    due_date: UtcDateTime
    return_date: Optional[UtcDateTime] = None
    status: BorrowingStatus
    created_at: UtcDateTime
    updated_at: UtcDateTime
    book: Optional[BookSummary] = None
    borrower: Optional[BorrowerSummary] = None


class OverdueBorrowing(Borrowing):
    days_overdue: int

    @classmethod
    def from_borrowing(cls, borrowing: BorrowingModel, as_of: datetime) -> "OverdueBorrowing":
        data = Borrowing.model_validate(borrowing).model_dump()
        data.update(
            status=borrowing.status_as_of(as_of),
            days_overdue=borrowing.days_overdue(as_of)
        )
        return cls(**data)


class Statistics(CamelModel):
    total: int
    active: int
    overdue: int
    returned: int


class Eligibility(CamelModel):
    can_checkout: bool
    reason: Optional[str] = None
