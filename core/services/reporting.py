# core/services/reporting.py
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from core.exceptions import ValidationError
from core.sa.models import Borrowing, as_naive_utc, utcnow
from core.sa.repositories import BorrowingRepository
from core.utils.csv_export import to_csv
from .base import Service

EXPORT_COLUMNS = [
    "id",
    "borrowerId",
    "borrowerName",
    "borrowerEmail",
    "bookId",
    "bookTitle",
    "bookAuthor",
    "isbn",
    "checkoutDate",
    "dueDate",
    "returnDate",
]
OVERDUE_EXPORT_COLUMNS = EXPORT_COLUMNS[:-1] + ["daysOverdue"]


@dataclass
class Page:
    items: List[Any]
    total: int
    limit: int
    offset: int

    @property
    def has_next(self) -> bool:
        return self.offset + self.limit < self.total

    @property
    def has_previous(self) -> bool:
        return self.offset > 0


def last_month_range(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """First instant and last millisecond of the calendar month before ``now``."""
    now = as_naive_utc(now) if now else utcnow()
    start_of_this_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    end = start_of_this_month - timedelta(milliseconds=1)
    start = end.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return start, end


def export_filename(prefix: str, now: Optional[datetime] = None) -> str:
    start, end = last_month_range(now)
    return f"{prefix}_{start.date().isoformat()}_{end.date().isoformat()}.csv"


def _export_row(borrowing: Borrowing) -> Dict[str, Any]:
    return {
        "id": borrowing.id,
        "borrowerId": borrowing.borrower_id,
        "borrowerName": borrowing.borrower.name if borrowing.borrower else None,
        "borrowerEmail": borrowing.borrower.email if borrowing.borrower else None,
        "bookId": borrowing.book_id,
        "bookTitle": borrowing.book.title if borrowing.book else None,
        "bookAuthor": borrowing.book.author if borrowing.book else None,
        "isbn": borrowing.book.isbn if borrowing.book else None,
        "checkoutDate": borrowing.checkout_date,
        "dueDate": borrowing.due_date,
        "returnDate": borrowing.return_date,
    }


class ReportingService(Service):
    """Read-only views over the borrowing ledger: overdue lists, exports and counts."""

    def __init__(self, session, settings=None, logger=None):
        super().__init__(session, settings, logger)
        self.borrowings = BorrowingRepository(session)

    def list_overdue(
        self,
        as_of: Optional[datetime] = None,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> Page:
        """Page through unreturned borrowings past their due date.

        Args:
            as_of: Reference time; defaults to now
            limit: Page size, 1 to ``max_page_size``
            offset: Entries to skip

        Returns:
            Page of Borrowing objects ordered by due date, oldest first
        """
        limit = self.settings.default_page_size if limit is None else limit
        if limit < 1 or limit > self.settings.max_page_size:
            raise ValidationError(f"limit must be between 1 and {self.settings.max_page_size}")
        if offset < 0:
            raise ValidationError("offset must be 0 or greater")

        as_of = as_naive_utc(as_of) if as_of else utcnow()
        items = self.borrowings.find_overdue(as_of, limit=limit, offset=offset)
        total = self.borrowings.count_overdue(as_of)
        self.logger.debug(f"Overdue query as_of={as_of.isoformat()} total={total} returned={len(items)}")
        return Page(items=items, total=total, limit=limit, offset=offset)

    def borrowings_last_month(self, now: Optional[datetime] = None) -> List[Borrowing]:
        start, end = last_month_range(now)
        return self.borrowings.find_checked_out_between(start, end)

    def overdue_last_month(self, now: Optional[datetime] = None) -> List[Borrowing]:
        """Borrowings checked out last month that are still out and past due at ``now``."""
        now = as_naive_utc(now) if now else utcnow()
        start, end = last_month_range(now)
        return self.borrowings.find_checked_out_between(start, end, overdue_as_of=now)

    def export_last_month(self, now: Optional[datetime] = None) -> str:
        borrowings = self.borrowings_last_month(now)
        self.logger.info(f"Exporting last month borrowings count={len(borrowings)}")
        return to_csv((_export_row(b) for b in borrowings), EXPORT_COLUMNS)

    def export_overdue_last_month(self, now: Optional[datetime] = None) -> str:
        now = as_naive_utc(now) if now else utcnow()
        borrowings = self.overdue_last_month(now)
        self.logger.info(f"Exporting overdue last month borrowings count={len(borrowings)}")
        rows = []
        for borrowing in borrowings:
            row = _export_row(borrowing)
            del row["returnDate"]
            row["daysOverdue"] = borrowing.days_overdue(now)
            rows.append(row)
        return to_csv(rows, OVERDUE_EXPORT_COLUMNS)

    def statistics(self, as_of: Optional[datetime] = None) -> Dict[str, int]:
        as_of = as_naive_utc(as_of) if as_of else utcnow()
        return self.borrowings.statistics(as_of)
