# tests/test_sa/test_models.py
import pytest
from datetime import datetime, timedelta, timezone
from sqlalchemy.exc import IntegrityError

from core.sa.models import (
    Book, Borrower, Borrowing, BorrowingStatus, calculate_due_date, as_naive_utc
)


def make_borrowing(due_date, return_date=None):
    return Borrowing(
        borrower_id=1,
        book_id=1,
        checkout_date=due_date - timedelta(days=14),
        due_date=due_date,
        return_date=return_date
    )


def test_due_date_is_fourteen_days_after_checkout():
    """Test that a checkout on 2024-01-01 is due on 2024-01-15."""
    assert calculate_due_date(datetime(2024, 1, 1)) == datetime(2024, 1, 15)


def test_due_date_uses_given_loan_period():
    assert calculate_due_date(datetime(2024, 1, 1, 9, 30), 7) == datetime(2024, 1, 8, 9, 30)


def test_status_active_before_due_date():
    borrowing = make_borrowing(due_date=datetime(2024, 1, 15))
    assert borrowing.status_as_of(datetime(2024, 1, 10)) == BorrowingStatus.ACTIVE
    assert borrowing.days_overdue(datetime(2024, 1, 10)) == 0


def test_status_not_overdue_at_exact_due_time():
    """Test that an entry is overdue only strictly after its due date."""
    borrowing = make_borrowing(due_date=datetime(2024, 1, 15))
    assert not borrowing.is_overdue(datetime(2024, 1, 15))


def test_status_overdue_after_due_date():
    borrowing = make_borrowing(due_date=datetime(2024, 1, 10))
    assert borrowing.status_as_of(datetime(2024, 1, 20)) == BorrowingStatus.OVERDUE
    assert borrowing.days_overdue(datetime(2024, 1, 20)) == 10


def test_days_overdue_rounds_partial_days_up():
    borrowing = make_borrowing(due_date=datetime(2024, 1, 10))
    assert borrowing.days_overdue(datetime(2024, 1, 10, 0, 0, 1)) == 1
    assert borrowing.days_overdue(datetime(2024, 1, 12, 6, 0)) == 3


def test_returned_entry_is_never_overdue():
    borrowing = make_borrowing(due_date=datetime(2024, 1, 10), return_date=datetime(2024, 1, 18))
    assert borrowing.status_as_of(datetime(2024, 2, 1)) == BorrowingStatus.RETURNED
    assert borrowing.days_overdue(datetime(2024, 2, 1)) == 0
    assert not borrowing.is_active


def test_aware_reference_time_is_converted_to_utc():
    borrowing = make_borrowing(due_date=datetime(2024, 1, 10))
    as_of = datetime(2024, 1, 11, 2, 0, tzinfo=timezone(timedelta(hours=2)))
    assert as_naive_utc(as_of) == datetime(2024, 1, 11, 0, 0)
    assert borrowing.days_overdue(as_of) == 1


def test_borrower_email_is_lower_cased(db_session):
    """Test that emails are normalised when assigned."""
    borrower = Borrower(name="Test Borrower", email="  Test.User@Example.COM ")
    db_session.add(borrower)
    db_session.commit()
    assert borrower.email == "test.user@example.com"
    assert borrower.registered_date is not None


def test_book_total_quantity_must_be_positive(db_session):
    book = Book(
        title="Zero Copies",
        author="Nobody",
        isbn="9780000000000",
        total_quantity=0,
        available_quantity=0,
        shelf_location="Z9-999"
    )
    db_session.add(book)
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_ledger_entry_requires_existing_book(db_session, sample_borrower):
    """Test that foreign keys are enforced on SQLite."""
    borrowing = Borrowing(
        borrower_id=sample_borrower.id,
        book_id=999999,
        checkout_date=datetime(2024, 1, 1),
        due_date=datetime(2024, 1, 15)
    )
    db_session.add(borrowing)
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_timestamps_are_set_on_insert(db_session, sample_book):
    book = db_session.get(Book, sample_book.id)
    assert book.created_at is not None
    assert book.updated_at is not None
