# tests/test_sa/test_repositories/test_borrowing_repository.py

import pytest
from datetime import datetime
from core.sa.models import calculate_due_date
from core.sa.repositories import BorrowingRepository


@pytest.fixture
def borrowing_repo(db_session):
    """Fixture to create a BorrowingRepository instance."""
    return BorrowingRepository(db_session)


@pytest.fixture
def ledger(borrowing_repo, db_session, sample_book, sample_borrower, second_borrower):
    """Three entries: returned, overdue as of 2024-01-20, and on time."""
    def add(borrower, checkout, returned=None):
        entry = borrowing_repo.create_borrowing(
            borrower_id=borrower.id,
            book_id=sample_book.id,
            checkout_date=checkout,
            due_date=calculate_due_date(checkout)
        )
        if returned:
            borrowing_repo.mark_returned(entry, returned)
        return entry

    entries = {
        "returned": add(sample_borrower, datetime(2023, 12, 1), returned=datetime(2023, 12, 10)),
        "overdue": add(sample_borrower, datetime(2023, 12, 27)),
        "on_time": add(second_borrower, datetime(2024, 1, 15)),
    }
    db_session.commit()
    return entries


def test_get_by_id_loads_book_and_borrower(borrowing_repo, ledger, sample_book, sample_borrower):
    entry = borrowing_repo.get_by_id(ledger["overdue"].id)
    assert entry.book.isbn == sample_book.isbn
    assert entry.borrower.email == sample_borrower.email


def test_find_by_borrower_newest_first(borrowing_repo, ledger, sample_borrower):
    entries = borrowing_repo.find_by_borrower(sample_borrower.id)
    assert [e.id for e in entries] == [ledger["overdue"].id, ledger["returned"].id]


def test_find_by_borrower_active_only(borrowing_repo, ledger, sample_borrower):
    entries = borrowing_repo.find_by_borrower(sample_borrower.id, active_only=True)
    assert [e.id for e in entries] == [ledger["overdue"].id]


def test_find_by_book(borrowing_repo, ledger, sample_book):
    assert len(borrowing_repo.find_by_book(sample_book.id)) == 3
    assert len(borrowing_repo.find_by_book(sample_book.id, active_only=True)) == 2


def test_active_counts(borrowing_repo, ledger, sample_book, sample_borrower, second_borrower):
    assert borrowing_repo.count_active_for_book(sample_book.id) == 2
    assert borrowing_repo.count_active_for_borrower(sample_borrower.id) == 1
    assert borrowing_repo.count_active_for_borrower(second_borrower.id) == 1


def test_find_overdue(borrowing_repo, ledger):
    """Test that only unreturned entries past due are listed."""
    as_of = datetime(2024, 1, 20)
    overdue = borrowing_repo.find_overdue(as_of)
    assert [e.id for e in overdue] == [ledger["overdue"].id]
    assert borrowing_repo.count_overdue(as_of) == 1
    assert overdue[0].days_overdue(as_of) == 10


def test_find_checked_out_between(borrowing_repo, ledger):
    start, end = datetime(2023, 12, 1), datetime(2023, 12, 31, 23, 59, 59, 999000)
    entries = borrowing_repo.find_checked_out_between(start, end)
    assert [e.id for e in entries] == [ledger["returned"].id, ledger["overdue"].id]

    overdue = borrowing_repo.find_checked_out_between(start, end, overdue_as_of=datetime(2024, 1, 20))
    assert [e.id for e in overdue] == [ledger["overdue"].id]


def test_statistics(borrowing_repo, ledger):
    assert borrowing_repo.statistics(datetime(2024, 1, 20)) == {
        "total": 3,
        "active": 2,
        "overdue": 1,
        "returned": 1,
    }


def test_delete_returned_for_book_keeps_active_entries(borrowing_repo, ledger, sample_book, db_session):
    removed = borrowing_repo.delete_returned_for_book(sample_book.id)
    db_session.commit()
    assert removed == 1
    assert borrowing_repo.count_active_for_book(sample_book.id) == 2
