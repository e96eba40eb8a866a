# tests/test_services/test_circulation_service.py

import pytest
from datetime import datetime
from core.exceptions import (
    AlreadyReturnedError,
    BookNotAvailableError,
    BookNotFoundError,
    BorrowerNotFoundError,
    BorrowingNotFoundError,
    HasActiveBorrowingsError,
    ValidationError,
)
from core.sa.models import Book, BorrowingStatus
from core.sa.repositories import BorrowingRepository


def assert_availability_matches_ledger(db_session, book):
    """The cached count equals total minus active entries and stays in range."""
    db_session.refresh(book)
    active = BorrowingRepository(db_session).count_active_for_book(book.id)
    assert book.available_quantity == book.total_quantity - active
    assert 0 <= book.available_quantity <= book.total_quantity


def test_checkout_creates_active_borrowing(circulation, sample_book, sample_borrower, db_session):
    """Test a successful checkout and its embedded details."""
    borrowing = circulation.checkout(sample_borrower.id, sample_book.id, now=datetime(2024, 1, 1, 10, 0))
    assert borrowing.id is not None
    assert borrowing.return_date is None
    assert borrowing.book.title == "The Great Gatsby"
    assert borrowing.borrower.email == "john.doe@email.com"
    assert borrowing.status_as_of(datetime(2024, 1, 2)) == BorrowingStatus.ACTIVE
    assert_availability_matches_ledger(db_session, sample_book)
    assert sample_book.available_quantity == 1


def test_checkout_due_date_is_fourteen_days_later(circulation, sample_book, sample_borrower):
    """Test that a checkout on 2024-01-01 is due 2024-01-15."""
    borrowing = circulation.checkout(sample_borrower.id, sample_book.id, now=datetime(2024, 1, 1))
    assert borrowing.due_date == datetime(2024, 1, 15)


def test_last_copy_then_unavailable(circulation, single_copy_book, sample_borrower, second_borrower, db_session):
    """Test that the last copy can be lent and the next attempt fails."""
    circulation.checkout(sample_borrower.id, single_copy_book.id)
    db_session.refresh(single_copy_book)
    assert single_copy_book.available_quantity == 0

    with pytest.raises(BookNotAvailableError):
        circulation.checkout(second_borrower.id, single_copy_book.id)

    assert_availability_matches_ledger(db_session, single_copy_book)
    assert BorrowingRepository(db_session).count_active_for_book(single_copy_book.id) == 1


def test_copy_available_again_after_return(circulation, single_copy_book, sample_borrower, second_borrower):
    first = circulation.checkout(sample_borrower.id, single_copy_book.id)
    circulation.return_book(first.id)
    second = circulation.checkout(second_borrower.id, single_copy_book.id)
    assert second.borrower_id == second_borrower.id


def test_checkout_then_return_restores_availability(circulation, sample_book, sample_borrower, db_session):
    """Test that checkout followed by return is a round trip on availability."""
    db_session.refresh(sample_book)
    before = sample_book.available_quantity

    borrowing = circulation.checkout(sample_borrower.id, sample_book.id)
    returned = circulation.return_book(borrowing.id, return_date=datetime(2030, 1, 1))

    db_session.refresh(sample_book)
    assert sample_book.available_quantity == before
    assert returned.return_date == datetime(2030, 1, 1)
    assert returned.status == BorrowingStatus.RETURNED


def test_return_twice_fails_without_mutation(circulation, sample_book, sample_borrower, db_session):
    """Test that returning an already returned borrowing is rejected."""
    borrowing = circulation.checkout(sample_borrower.id, sample_book.id)
    circulation.return_book(borrowing.id, return_date=datetime(2030, 1, 1))
    db_session.refresh(sample_book)
    available = sample_book.available_quantity

    with pytest.raises(AlreadyReturnedError):
        circulation.return_book(borrowing.id, return_date=datetime(2030, 2, 1))

    db_session.refresh(sample_book)
    assert sample_book.available_quantity == available
    assert circulation.get_borrowing(borrowing.id).return_date == datetime(2030, 1, 1)


@pytest.mark.parametrize("borrower_id, book_id", [(None, 1), (1, None), (0, 1), (1, -3), ("1", 1), (True, 1)])
def test_checkout_rejects_invalid_ids(circulation, borrower_id, book_id):
    with pytest.raises(ValidationError):
        circulation.checkout(borrower_id, book_id)


def test_checkout_unknown_borrower(circulation, sample_book):
    with pytest.raises(BorrowerNotFoundError):
        circulation.checkout(999999, sample_book.id)


def test_checkout_unknown_book(circulation, sample_borrower):
    with pytest.raises(BookNotFoundError):
        circulation.checkout(sample_borrower.id, 999999)


def test_return_unknown_borrowing(circulation):
    with pytest.raises(BorrowingNotFoundError):
        circulation.return_book(999999)


def test_return_rejects_invalid_id(circulation):
    with pytest.raises(ValidationError):
        circulation.return_book(0)


def test_current_books(circulation, sample_book, single_copy_book, sample_borrower):
    """Test that only unreturned borrowings are listed, newest first."""
    older = circulation.checkout(sample_borrower.id, sample_book.id, now=datetime(2024, 1, 1))
    newer = circulation.checkout(sample_borrower.id, single_copy_book.id, now=datetime(2024, 1, 5))
    returned = circulation.checkout(sample_borrower.id, sample_book.id, now=datetime(2024, 1, 3))
    circulation.return_book(returned.id)

    current = circulation.current_books(sample_borrower.id)
    assert [b.id for b in current] == [newer.id, older.id]


def test_current_books_unknown_borrower(circulation):
    with pytest.raises(BorrowerNotFoundError):
        circulation.current_books(999999)


def test_check_eligibility(circulation, single_copy_book, sample_borrower, second_borrower):
    """Test eligibility reporting without side effects."""
    assert circulation.check_eligibility(sample_borrower.id, single_copy_book.id) == {
        "can_checkout": True,
        "reason": None,
    }
    circulation.checkout(sample_borrower.id, single_copy_book.id)

    result = circulation.check_eligibility(second_borrower.id, single_copy_book.id)
    assert result["can_checkout"] is False
    assert result["reason"] == "Book is not available for checkout"

    assert circulation.check_eligibility(999999, single_copy_book.id)["reason"] == "Borrower not found"
    assert circulation.check_eligibility(sample_borrower.id, 999999)["reason"] == "Book not found"


@pytest.mark.parametrize("borrower_id, book_id", [(None, 1), (1, None), (0, 1), (1, -3)])
def test_check_eligibility_rejects_invalid_ids(circulation, borrower_id, book_id):
    with pytest.raises(ValidationError):
        circulation.check_eligibility(borrower_id, book_id)


def test_single_copy_scenario(circulation, single_copy_book, sample_borrower, second_borrower, db_session):
    """Test one copy: first borrower succeeds, second is refused."""
    circulation.checkout(sample_borrower.id, single_copy_book.id)
    db_session.refresh(single_copy_book)
    assert single_copy_book.available_quantity == 0
    with pytest.raises(BookNotAvailableError):
        circulation.checkout(second_borrower.id, single_copy_book.id)


def test_delete_blocked_until_all_returned(
    circulation, book_service, sample_book, sample_borrower, second_borrower, db_session
):
    """Test that a book with two active borrowings is only deletable after both returns."""
    first = circulation.checkout(sample_borrower.id, sample_book.id)
    second = circulation.checkout(second_borrower.id, sample_book.id)

    with pytest.raises(HasActiveBorrowingsError):
        book_service.delete_book(sample_book.id)

    circulation.return_book(first.id)
    with pytest.raises(HasActiveBorrowingsError):
        book_service.delete_book(sample_book.id)

    circulation.return_book(second.id)
    book_service.delete_book(sample_book.id)
    assert db_session.get(Book, sample_book.id) is None


def test_availability_invariant_over_mixed_operations(
    circulation, book_service, sample_book, sample_borrower, second_borrower, db_session
):
    """Test the ledger invariant after a sequence of checkouts, returns and edits."""
    a = circulation.checkout(sample_borrower.id, sample_book.id)
    assert_availability_matches_ledger(db_session, sample_book)

    book_service.update_book(sample_book.id, total_quantity=4)
    assert_availability_matches_ledger(db_session, sample_book)

    b = circulation.checkout(second_borrower.id, sample_book.id)
    circulation.return_book(a.id)
    assert_availability_matches_ledger(db_session, sample_book)

    book_service.update_book(sample_book.id, total_quantity=1)
    assert_availability_matches_ledger(db_session, sample_book)
    assert sample_book.available_quantity == 0

    circulation.return_book(b.id)
    assert_availability_matches_ledger(db_session, sample_book)
    assert sample_book.available_quantity == 1
