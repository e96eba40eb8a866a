# core/services/catalog.py
import re
from typing import Any, Dict, List, Optional, Tuple

from core.exceptions import BookNotFoundError, HasActiveBorrowingsError, ValidationError
from core.sa.models import Book
from core.sa.repositories import BookRepository, BorrowingRepository
from .availability import AvailabilityCalculator
from .base import Service, require_id

ISBN_PATTERN = re.compile(r"^\d{13}$")
TEXT_FIELD_LENGTHS = {"title": 255, "author": 255, "shelf_location": 50}


def _clean_text(name: str, value: Any, max_length: int, errors: List[Dict[str, str]]) -> Optional[str]:
    if not isinstance(value, str) or not value.strip():
        errors.append({"field": name, "message": f"{name} must be a non-empty string"})
        return None
    value = value.strip()
    if len(value) > max_length:
        errors.append({"field": name, "message": f"{name} must be at most {max_length} characters"})
        return None
    return value


def validate_book_fields(data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """Check and normalise book input.

    Args:
        data: Raw field values keyed by attribute name
        partial: Only validate the fields present (update)

    Returns:
        Cleaned values for the fields that were given

    Raises:
        ValidationError: With one ``details`` entry per bad field
    """
    errors: List[Dict[str, str]] = []
    cleaned: Dict[str, Any] = {}

    for name, max_length in TEXT_FIELD_LENGTHS.items():
        if name in data and data[name] is not None:
            value = _clean_text(name, data[name], max_length, errors)
            if value is not None:
                cleaned[name] = value
        elif not partial:
            errors.append({"field": name, "message": f"{name} is required"})

    if data.get("isbn") is not None:
        isbn = str(data["isbn"]).strip()
        if ISBN_PATTERN.match(isbn):
            cleaned["isbn"] = isbn
        else:
            errors.append({"field": "isbn", "message": "ISBN must be exactly 13 digits"})
    elif not partial:
        errors.append({"field": "isbn", "message": "isbn is required"})

    if data.get("total_quantity") is not None:
        total = data["total_quantity"]
        if isinstance(total, bool) or not isinstance(total, int) or total < 1:
            errors.append({"field": "total_quantity", "message": "total_quantity must be an integer of at least 1"})
        else:
            cleaned["total_quantity"] = total
    elif not partial:
        errors.append({"field": "total_quantity", "message": "total_quantity is required"})

    if partial and not cleaned and not errors:
        errors.append({"field": "body", "message": "At least one field must be provided"})

    if errors:
        raise ValidationError("Invalid book data", details=errors)
    return cleaned


class BookService(Service):
    """Catalog maintenance: registering, editing and removing titles."""

    def __init__(self, session, settings=None, logger=None):
        super().__init__(session, settings, logger)
        self.books = BookRepository(session)
        self.borrowings = BorrowingRepository(session)
        self.availability = AvailabilityCalculator(session, logger=self.logger)

    def create_book(self, **data) -> Book:
        """Register a new title and compute its initial availability."""
        fields = validate_book_fields(data)
        with self.transaction():
            book = self.books.create_book(**fields)
            self.availability.recalculate(book.id)
        self.logger.info(f"Book created book_id={book.id} isbn={book.isbn} total={book.total_quantity}")
        return book

    def get_book(self, book_id: int) -> Book:
        require_id(book_id, "Book ID")
        book = self.books.get_by_id(book_id)
        if book is None:
            raise BookNotFoundError()
        return book

    def list_books(
        self,
        search: Optional[str] = None,
        limit: int = 10,
        offset: int = 0
    ) -> Tuple[List[Book], int]:
        """Return one page of books and the total number matching ``search``."""
        self.logger.debug(f"Listing books search={search!r} limit={limit} offset={offset}")
        return (
            self.books.search_books(search=search, limit=limit, offset=offset),
            self.books.count_books(search=search)
        )

    def update_book(self, book_id: int, **changes) -> Book:
        """Apply a partial edit.

        ``total_quantity`` may not drop below the number of copies currently
        lent out. Availability is recomputed after every edit.

        Raises:
            BookNotFoundError: If the book does not exist
            ValidationError: If a field is invalid or the total is too small
            DuplicateKeyError: If the new ISBN is already registered
        """
        require_id(book_id, "Book ID")
        fields = validate_book_fields(changes, partial=True)

        with self.transaction():
            book = self.books.get_by_id(book_id, for_update=True)
            if book is None:
                raise BookNotFoundError()

            if "total_quantity" in fields:
                active = self.borrowings.count_active_for_book(book_id)
                if fields["total_quantity"] < active:
                    self.logger.warning(
                        f"Book update rejected book_id={book_id} "
                        f"total={fields['total_quantity']} active={active}"
                    )
                    raise ValidationError(
                        f"total_quantity cannot be less than the {active} copies currently borrowed",
                        details=[{"field": "total_quantity", "message": "below active borrowings"}]
                    )

            self.books.update_book(book, fields)
            self.availability.recalculate(book_id)

        self.logger.info(f"Book updated book_id={book_id} fields={sorted(fields)}")
        return book

    def delete_book(self, book_id: int) -> None:
        """Delete a book that has no active borrowings.

        This permanently deletes the book's returned borrowings as well, so
        its circulation history no longer appears in reports or exports.

        Raises:
            BookNotFoundError: If the book does not exist
            HasActiveBorrowingsError: If any copy is still lent out
        """
        require_id(book_id, "Book ID")
        with self.transaction():
            book = self.books.get_by_id(book_id, for_update=True)
            if book is None:
                raise BookNotFoundError()

            active = self.borrowings.count_active_for_book(book_id)
            if active:
                self.logger.warning(f"Book delete rejected book_id={book_id} active={active}")
                raise HasActiveBorrowingsError(
                    f"Cannot delete book with {active} active borrowing(s)"
                )

            removed = self.borrowings.delete_returned_for_book(book_id)
            self.books.delete_book(book)

        self.logger.info(f"Book deleted book_id={book_id} history_removed={removed}")
