# core/exceptions.py
from typing import Any, Dict, List, Optional


class LibraryError(Exception):
    """Base exception for circulation and catalog errors."""

    code = "LIBRARY_ERROR"
    default_message = "Library operation failed"

    def __init__(self, message: Optional[str] = None, details: Optional[List[Dict[str, Any]]] = None):
        self.message = message or self.default_message
        self.details = details or []
        super().__init__(self.message)


class ValidationError(LibraryError):
    """Malformed or missing input."""

    code = "VALIDATION_ERROR"
    default_message = "Invalid input data"


class NotFoundError(LibraryError):
    code = "NOT_FOUND"
    default_message = "Resource not found"


class BookNotFoundError(NotFoundError):
    code = "BOOK_NOT_FOUND"
    default_message = "Book not found"


class BorrowerNotFoundError(NotFoundError):
    code = "BORROWER_NOT_FOUND"
    default_message = "Borrower not found"


class BorrowingNotFoundError(NotFoundError):
    code = "BORROWING_NOT_FOUND"
    default_message = "Borrowing record not found"


class ConflictError(LibraryError):
    code = "CONFLICT"
    default_message = "Operation conflicts with current state"


class BookNotAvailableError(ConflictError):
    """No copy of the book is free at checkout time."""

    code = "BOOK_NOT_AVAILABLE"
    default_message = "Book is not available for checkout"


class AlreadyReturnedError(ConflictError):
    """Return attempted on a borrowing that already has a return date."""

    code = "BOOK_ALREADY_RETURNED"
    default_message = "Book has already been returned"


class HasActiveBorrowingsError(ConflictError):
    """Delete blocked by unreturned borrowings."""

    code = "HAS_ACTIVE_BORROWINGS"
    default_message = "Cannot delete while active borrowings exist"


class DuplicateKeyError(ConflictError):
    """A unique column (ISBN, email) collided in the store."""

    code = "DUPLICATE_ENTRY"

    def __init__(self, field: str, value: Any):
        self.field = field
        self.value = value
        super().__init__(
            f"{field} '{value}' already exists",
            details=[{"field": field, "message": f"{field} must be unique"}],
        )
