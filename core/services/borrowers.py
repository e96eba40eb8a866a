# core/services/borrowers.py
from typing import Any, Dict, List, Optional, Tuple

from core.exceptions import BorrowerNotFoundError, HasActiveBorrowingsError, ValidationError
from core.sa.models import EMAIL_PATTERN, Borrower
from core.sa.repositories import BorrowerRepository, BorrowingRepository
from .base import Service, require_id


def validate_borrower_fields(data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    errors: List[Dict[str, str]] = []
    cleaned: Dict[str, Any] = {}

    name = data.get("name")
    if name is not None:
        if not isinstance(name, str) or not name.strip() or len(name.strip()) > 255:
            errors.append({"field": "name", "message": "name must be a non-empty string of at most 255 characters"})
        else:
            cleaned["name"] = name.strip()
    elif not partial:
        errors.append({"field": "name", "message": "name is required"})

    email = data.get("email")
    if email is not None:
        if not isinstance(email, str) or len(email) > 255 or not EMAIL_PATTERN.match(email.strip()):
            errors.append({"field": "email", "message": "email must be a valid email address"})
        else:
            cleaned["email"] = email.strip()
    elif not partial:
        errors.append({"field": "email", "message": "email is required"})

    if partial and not cleaned and not errors:
        errors.append({"field": "body", "message": "At least one field must be provided"})

    if errors:
        raise ValidationError("Invalid borrower data", details=errors)
    return cleaned


class BorrowerService(Service):
    """Borrower registration and maintenance."""

    def __init__(self, session, settings=None, logger=None):
        super().__init__(session, settings, logger)
        self.borrowers = BorrowerRepository(session)
        self.borrowings = BorrowingRepository(session)

    def register_borrower(self, name: str, email: str) -> Borrower:
        fields = validate_borrower_fields({"name": name, "email": email})
        with self.transaction():
            borrower = self.borrowers.create_borrower(**fields)
        self.logger.info(f"Borrower registered borrower_id={borrower.id}")
        return borrower

    def get_borrower(self, borrower_id: int) -> Borrower:
        require_id(borrower_id, "Borrower ID")
        borrower = self.borrowers.get_by_id(borrower_id)
        if borrower is None:
            raise BorrowerNotFoundError()
        return borrower

    def list_borrowers(self, limit: int = 10, offset: int = 0) -> Tuple[List[Borrower], int]:
        return (
            self.borrowers.list_borrowers(limit=limit, offset=offset),
            self.borrowers.count_borrowers()
        )

    def update_borrower(self, borrower_id: int, name: Optional[str] = None, email: Optional[str] = None) -> Borrower:
        """Partially update a borrower; a new email is lower-cased again."""
        require_id(borrower_id, "Borrower ID")
        fields = validate_borrower_fields({"name": name, "email": email}, partial=True)
        with self.transaction():
            borrower = self.borrowers.get_by_id(borrower_id, for_update=True)
            if borrower is None:
                raise BorrowerNotFoundError()
            self.borrowers.update_borrower(borrower, fields)
        self.logger.info(f"Borrower updated borrower_id={borrower_id} fields={sorted(fields)}")
        return borrower

    def delete_borrower(self, borrower_id: int) -> None:
        """Delete a borrower with no active borrowings.

        This permanently deletes the borrower's returned borrowings as well, so
        their circulation history no longer appears in reports or exports.

        Raises:
            BorrowerNotFoundError: If the borrower does not exist
            HasActiveBorrowingsError: If any borrowing is still open
        """
        require_id(borrower_id, "Borrower ID")
        with self.transaction():
            borrower = self.borrowers.get_by_id(borrower_id, for_update=True)
            if borrower is None:
                raise BorrowerNotFoundError()

            active = self.borrowings.count_active_for_borrower(borrower_id)
            if active:
                self.logger.warning(f"Borrower delete rejected borrower_id={borrower_id} active={active}")
                raise HasActiveBorrowingsError(
                    f"Cannot delete borrower with {active} active borrowing(s)"
                )

            removed = self.borrowings.delete_returned_for_borrower(borrower_id)
            self.borrowers.delete_borrower(borrower)

        self.logger.info(f"Borrower deleted borrower_id={borrower_id} history_removed={removed}")
