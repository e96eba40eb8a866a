# core/sa/repositories/borrower.py
from typing import List, Optional, Dict, Any
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from core.exceptions import DuplicateKeyError
from core.sa.models import Borrower, normalize_email


class BorrowerRepository:
    """Repository for managing Borrower entities."""

    def __init__(self, session: Session):
        """Initialize the repository with a database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def get_by_id(self, borrower_id: int, for_update: bool = False) -> Optional[Borrower]:
        """Get a borrower by ID.

        Args:
            borrower_id: The ID of the borrower to retrieve
            for_update: Lock the row until the current transaction ends

        Returns:
            The Borrower object if found, None otherwise
        """
        stmt = select(Borrower).where(Borrower.id == borrower_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()

    def get_by_email(self, email: str) -> Optional[Borrower]:
        """Get a borrower by email, ignoring case.

        Args:
            email: The email address to search for

        Returns:
            The Borrower object if found, None otherwise
        """
        return self.session.query(Borrower).filter(Borrower.email == normalize_email(email)).first()

    def list_borrowers(self, limit: int = 10, offset: int = 0) -> List[Borrower]:
        """List borrowers ordered by ID.

        Args:
            limit: Maximum number of results to return
            offset: Number of records to skip

        Returns:
            List of Borrower objects
        """
        return (
            self.session.query(Borrower)
            .order_by(Borrower.id)
            .offset(offset)
            .limit(limit)
            .all()
        )

    def count_borrowers(self) -> int:
        return self.session.query(func.count(Borrower.id)).scalar() or 0

    def create_borrower(self, name: str, email: str) -> Borrower:
        """Create a new borrower.

        Args:
            name: Full name of the borrower
            email: Email address; stored lower-cased

        Returns:
            The created Borrower object

        Raises:
            DuplicateKeyError: If the email is already registered
        """
        borrower = Borrower(name=name, email=email)
        self.session.add(borrower)
        try:
            self.session.flush()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateKeyError("email", normalize_email(email)) from e
        return borrower

    def update_borrower(self, borrower: Borrower, changes: Dict[str, Any]) -> Borrower:
        """Update name and/or email of an existing borrower.

        Raises:
            DuplicateKeyError: If the new email belongs to another borrower
        """
        email = changes.get("email")
        if changes.get("name") is not None:
            borrower.name = changes["name"]
        if email is not None:
            borrower.email = email
        try:
            self.session.flush()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateKeyError("email", normalize_email(email or "")) from e
        return borrower

    def delete_borrower(self, borrower: Borrower) -> None:
        self.session.delete(borrower)
        self.session.flush()
