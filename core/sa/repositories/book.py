# core/sa/repositories/book.py
from typing import Optional, List, Dict, Any
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from core.exceptions import DuplicateKeyError
from ..models import Book

UPDATABLE_FIELDS = ("title", "author", "isbn", "total_quantity", "shelf_location")


class BookRepository:
    """Repository for managing Book entities.

    Writes are flushed, never committed; the calling service owns the
    transaction boundary.
    """

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, book_id: int, for_update: bool = False) -> Optional[Book]:
        """Get a book by its ID.

        Args:
            book_id: The ID of the book to retrieve
            for_update: Lock the row until the current transaction ends

        Returns:
            The Book object if found, None otherwise
        """
        stmt = select(Book).where(Book.id == book_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()

    def get_by_isbn(self, isbn: str) -> Optional[Book]:
        """Get a book by its ISBN"""
        return self.session.query(Book).filter(Book.isbn == isbn).first()

    def _search_filter(self, query, search: Optional[str]):
        if search and search.strip():
            term = f"%{search.strip()}%"
            query = query.filter(or_(Book.title.ilike(term), Book.author.ilike(term)))
        return query

    def search_books(
        self,
        search: Optional[str] = None,
        limit: int = 10,
        offset: int = 0
    ) -> List[Book]:
        """List books, optionally matching a search term.

        Args:
            search: Case-insensitive substring matched against title or author
            limit: Maximum number of results to return
            offset: Number of records to skip

        Returns:
            List of Book objects ordered by ID
        """
        query = self._search_filter(self.session.query(Book), search)
        return query.order_by(Book.id).offset(offset).limit(limit).all()

    def count_books(self, search: Optional[str] = None) -> int:
        """Count books matching the search criteria"""
        query = self._search_filter(self.session.query(func.count(Book.id)), search)
        return query.scalar() or 0

    def create_book(
        self,
        title: str,
        author: str,
        isbn: str,
        total_quantity: int,
        shelf_location: str
    ) -> Book:
        """Insert a new book with zero available copies.

        Availability is filled in by the AvailabilityCalculator once the
        book has an ID.

        Raises:
            DuplicateKeyError: If the ISBN is already registered
        """
        book = Book(
            title=title,
            author=author,
            isbn=isbn,
            total_quantity=total_quantity,
            available_quantity=0,
            shelf_location=shelf_location
        )
        self.session.add(book)
        try:
            self.session.flush()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateKeyError("isbn", isbn) from e
        return book

    def update_book(self, book: Book, changes: Dict[str, Any]) -> Book:
        """Apply metadata changes to a book.

        ``available_quantity`` is not accepted here.

        Raises:
            DuplicateKeyError: If the new ISBN collides with another book
        """
        for field in UPDATABLE_FIELDS:
            if changes.get(field) is not None:
                setattr(book, field, changes[field])
        try:
            self.session.flush()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateKeyError("isbn", changes.get("isbn")) from e
        return book

    def delete_book(self, book: Book) -> None:
        self.session.delete(book)
        self.session.flush()
