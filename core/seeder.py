# core/seeder.py
import logging
from datetime import datetime, timedelta
from typing import Dict, Optional

from sqlalchemy.orm import Session

from core.config import Settings
from core.sa.models import as_naive_utc, utcnow
from core.sa.repositories import BookRepository, BorrowerRepository, BorrowingRepository
from core.services import BookService, BorrowerService, CirculationService

logger = logging.getLogger(__name__)

SAMPLE_BOOKS = [
    {"title": "The Great Gatsby", "author": "F. Scott Fitzgerald", "isbn": "9780743273565",
     "total_quantity": 5, "shelf_location": "A1-001"},
    {"title": "To Kill a Mockingbird", "author": "Harper Lee", "isbn": "9780061120084",
     "total_quantity": 3, "shelf_location": "A1-002"},
    {"title": "1984", "author": "George Orwell", "isbn": "9780451524935",
     "total_quantity": 4, "shelf_location": "A2-001"},
    {"title": "Pride and Prejudice", "author": "Jane Austen", "isbn": "9780141439518",
     "total_quantity": 2, "shelf_location": "B1-001"},
    {"title": "The Catcher in the Rye", "author": "J.D. Salinger", "isbn": "9780316769174",
     "total_quantity": 3, "shelf_location": "B1-002"},
]

SAMPLE_BORROWERS = [
    {"name": "John Doe", "email": "john.doe@email.com"},
    {"name": "Jane Smith", "email": "jane.smith@email.com"},
    {"name": "Bob Johnson", "email": "bob.johnson@email.com"},
    {"name": "Alice Brown", "email": "alice.brown@email.com"},
]


def seed_all(session: Session, settings: Optional[Settings] = None, now: Optional[datetime] = None) -> Dict[str, int]:
    """Load sample books, borrowers and a few borrowings.

    Books and borrowers that already exist (by ISBN or email) are left
    alone. Sample borrowings are only added to an empty ledger, and always
    through checkout and return so availability stays derived.

    Returns:
        Number of books, borrowers and borrowings created
    """
    now = as_naive_utc(now) if now else utcnow()
    created = {"books": 0, "borrowers": 0, "borrowings": 0}

    book_repo = BookRepository(session)
    book_service = BookService(session, settings)
    books = {}
    for data in SAMPLE_BOOKS:
        book = book_repo.get_by_isbn(data["isbn"])
        if book is None:
            book = book_service.create_book(**data)
            created["books"] += 1
        books[data["isbn"]] = book

    borrower_repo = BorrowerRepository(session)
    borrower_service = BorrowerService(session, settings)
    borrowers = {}
    for data in SAMPLE_BORROWERS:
        borrower = borrower_repo.get_by_email(data["email"])
        if borrower is None:
            borrower = borrower_service.register_borrower(data["name"], data["email"])
            created["borrowers"] += 1
        borrowers[data["email"]] = borrower

    if not BorrowingRepository(session).statistics(now)["total"]:
        circulation = CirculationService(session, settings)
        # Active, returned on time, and overdue
        circulation.checkout(
            borrowers["john.doe@email.com"].id, books["9780316769174"].id, now=now - timedelta(days=5)
        )
        returned = circulation.checkout(
            borrowers["jane.smith@email.com"].id, books["9780743273565"].id, now=datetime(2024, 1, 1)
        )
        circulation.return_book(returned.id, return_date=datetime(2024, 1, 14))
        circulation.checkout(
            borrowers["bob.johnson@email.com"].id, books["9780061120084"].id, now=now - timedelta(days=20)
        )
        created["borrowings"] = 3

    logger.info(
        f"Seeding complete books={created['books']} borrowers={created['borrowers']} "
        f"borrowings={created['borrowings']}"
    )
    return created
