# tests/conftest.py
import os
import sys
import pytest
from datetime import datetime
from pathlib import Path
from sqlalchemy.sql import text

# Add project root to Python path
project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from core.config import Settings
from core.sa.database import Database
from core.sa.models import Base
from core.services import BookService, BorrowerService, CirculationService, ReportingService

NOW = datetime(2024, 3, 15, 12, 0, 0)


@pytest.fixture(scope="session")
def test_db_path(tmp_path_factory):
    """Create a temporary directory for the test database."""
    test_dir = tmp_path_factory.mktemp("test_db")
    return str(test_dir / "test_library.db")


@pytest.fixture(scope="session")
def database(test_db_path):
    """Create a test database instance"""
    db = Database(f"sqlite:///{test_db_path}")

    # Drop all tables and recreate schema
    Base.metadata.drop_all(db.engine)
    Base.metadata.create_all(db.engine)

    yield db

    db.dispose()
    try:
        os.remove(test_db_path)
    except OSError:
        pass


@pytest.fixture(scope="function")
def db_session(database):
    """Create a new database session for a test"""
    session = database.get_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def cleanup_db(db_session):
    """Clean up database tables before each test"""
    # Ledger first, it references both other tables
    db_session.execute(text("DELETE FROM borrowings"))
    db_session.execute(text("DELETE FROM borrowers"))
    db_session.execute(text("DELETE FROM books"))
    db_session.commit()
    yield
    db_session.rollback()


@pytest.fixture
def settings(test_db_path):
    return Settings(
        database_url=f"sqlite:///{test_db_path}",
        loan_period_days=14,
        default_page_size=10,
        max_page_size=100,
        rate_limit_max=10,
        rate_limit_window_seconds=900.0,
        basic_auth_username="admin",
        basic_auth_password="admin",
        cors_origins=["*"],
    )


@pytest.fixture
def book_service(db_session, settings):
    return BookService(db_session, settings)


@pytest.fixture
def borrower_service(db_session, settings):
    return BorrowerService(db_session, settings)


@pytest.fixture
def circulation(db_session, settings):
    return CirculationService(db_session, settings)


@pytest.fixture
def reporting(db_session, settings):
    return ReportingService(db_session, settings)


@pytest.fixture
def sample_book(book_service):
    """Create a sample book with two copies."""
    return book_service.create_book(
        title="The Great Gatsby",
        author="F. Scott Fitzgerald",
        isbn="9780743273565",
        total_quantity=2,
        shelf_location="A1-001"
    )


@pytest.fixture
def single_copy_book(book_service):
    """Create a book with exactly one copy."""
    return book_service.create_book(
        title="Pride and Prejudice",
        author="Jane Austen",
        isbn="9780141439518",
        total_quantity=1,
        shelf_location="B1-001"
    )


@pytest.fixture
def sample_borrower(borrower_service):
    """Create a sample borrower for testing."""
    return borrower_service.register_borrower("John Doe", "john.doe@email.com")


@pytest.fixture
def second_borrower(borrower_service):
    return borrower_service.register_borrower("Jane Smith", "jane.smith@email.com")
