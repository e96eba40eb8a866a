# core/sa/models/book.py
from sqlalchemy import String, Integer, Index, CheckConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin


class Book(Base, TimestampMixin):
    __tablename__ = 'books'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    isbn: Mapped[str] = mapped_column(String(13), unique=True, nullable=False)
    total_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    # Cached copy count; only AvailabilityCalculator writes it
    available_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    shelf_location: Mapped[str] = mapped_column(String(50), nullable=False)

    # Relationships
    borrowings = relationship('Borrowing', back_populates='book', passive_deletes='all')

    __table_args__ = (
        CheckConstraint('total_quantity >= 1', name='ck_books_total_quantity_positive'),
        CheckConstraint('available_quantity >= 0', name='ck_books_available_quantity_non_negative'),
        Index('books_title_idx', 'title'),
        Index('books_author_idx', 'author'),
        Index('books_title_author_idx', 'title', 'author'),
    )

    def __repr__(self) -> str:
        return f"<Book id={self.id} isbn={self.isbn} available={self.available_quantity}/{self.total_quantity}>"
