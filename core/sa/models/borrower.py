# core/sa/models/borrower.py
import re
from datetime import date
from sqlalchemy import String, Integer, Date
from sqlalchemy.orm import relationship, Mapped, mapped_column, validates
from .base import Base, TimestampMixin, utcnow

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email: str) -> str:
    """Lower-case and trim an email address."""
    return email.strip().lower()


class Borrower(Base, TimestampMixin):
    __tablename__ = 'borrowers'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    registered_date: Mapped[date] = mapped_column(Date, nullable=False, default=lambda: utcnow().date())

    # Relationships
    borrowings = relationship('Borrowing', back_populates='borrower', passive_deletes='all')

    @validates('email')
    def _normalize_email(self, key, value):
        return normalize_email(value) if value is not None else value

    def __repr__(self) -> str:
        return f"<Borrower id={self.id} email={self.email}>"
