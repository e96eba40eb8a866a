# api/schemas/borrower.py
from datetime import date
from typing import Optional

from .common import CamelModel, UtcDateTime


class BorrowerCreate(CamelModel):
    name: str
    email: str


class BorrowerUpdate(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None


class Borrower(CamelModel):
    id: int
    name: str
    email: str
    registered_date: date
    created_at: UtcDateTime
    updated_at: UtcDateTime


class BorrowerSummary(CamelModel):
    id: int
    name: str
    email: str
