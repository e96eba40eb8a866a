# api/dependencies.py
import logging
import secrets
from typing import Iterator, Optional

from fastapi import Depends, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.orm import Session

from core.config import Settings
from core.services import BookService, BorrowerService, CirculationService, ReportingService
from .errors import ApiError

logger = logging.getLogger(__name__)

basic_security = HTTPBasic(auto_error=False)
BASIC_CHALLENGE = {"WWW-Authenticate": 'Basic realm="Library Management System"'}


def get_db(request: Request) -> Iterator[Session]:
    """One session per request, closed when the response is sent."""
    session = request.app.state.database.get_session()
    try:
        yield session
    finally:
        session.close()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_book_service(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)) -> BookService:
    return BookService(db, settings)


def get_borrower_service(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)) -> BorrowerService:
    return BorrowerService(db, settings)


def get_circulation_service(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)) -> CirculationService:
    return CirculationService(db, settings)


def get_reporting_service(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)) -> ReportingService:
    return ReportingService(db, settings)


def rate_limit(request: Request) -> None:
    """Reject the request with 429 once the client IP has used up its window."""
    limiter = request.app.state.rate_limiter
    client_ip = request.client.host if request.client else "unknown"
    if not limiter.allow(client_ip):
        logger.warning(f"Rate limit exceeded ip={client_ip} path={request.url.path}")
        raise ApiError(
            status.HTTP_429_TOO_MANY_REQUESTS,
            "RATE_LIMIT_EXCEEDED",
            "Too many requests, please try again later",
            headers={"Retry-After": str(limiter.retry_after(client_ip))}
        )


def require_basic_auth(
    request: Request,
    credentials: Optional[HTTPBasicCredentials] = Depends(basic_security)
) -> str:
    if credentials is None:
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            "AUTHENTICATION_REQUIRED",
            "Authentication required",
            headers=BASIC_CHALLENGE
        )

    settings: Settings = request.app.state.settings
    username_ok = secrets.compare_digest(
        credentials.username.encode("utf-8"), settings.basic_auth_username.encode("utf-8")
    )
    password_ok = secrets.compare_digest(
        credentials.password.encode("utf-8"), settings.basic_auth_password.encode("utf-8")
    )
    if not (username_ok and password_ok):
        logger.warning(f"Invalid credentials username={credentials.username!r} path={request.url.path}")
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            "INVALID_CREDENTIALS",
            "Invalid credentials",
            headers=BASIC_CHALLENGE
        )
    return credentials.username
