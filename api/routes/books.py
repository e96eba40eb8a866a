# api/routes/books.py

from typing import Optional
from fastapi import APIRouter, Depends, Query, Response, status

from core.services import BookService
from api.dependencies import get_book_service, rate_limit, require_basic_auth
from api.schemas.book import Book, BookCreate, BookUpdate
from api.schemas.common import DataResponse, PageMeta, PaginatedResponse

router = APIRouter(prefix="/books", tags=["books"])

protected = [Depends(rate_limit), Depends(require_basic_auth)]


@router.get("", response_model=PaginatedResponse[Book], dependencies=protected)
def get_books(
    search: Optional[str] = Query(None, max_length=255, description="Match title or author"),
    limit: int = Query(10, ge=1, le=100, description="Items per page"),
    offset: int = Query(0, ge=0, description="Items to skip"),
    service: BookService = Depends(get_book_service)
):
    """
    Get a page of books, optionally filtered by a case-insensitive search
    over title and author.
    """
    books, total = service.list_books(search=search, limit=limit, offset=offset)
    return PaginatedResponse[Book](
        data=[Book.model_validate(book) for book in books],
        meta=PageMeta.build(total=total, limit=limit, offset=offset)
    )


@router.get("/{book_id}", response_model=DataResponse[Book], dependencies=protected)
def get_book(book_id: int, service: BookService = Depends(get_book_service)):
    return {"data": service.get_book(book_id)}


@router.post("", response_model=DataResponse[Book], status_code=status.HTTP_201_CREATED)
def create_book(payload: BookCreate, service: BookService = Depends(get_book_service)):
    book = service.create_book(**payload.model_dump())
    return {"data": book}


@router.put("/{book_id}", response_model=DataResponse[Book])
def update_book(book_id: int, payload: BookUpdate, service: BookService = Depends(get_book_service)):
    book = service.update_book(book_id, **payload.model_dump(exclude_none=True))
    return {"data": book}


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_book(book_id: int, service: BookService = Depends(get_book_service)):
    """
    Delete a book with no active borrowings, along with its returned borrowings.
    """
    service.delete_book(book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
