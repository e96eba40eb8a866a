# api/routes/borrowers.py

from typing import List
from fastapi import APIRouter, Depends, Query, Response, status

from core.services import BorrowerService, CirculationService
from api.dependencies import get_borrower_service, get_circulation_service
from api.schemas.borrower import Borrower, BorrowerCreate, BorrowerUpdate
from api.schemas.borrowing import Borrowing
from api.schemas.common import DataResponse, PageMeta, PaginatedResponse

router = APIRouter(prefix="/borrowers", tags=["borrowers"])


@router.get("", response_model=PaginatedResponse[Borrower])
def get_borrowers(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: BorrowerService = Depends(get_borrower_service)
):
    borrowers, total = service.list_borrowers(limit=limit, offset=offset)
    return PaginatedResponse[Borrower](
        data=[Borrower.model_validate(borrower) for borrower in borrowers],
        meta=PageMeta.build(total=total, limit=limit, offset=offset)
    )


@router.get("/{borrower_id}", response_model=DataResponse[Borrower])
def get_borrower(borrower_id: int, service: BorrowerService = Depends(get_borrower_service)):
    return {"data": service.get_borrower(borrower_id)}


@router.get("/{borrower_id}/current-books", response_model=DataResponse[List[Borrowing]])
def get_current_books(borrower_id: int, service: CirculationService = Depends(get_circulation_service)):
    """Active borrowings of the borrower, newest checkout first."""
    return {"data": service.current_books(borrower_id)}


@router.post("", response_model=DataResponse[Borrower], status_code=status.HTTP_201_CREATED)
def create_borrower(payload: BorrowerCreate, service: BorrowerService = Depends(get_borrower_service)):
    return {"data": service.register_borrower(payload.name, payload.email)}


@router.put("/{borrower_id}", response_model=DataResponse[Borrower])
def update_borrower(
    borrower_id: int,
    payload: BorrowerUpdate,
    service: BorrowerService = Depends(get_borrower_service)
):
    return {"data": service.update_borrower(borrower_id, name=payload.name, email=payload.email)}


@router.delete("/{borrower_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_borrower(borrower_id: int, service: BorrowerService = Depends(get_borrower_service)):
    """
    Delete a borrower with no active borrowings, along with their returned borrowings.
    """
    service.delete_borrower(borrower_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
