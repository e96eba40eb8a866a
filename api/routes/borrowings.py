# api/routes/borrowings.py

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query, Response, status

from core.sa.models import as_naive_utc, utcnow
from core.services import CirculationService, ReportingService, export_filename
from api.dependencies import get_circulation_service, get_reporting_service
from api.schemas.borrowing import Borrowing, CheckoutRequest, Eligibility, OverdueBorrowing, Statistics
from api.schemas.common import DataResponse, PageMeta, PaginatedResponse

router = APIRouter(prefix="/borrowings", tags=["borrowings"])


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.post("/checkout", response_model=DataResponse[Borrowing], status_code=status.HTTP_201_CREATED)
def checkout_book(payload: CheckoutRequest, service: CirculationService = Depends(get_circulation_service)):
    borrowing = service.checkout(payload.borrower_id, payload.book_id)
    return {"data": borrowing}


@router.put("/{borrowing_id}/return", response_model=DataResponse[Borrowing])
def return_book(borrowing_id: int, service: CirculationService = Depends(get_circulation_service)):
    return {"data": service.return_book(borrowing_id)}


@router.get("/overdue", response_model=PaginatedResponse[OverdueBorrowing])
def get_overdue(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    as_of: Optional[datetime] = Query(None, alias="asOf", description="Reference time, defaults to now"),
    service: ReportingService = Depends(get_reporting_service)
):
    """
    Unreturned borrowings past their due date, longest overdue first.
    """
    as_of = as_naive_utc(as_of) if as_of else utcnow()
    page = service.list_overdue(as_of=as_of, limit=limit, offset=offset)
    return PaginatedResponse[OverdueBorrowing](
        data=[OverdueBorrowing.from_borrowing(item, as_of) for item in page.items],
        meta=PageMeta.build(total=page.total, limit=page.limit, offset=page.offset)
    )


@router.get("/eligibility", response_model=DataResponse[Eligibility])
def get_eligibility(
    borrower_id: int = Query(..., alias="borrowerId"),
    book_id: int = Query(..., alias="bookId"),
    service: CirculationService = Depends(get_circulation_service)
):
    """
    Whether the borrower could check out the book right now, and why not.
    """
    return {"data": service.check_eligibility(borrower_id, book_id)}


@router.get("/statistics", response_model=DataResponse[Statistics])
def get_statistics(service: ReportingService = Depends(get_reporting_service)):
    return {"data": service.statistics()}


@router.get("/exports/last-month")
def export_last_month(service: ReportingService = Depends(get_reporting_service)):
    now = utcnow()
    return _csv_response(service.export_last_month(now), export_filename("borrowings", now))


@router.get("/exports/overdue-last-month")
def export_overdue_last_month(service: ReportingService = Depends(get_reporting_service)):
    now = utcnow()
    return _csv_response(service.export_overdue_last_month(now), export_filename("overdue", now))


@router.get("/{borrowing_id}", response_model=DataResponse[Borrowing])
def get_borrowing(borrowing_id: int, service: CirculationService = Depends(get_circulation_service)):
    return {"data": service.get_borrowing(borrowing_id)}
