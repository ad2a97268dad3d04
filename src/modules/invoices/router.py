"""Invoice routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from src.core.database import Database, get_database
from src.modules.invoices.schemas import (
    InvoiceCreate,
    InvoiceDetail,
    InvoiceSearchParams,
    InvoiceStatusUpdate,
    InvoiceSummary,
)
from src.modules.invoices.service import InvoiceService
from src.shared.schemas import PaginatedEnvelope, ResponseEnvelope

router = APIRouter(prefix="/api/v1/invoices", tags=["invoices"])


def get_service(db: Database = Depends(get_database)) -> InvoiceService:
    return InvoiceService(db)


@router.get("", response_model=PaginatedEnvelope[InvoiceSummary])
async def list_invoices(
    params: Annotated[InvoiceSearchParams, Query()],
    service: InvoiceService = Depends(get_service),
) -> PaginatedEnvelope[InvoiceSummary]:
    result = await service.list_invoices(params)
    return PaginatedEnvelope[InvoiceSummary].from_page(result)


@router.get("/{invoice_id}", response_model=ResponseEnvelope[InvoiceDetail])
async def get_invoice(invoice_id: int, service: InvoiceService = Depends(get_service)):
    return ResponseEnvelope(data=await service.get_invoice(invoice_id))


@router.post("", response_model=ResponseEnvelope[InvoiceDetail], status_code=status.HTTP_201_CREATED)
async def create_invoice(payload: InvoiceCreate, service: InvoiceService = Depends(get_service)):
    invoice = await service.create_invoice(payload.medical_record_id)
    return ResponseEnvelope(data=invoice, message="Invoice created")


@router.put("/{invoice_id}", response_model=ResponseEnvelope[InvoiceDetail])
async def update_invoice_status(
    invoice_id: int,
    payload: InvoiceStatusUpdate,
    service: InvoiceService = Depends(get_service),
):
    invoice = await service.update_status(invoice_id, payload.status)
    return ResponseEnvelope(data=invoice, message="Invoice status updated")
