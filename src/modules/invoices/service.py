"""Invoice service layer."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, time, timedelta, timezone
from typing import Any

from sqlalchemy.exc import IntegrityError

from src.core.config import settings
from src.core.database import Database
from src.core.exceptions import ConflictError, NotFoundError
from src.core.logging import get_logger
from src.modules.invoices import repository
from src.modules.invoices.schemas import InvoiceSearchParams
from src.modules.medical_records.repository import medical_record_repository
from src.shared.enums import InvoiceStatus
from src.shared.schemas import Page, PaginationMeta
from src.shared.validators import parse_positive_int, validate_model

logger = get_logger(__name__)


class InvoiceService:
    def __init__(self, db: Database):
        self.db = db
        self.repository = repository.invoice_repository(db)

    async def create_invoice(self, medical_record_id: int) -> dict[str, Any]:
        """Bill an examination: examination fee plus the sum of its prescriptions.

        Every read and the insert share one transaction; any failure leaves no
        invoice behind.
        """
        try:
            async with self.db.transaction():
                record = await medical_record_repository(self.db).find_by_id(medical_record_id)
                if record is None:
                    raise NotFoundError("Medical record not found")
                if await repository.find_by_medical_record(self.db, medical_record_id) is not None:
                    raise ConflictError("Invoice already exists for this medical record")

                medicine_fee = await repository.medicine_fee(self.db, medical_record_id)
                examination_fee = await self._examination_fee()
                created = await self.repository.create(
                    {
                        "medical_record_id": medical_record_id,
                        "examination_fee": examination_fee,
                        "medicine_fee": medicine_fee,
                        "total_fee": examination_fee + medicine_fee,
                        "status": InvoiceStatus.PENDING,
                    }
                )
                invoice = await self._detail(created["id"])
        except IntegrityError as exc:
            raise ConflictError("Invoice already exists for this medical record") from exc

        logger.info(
            "invoice_created",
            invoice_id=created["id"],
            medical_record_id=medical_record_id,
            total_fee=created["total_fee"],
        )
        return invoice

    async def get_invoice(self, invoice_id: int) -> dict[str, Any]:
        invoice = await self._detail(invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice not found")
        return invoice

    async def list_invoices(self, params: InvoiceSearchParams | Mapping[str, Any]) -> Page[Any]:
        params = validate_model(InvoiceSearchParams, params)
        criteria: dict[str, Any] = {"m.patient_id": params.patient_id, "i.status": params.status}
        if params.date is not None:
            start = datetime.combine(params.date, time.min, tzinfo=timezone.utc)
            criteria["i.payment_date"] = {"gte": start, "lt": start + timedelta(days=1)}

        rows = await repository.list_invoices(self.db, criteria, params.limit, params.page)
        total = await repository.count_invoices(self.db, criteria)
        return Page[Any](data=rows, pagination=PaginationMeta(total=total, page=params.page, limit=params.limit))

    async def update_status(self, invoice_id: int, status: InvoiceStatus) -> dict[str, Any]:
        if await self.repository.find_by_id(invoice_id) is None:
            raise NotFoundError("Invoice not found")
        values: dict[str, Any] = {"status": InvoiceStatus(status)}
        if values["status"] is InvoiceStatus.PAID:
            values["payment_date"] = datetime.now(timezone.utc)
        await self.repository.update(invoice_id, values)
        logger.info("invoice_status_changed", invoice_id=invoice_id, status=values["status"].value)
        return await self.get_invoice(invoice_id)

    async def _examination_fee(self) -> int:
        value = await repository.setting_value(self.db, repository.EXAMINATION_FEE_KEY)
        fee = parse_positive_int(value)
        return fee if fee is not None else settings.default_examination_fee

    async def _detail(self, invoice_id: int) -> dict[str, Any] | None:
        invoice = await repository.get_summary(self.db, invoice_id)
        if invoice is not None:
            invoice["medicines"] = await repository.get_items(self.db, invoice["medical_record_id"])
        return invoice
