"""Invoice schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, PositiveInt

from src.shared.enums import InvoiceStatus
from src.shared.validators import IsoDate, PageParams


class InvoiceItem(BaseModel):
    medicine_name: str
    quantity: int
    unit_price: int
    total_price: int


class InvoicePublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    medical_record_id: int
    examination_fee: int
    medicine_fee: int
    total_fee: int
    status: InvoiceStatus
    payment_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class InvoiceSummary(InvoicePublic):
    patient_id: int | None = None
    patient_name: str | None = None
    gender: str | None = None
    birth_year: int | None = None
    symptoms: str | None = None
    disease_name: str | None = None


class InvoiceDetail(InvoiceSummary):
    medicines: list[InvoiceItem] = Field(default_factory=list)


class InvoiceCreate(BaseModel):
    medical_record_id: int = Field(gt=0)


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus


class InvoiceSearchParams(PageParams):
    date: IsoDate | None = None
    patient_id: PositiveInt | None = None
    status: InvoiceStatus | None = None
