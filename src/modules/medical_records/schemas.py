"""Medical record schemas."""

from datetime import date, datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PositiveInt

from src.modules.invoices.schemas import InvoicePublic
from src.shared.validators import DateRangeParams, IsoDate, PageParams, RequestModel

TEXT_MAX_LENGTH = 2000
USAGE_MAX_LENGTH = 255
MAX_QUANTITY = 1000
KEYWORD_MAX_LENGTH = 100

ClinicalText = Annotated[str, Field(max_length=TEXT_MAX_LENGTH)]


class PrescriptionPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    medical_record_id: int
    medicine_id: int
    quantity: int
    usage: str | None = None
    medicine_name: str | None = None
    medicine_unit: str | None = None
    medicine_price: int | None = None
    created_at: datetime | None = None


class MedicalRecordPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    patient_id: int
    staff_id: int
    disease_type_id: int | None = None
    examination_date: date
    symptoms: str | None = None
    diagnosis: str | None = None
    notes: str | None = None
    patient_name: str | None = None
    doctor_name: str | None = None
    disease_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class MedicalRecordDetail(MedicalRecordPublic):
    prescriptions: list[PrescriptionPublic] = Field(default_factory=list)
    invoice: InvoicePublic | None = None


class MedicalRecordCreate(RequestModel):
    patient_id: PositiveInt
    staff_id: PositiveInt
    disease_type_id: PositiveInt | None = None
    examination_date: IsoDate
    symptoms: ClinicalText | None = None
    diagnosis: ClinicalText | None = None
    notes: ClinicalText | None = None


class PrescriptionCreate(RequestModel):
    medicine_id: PositiveInt
    quantity: int = Field(ge=1, le=MAX_QUANTITY)
    usage: str | None = Field(None, max_length=USAGE_MAX_LENGTH)


class MedicalRecordSearchParams(DateRangeParams, PageParams):
    patient_id: PositiveInt | None = None
    staff_id: PositiveInt | None = None
    disease_type_id: PositiveInt | None = None
    keyword: str | None = Field(None, max_length=KEYWORD_MAX_LENGTH)
