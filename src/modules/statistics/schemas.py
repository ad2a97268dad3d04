"""Statistics schemas."""

from typing import Literal

from pydantic import BaseModel

from src.shared.validators import DateRangeParams


class StatisticsParams(DateRangeParams):
    group_by: Literal["day", "month", "year"] = "day"


class RevenuePeriod(BaseModel):
    time_period: str
    total_invoices: int
    total_examination_fee: int
    total_medicine_fee: int
    total_revenue: int


class PatientVisitPeriod(BaseModel):
    time_period: str
    unique_patients: int
    total_visits: int


class DiseaseCount(BaseModel):
    disease_name: str
    total_cases: int
    unique_patients: int


class MedicineUsage(BaseModel):
    medicine_name: str
    total_quantity: int
    unique_patients: int
    total_revenue: int
