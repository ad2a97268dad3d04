"""Validation entry points for medical record payloads and search parameters."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any

from src.shared.validators import FieldError, parse_model

from .schemas import MedicalRecordCreate, MedicalRecordSearchParams, PrescriptionCreate


def validate_create_medical_record(data: Any) -> list[FieldError]:
    return parse_model(MedicalRecordCreate, data)[1]


def validate_prescription(data: Any) -> list[FieldError]:
    return parse_model(PrescriptionCreate, data)[1]


def validate_search_params(params: Any) -> list[FieldError]:
    return parse_model(MedicalRecordSearchParams, params)[1]


@dataclass(frozen=True)
class MedicalRecordSearchCriteria:
    patient_id: int | None = None
    staff_id: int | None = None
    disease_type_id: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    keyword: str | None = None


def build_search_criteria(
    params: MedicalRecordSearchParams | Mapping[str, Any],
) -> tuple[MedicalRecordSearchCriteria, int, int]:
    if not isinstance(params, MedicalRecordSearchParams):
        params = MedicalRecordSearchParams.model_validate(params)
    criteria = MedicalRecordSearchCriteria(
        patient_id=params.patient_id,
        staff_id=params.staff_id,
        disease_type_id=params.disease_type_id,
        start_date=params.start_date,
        end_date=params.end_date,
        keyword=params.keyword or None,
    )
    return criteria, params.page, params.limit
