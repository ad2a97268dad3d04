"""Medical record service layer."""

from __future__ import annotations

from collections.abc import Mapping
from functools import partial
from typing import Any

from src.core.database import Database
from src.core.exceptions import NotFoundError, ValidationError
from src.core.logging import get_logger
from src.modules.medical_records import repository
from src.modules.medical_records.schemas import MedicalRecordCreate, MedicalRecordSearchParams, PrescriptionCreate
from src.modules.medical_records.validators import (
    build_search_criteria,
    validate_create_medical_record,
    validate_prescription,
    validate_search_params,
)
from src.modules.patients.repository import patient_repository, staff_repository
from src.shared.pagination import paginate
from src.shared.schemas import Page
from src.shared.validators import field_error

logger = get_logger(__name__)


class MedicalRecordService:
    def __init__(self, db: Database):
        self.db = db
        self.repository = repository.medical_record_repository(db)

    async def search(self, params: MedicalRecordSearchParams | Mapping[str, Any]) -> Page[Any]:
        errors = validate_search_params(params)
        if errors:
            raise ValidationError(errors)
        criteria, page, limit = build_search_criteria(params)
        return await paginate(
            partial(repository.search, self.db),
            partial(repository.count_search, self.db),
            criteria,
            page,
            limit,
        )

    async def get_detail(self, record_id: int) -> dict[str, Any]:
        record = await repository.get_detail(self.db, record_id)
        if record is None:
            raise NotFoundError("Medical record not found")
        record["prescriptions"] = await repository.get_prescriptions(self.db, record_id)
        record["invoice"] = await repository.get_invoice(self.db, record_id)
        return record

    async def create_medical_record(self, data: MedicalRecordCreate | Mapping[str, Any]) -> dict[str, Any]:
        errors = validate_create_medical_record(data)
        if errors:
            raise ValidationError(errors)
        payload = data if isinstance(data, MedicalRecordCreate) else MedicalRecordCreate.model_validate(data)
        values = payload.model_dump(exclude_none=True)

        async with self.db.transaction():
            await self._ensure_references(values)
            created = await self.repository.create(values)

        logger.info("medical_record_created", medical_record_id=created["id"], patient_id=values["patient_id"])
        return await self.get_detail(created["id"])

    async def add_prescription(self, record_id: int, data: PrescriptionCreate | Mapping[str, Any]) -> dict[str, Any]:
        if await self.repository.find_by_id(record_id) is None:
            raise NotFoundError("Medical record not found")
        errors = validate_prescription(data)
        if errors:
            raise ValidationError(errors)

        payload = data if isinstance(data, PrescriptionCreate) else PrescriptionCreate.model_validate(data)
        async with self.db.transaction():
            if await repository.medicine_repository(self.db).find_by_id(payload.medicine_id) is None:
                raise ValidationError([field_error("medicine_id", "Medicine not found")])
            created = await repository.prescription_repository(self.db).create(
                {"medical_record_id": record_id, **payload.model_dump()}
            )

        logger.info("prescription_added", medical_record_id=record_id, prescription_id=created["id"])
        prescriptions = await repository.get_prescriptions(self.db, record_id)
        return next(row for row in prescriptions if row["id"] == created["id"])

    async def _ensure_references(self, values: Mapping[str, Any]) -> None:
        errors = []
        if await patient_repository(self.db).find_by_id(values["patient_id"]) is None:
            errors.append(field_error("patient_id", "Patient not found"))
        if await staff_repository(self.db).find_by_id(values["staff_id"]) is None:
            errors.append(field_error("staff_id", "Staff member not found"))
        disease_type_id = values.get("disease_type_id")
        if disease_type_id and await repository.disease_type_repository(self.db).find_by_id(disease_type_id) is None:
            errors.append(field_error("disease_type_id", "Disease type not found"))
        if errors:
            raise ValidationError(errors)
