"""Patient service layer."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from src.core.database import Database
from src.core.exceptions import NotFoundError
from src.modules.patients import repository
from src.modules.patients.repository import patient_repository
from src.modules.patients.schemas import PatientCreate, PatientSearchParams, PatientUpdate
from src.shared.schemas import Page, PaginationMeta
from src.shared.validators import validate_model


class PatientService:
    def __init__(self, db: Database):
        self.db = db
        self.repository = patient_repository(db)

    async def list_patients(self, params: PatientSearchParams | Mapping[str, Any] | None = None) -> Page[Any]:
        """Patients ordered by name; ``name`` narrows to a case-insensitive substring."""
        params = validate_model(PatientSearchParams, params or {})
        rows = await repository.search_by_name(self.db, params.name, params.limit, params.page)
        total = await repository.count_by_name(self.db, params.name)
        return Page[Any](data=rows, pagination=PaginationMeta(total=total, page=params.page, limit=params.limit))

    async def get_patient(self, patient_id: int) -> dict[str, Any]:
        patient = await self.repository.find_by_id(patient_id)
        if patient is None:
            raise NotFoundError("Patient not found")
        return patient

    async def create_patient(self, payload: PatientCreate) -> dict[str, Any]:
        return await self.repository.create(payload.model_dump(exclude_none=True))

    async def update_patient(self, patient_id: int, payload: PatientUpdate) -> dict[str, Any]:
        await self.get_patient(patient_id)
        updated = await self.repository.update(patient_id, payload.model_dump(exclude_unset=True))
        if updated is None:
            raise NotFoundError("Patient not found")
        return updated

    async def delete_patient(self, patient_id: int) -> None:
        await self.get_patient(patient_id)
        await self.repository.delete(patient_id)

    async def medical_history(self, patient_id: int) -> list[dict[str, Any]]:
        await self.get_patient(patient_id)
        return await repository.medical_history(self.db, patient_id)

    async def appointments(self, patient_id: int) -> list[dict[str, Any]]:
        await self.get_patient(patient_id)
        return await repository.appointments(self.db, patient_id)
