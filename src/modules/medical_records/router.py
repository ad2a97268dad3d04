"""Medical record routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from src.core.database import Database, get_database
from src.modules.medical_records.schemas import (
    MedicalRecordCreate,
    MedicalRecordDetail,
    MedicalRecordPublic,
    MedicalRecordSearchParams,
    PrescriptionCreate,
    PrescriptionPublic,
)
from src.modules.medical_records.service import MedicalRecordService
from src.shared.schemas import PaginatedEnvelope, ResponseEnvelope

router = APIRouter(prefix="/api/v1/medical-records", tags=["medical-records"])


def get_service(db: Database = Depends(get_database)) -> MedicalRecordService:
    return MedicalRecordService(db)


@router.get("", response_model=PaginatedEnvelope[MedicalRecordPublic])
async def search_medical_records(
    params: Annotated[MedicalRecordSearchParams, Query()],
    service: MedicalRecordService = Depends(get_service),
) -> PaginatedEnvelope[MedicalRecordPublic]:
    result = await service.search(params)
    return PaginatedEnvelope[MedicalRecordPublic].from_page(result)


@router.get("/{record_id}", response_model=ResponseEnvelope[MedicalRecordDetail])
async def get_medical_record(record_id: int, service: MedicalRecordService = Depends(get_service)):
    return ResponseEnvelope(data=await service.get_detail(record_id))


@router.post("", response_model=ResponseEnvelope[MedicalRecordDetail], status_code=status.HTTP_201_CREATED)
async def create_medical_record(
    payload: MedicalRecordCreate,
    service: MedicalRecordService = Depends(get_service),
):
    record = await service.create_medical_record(payload)
    return ResponseEnvelope(data=record, message="Medical record created")


@router.post(
    "/{record_id}/prescriptions",
    response_model=ResponseEnvelope[PrescriptionPublic],
    status_code=status.HTTP_201_CREATED,
)
async def add_prescription(
    record_id: int,
    payload: PrescriptionCreate,
    service: MedicalRecordService = Depends(get_service),
):
    prescription = await service.add_prescription(record_id, payload)
    return ResponseEnvelope(data=prescription, message="Prescription added")
