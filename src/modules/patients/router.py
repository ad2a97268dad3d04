"""Patient routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from src.core.database import Database, get_database
from src.modules.appointments.schemas import AppointmentPublic
from src.modules.medical_records.schemas import MedicalRecordPublic
from src.modules.patients.schemas import PatientCreate, PatientPublic, PatientSearchParams, PatientUpdate
from src.modules.patients.service import PatientService
from src.shared.schemas import PaginatedEnvelope, ResponseEnvelope

router = APIRouter(prefix="/api/v1/patients", tags=["patients"])


def get_service(db: Database = Depends(get_database)) -> PatientService:
    return PatientService(db)


@router.get("", response_model=PaginatedEnvelope[PatientPublic])
async def list_patients(
    params: Annotated[PatientSearchParams, Query()],
    service: PatientService = Depends(get_service),
) -> PaginatedEnvelope[PatientPublic]:
    result = await service.list_patients(params)
    return PaginatedEnvelope[PatientPublic].from_page(result)


@router.get("/{patient_id}", response_model=ResponseEnvelope[PatientPublic])
async def get_patient(patient_id: int, service: PatientService = Depends(get_service)):
    return ResponseEnvelope(data=await service.get_patient(patient_id))


@router.get("/{patient_id}/medical-history", response_model=ResponseEnvelope[list[MedicalRecordPublic]])
async def patient_medical_history(patient_id: int, service: PatientService = Depends(get_service)):
    return ResponseEnvelope(data=await service.medical_history(patient_id))


@router.get("/{patient_id}/appointments", response_model=ResponseEnvelope[list[AppointmentPublic]])
async def patient_appointments(patient_id: int, service: PatientService = Depends(get_service)):
    return ResponseEnvelope(data=await service.appointments(patient_id))


@router.post("", response_model=ResponseEnvelope[PatientPublic], status_code=status.HTTP_201_CREATED)
async def create_patient(payload: PatientCreate, service: PatientService = Depends(get_service)):
    patient = await service.create_patient(payload)
    return ResponseEnvelope(data=patient, message="Patient created")


@router.put("/{patient_id}", response_model=ResponseEnvelope[PatientPublic])
async def update_patient(
    patient_id: int,
    payload: PatientUpdate,
    service: PatientService = Depends(get_service),
):
    patient = await service.update_patient(patient_id, payload)
    return ResponseEnvelope(data=patient, message="Patient updated")


@router.delete("/{patient_id}", response_model=ResponseEnvelope[None])
async def delete_patient(patient_id: int, service: PatientService = Depends(get_service)):
    await service.delete_patient(patient_id)
    return ResponseEnvelope(message="Patient deleted")
