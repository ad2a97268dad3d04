"""Appointments API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from src.core.database import Database, get_database
from src.modules.appointments.schemas import (
    AppointmentCreate,
    AppointmentPublic,
    AppointmentSearchParams,
    AppointmentStatusUpdate,
    AppointmentUpdate,
)
from src.modules.appointments.service import AppointmentService
from src.shared.schemas import PaginatedEnvelope, ResponseEnvelope

router = APIRouter(prefix="/api/v1/appointments", tags=["appointments"])


def get_service(db: Database = Depends(get_database)) -> AppointmentService:
    return AppointmentService(db)


@router.get("", response_model=PaginatedEnvelope[AppointmentPublic])
async def search_appointments(
    params: Annotated[AppointmentSearchParams, Query()],
    service: AppointmentService = Depends(get_service),
) -> PaginatedEnvelope[AppointmentPublic]:
    result = await service.search(params)
    return PaginatedEnvelope[AppointmentPublic].from_page(result)


@router.get("/date/{appointment_date}", response_model=ResponseEnvelope[list[AppointmentPublic]])
async def appointments_by_date(appointment_date: str, service: AppointmentService = Depends(get_service)):
    return ResponseEnvelope(data=await service.get_by_date(appointment_date))


@router.get("/{appointment_id}", response_model=ResponseEnvelope[AppointmentPublic])
async def get_appointment(appointment_id: int, service: AppointmentService = Depends(get_service)):
    return ResponseEnvelope(data=await service.get_appointment(appointment_id))


@router.post("", response_model=ResponseEnvelope[AppointmentPublic], status_code=status.HTTP_201_CREATED)
async def create_appointment(
    payload: AppointmentCreate,
    service: AppointmentService = Depends(get_service),
):
    appointment = await service.create_appointment(payload)
    return ResponseEnvelope(data=appointment, message="Appointment created successfully")


@router.put("/{appointment_id}", response_model=ResponseEnvelope[AppointmentPublic])
async def update_appointment(
    appointment_id: int,
    payload: AppointmentUpdate,
    service: AppointmentService = Depends(get_service),
):
    appointment = await service.update_appointment(appointment_id, payload)
    return ResponseEnvelope(data=appointment, message="Appointment updated successfully")


@router.patch("/{appointment_id}/status", response_model=ResponseEnvelope[AppointmentPublic])
async def update_appointment_status(
    appointment_id: int,
    payload: AppointmentStatusUpdate,
    service: AppointmentService = Depends(get_service),
):
    appointment = await service.update_status(appointment_id, payload.status, payload.notes)
    return ResponseEnvelope(data=appointment, message="Appointment status updated successfully")


@router.delete("/{appointment_id}", response_model=ResponseEnvelope[None])
async def delete_appointment(appointment_id: int, service: AppointmentService = Depends(get_service)):
    await service.delete_appointment(appointment_id)
    return ResponseEnvelope(message="Appointment deleted successfully")
