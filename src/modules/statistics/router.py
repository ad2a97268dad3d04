"""Statistics routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from src.core.database import Database, get_database
from src.modules.statistics.schemas import (
    DiseaseCount,
    MedicineUsage,
    PatientVisitPeriod,
    RevenuePeriod,
    StatisticsParams,
)
from src.modules.statistics.service import StatisticsService
from src.shared.schemas import ResponseEnvelope

router = APIRouter(prefix="/api/v1/statistics", tags=["statistics"])

Params = Annotated[StatisticsParams, Query()]


def get_service(db: Database = Depends(get_database)) -> StatisticsService:
    return StatisticsService(db)


@router.get("/revenue", response_model=ResponseEnvelope[list[RevenuePeriod]])
async def revenue(params: Params, service: StatisticsService = Depends(get_service)):
    return ResponseEnvelope(data=await service.revenue(params))


@router.get("/patients", response_model=ResponseEnvelope[list[PatientVisitPeriod]])
async def patient_visits(params: Params, service: StatisticsService = Depends(get_service)):
    return ResponseEnvelope(data=await service.patient_visits(params))


@router.get("/diseases", response_model=ResponseEnvelope[list[DiseaseCount]])
async def disease_counts(params: Params, service: StatisticsService = Depends(get_service)):
    return ResponseEnvelope(data=await service.disease_counts(params))


@router.get("/medicines", response_model=ResponseEnvelope[list[MedicineUsage]])
async def medicine_usage(params: Params, service: StatisticsService = Depends(get_service)):
    return ResponseEnvelope(data=await service.medicine_usage(params))
