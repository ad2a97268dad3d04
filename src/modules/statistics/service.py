"""Statistics service layer."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from src.core.database import Database
from src.modules.statistics import repository
from src.modules.statistics.schemas import StatisticsParams
from src.shared.validators import validate_model

Params = StatisticsParams | Mapping[str, Any] | None


class StatisticsService:
    def __init__(self, db: Database):
        self.db = db

    async def revenue(self, params: Params = None) -> list[dict[str, Any]]:
        """Paid invoices summed per day, month or year of payment."""
        params = validate_model(StatisticsParams, params or {})
        return await repository.revenue(self.db, params.group_by, params.start_date, params.end_date)

    async def patient_visits(self, params: Params = None) -> list[dict[str, Any]]:
        params = validate_model(StatisticsParams, params or {})
        return await repository.patient_visits(self.db, params.group_by, params.start_date, params.end_date)

    async def disease_counts(self, params: Params = None) -> list[dict[str, Any]]:
        params = validate_model(StatisticsParams, params or {})
        return await repository.disease_counts(self.db, params.start_date, params.end_date)

    async def medicine_usage(self, params: Params = None) -> list[dict[str, Any]]:
        params = validate_model(StatisticsParams, params or {})
        return await repository.medicine_usage(self.db, params.start_date, params.end_date)
