"""FastAPI application entrypoint."""

from fastapi import FastAPI

from src.core.config import settings
from src.core.exceptions import register_exception_handlers
from src.core.logging import configure_logging
from src.modules.appointments.router import router as appointments_router
from src.modules.invoices.router import router as invoices_router
from src.modules.medical_records.router import router as medical_records_router
from src.modules.patients.router import router as patients_router
from src.modules.statistics.router import router as statistics_router


def create_app() -> FastAPI:
    configure_logging(settings.log_level, settings.log_json)
    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version="0.1.0",
    )
    register_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, object]:
        return {"success": True, "status": "ok", "environment": settings.environment}

    app.include_router(patients_router)
    app.include_router(appointments_router)
    app.include_router(medical_records_router)
    app.include_router(invoices_router)
    app.include_router(statistics_router)

    return app


app = create_app()
