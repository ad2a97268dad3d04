from datetime import date, datetime, timedelta, timezone

import pytest
import pytest_asyncio

from src.core.config import settings
from src.core.exceptions import ValidationError
from src.modules.invoices.service import InvoiceService
from src.modules.medical_records.models import DiseaseType, MedicalRecord, Medicine, Prescription
from src.modules.statistics.repository import period_expression
from src.modules.statistics.service import StatisticsService
from src.shared.enums import InvoiceStatus


@pytest.fixture
def service(db):
    return StatisticsService(db)


@pytest_asyncio.fixture
async def clinic(db_session, people):
    flu = DiseaseType(name="Influenza")
    gastritis = DiseaseType(name="Gastritis")
    paracetamol = Medicine(name="Paracetamol", unit="tablet", price=2000)
    omeprazole = Medicine(name="Omeprazole", unit="capsule", price=5000)
    db_session.add_all([flu, gastritis, paracetamol, omeprazole])
    await db_session.flush()

    def record(patient, disease, day):
        return MedicalRecord(
            patient_id=people[patient],
            staff_id=people["doctor"],
            disease_type_id=disease.id,
            examination_date=day,
        )

    records = [
        record("alice", flu, date(2024, 6, 3)),
        record("bob", flu, date(2024, 6, 3)),
        record("alice", gastritis, date(2024, 7, 1)),
        record("alice", flu, date(2023, 12, 30)),
    ]
    db_session.add_all(records)
    await db_session.flush()
    db_session.add_all(
        [
            Prescription(medical_record_id=records[0].id, medicine_id=paracetamol.id, quantity=10),
            Prescription(medical_record_id=records[1].id, medicine_id=paracetamol.id, quantity=5),
            Prescription(medical_record_id=records[2].id, medicine_id=omeprazole.id, quantity=2),
        ]
    )
    await db_session.commit()
    return [row.id for row in records]


def test_period_expression_per_dialect():
    assert period_expression("postgresql", "payment_date", "month") == "TO_CHAR(payment_date, 'YYYY-MM')"
    assert period_expression("sqlite", "examination_date", "year") == "strftime('%Y', examination_date)"


@pytest.mark.asyncio
async def test_patient_visits_grouped_by_month_and_year(service, clinic):
    monthly = await service.patient_visits({"group_by": "month"})
    assert monthly == [
        {"time_period": "2024-07", "unique_patients": 1, "total_visits": 1},
        {"time_period": "2024-06", "unique_patients": 2, "total_visits": 2},
        {"time_period": "2023-12", "unique_patients": 1, "total_visits": 1},
    ]

    yearly = await service.patient_visits({"group_by": "year"})
    assert [(row["time_period"], row["unique_patients"], row["total_visits"]) for row in yearly] == [
        ("2024", 2, 3),
        ("2023", 1, 1),
    ]


@pytest.mark.asyncio
async def test_patient_visits_default_to_days_within_range(service, clinic):
    rows = await service.patient_visits({"start_date": "2024-06-01", "end_date": "2024-06-30"})
    assert rows == [{"time_period": "2024-06-03", "unique_patients": 2, "total_visits": 2}]


@pytest.mark.asyncio
async def test_disease_counts(service, clinic):
    rows = await service.disease_counts()
    assert rows == [
        {"disease_name": "Influenza", "total_cases": 3, "unique_patients": 2},
        {"disease_name": "Gastritis", "total_cases": 1, "unique_patients": 1},
    ]

    this_year = await service.disease_counts({"start_date": "2024-01-01"})
    assert [(row["disease_name"], row["total_cases"]) for row in this_year] == [
        ("Influenza", 2),
        ("Gastritis", 1),
    ]


@pytest.mark.asyncio
async def test_medicine_usage(service, clinic):
    rows = await service.medicine_usage()
    assert rows == [
        {"medicine_name": "Paracetamol", "total_quantity": 15, "unique_patients": 2, "total_revenue": 30000},
        {"medicine_name": "Omeprazole", "total_quantity": 2, "unique_patients": 1, "total_revenue": 10000},
    ]

    assert await service.medicine_usage({"end_date": "2024-01-01"}) == []


@pytest.mark.asyncio
async def test_revenue_counts_paid_invoices_only(db, service, clinic):
    invoices = InvoiceService(db)
    paid = await invoices.create_invoice(clinic[0])
    await invoices.create_invoice(clinic[1])
    await invoices.update_status(paid["id"], InvoiceStatus.PAID)

    today = datetime.now(timezone.utc).date()
    rows = await service.revenue({"group_by": "year"})
    assert rows == [
        {
            "time_period": str(today.year),
            "total_invoices": 1,
            "total_examination_fee": settings.default_examination_fee,
            "total_medicine_fee": 20000,
            "total_revenue": 20000 + settings.default_examination_fee,
        }
    ]

    same_day = await service.revenue({"start_date": today.isoformat(), "end_date": today.isoformat()})
    assert [row["time_period"] for row in same_day] == [today.isoformat()]

    yesterday = (today - timedelta(days=1)).isoformat()
    assert await service.revenue({"start_date": yesterday, "end_date": yesterday}) == []


@pytest.mark.asyncio
async def test_statistics_params_are_validated(service):
    with pytest.raises(ValidationError) as exc_info:
        await service.revenue({"group_by": "week", "start_date": "2024-06-10", "end_date": "2024-06-01"})
    assert {error["field"] for error in exc_info.value.errors} == {"group_by", "end_date"}


@pytest.mark.asyncio
async def test_statistics_routes(client, clinic):
    response = await client.get("/api/v1/statistics/diseases")
    assert response.status_code == 200
    assert response.json()["data"][0] == {"disease_name": "Influenza", "total_cases": 3, "unique_patients": 2}

    response = await client.get("/api/v1/statistics/medicines", params={"start_date": "2024-07-01"})
    assert [row["medicine_name"] for row in response.json()["data"]] == ["Omeprazole"]

    response = await client.get("/api/v1/statistics/patients", params={"group_by": "year"})
    assert [row["time_period"] for row in response.json()["data"]] == ["2024", "2023"]

    response = await client.get("/api/v1/statistics/revenue")
    assert response.status_code == 200
    assert response.json() == {"success": True, "data": [], "message": None}

    response = await client.get("/api/v1/statistics/revenue", params={"group_by": "week"})
    assert response.status_code == 422
    assert [error["field"] for error in response.json()["errors"]] == ["group_by"]
