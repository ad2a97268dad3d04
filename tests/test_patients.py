from datetime import date

import pytest
import pytest_asyncio

from src.core.exceptions import NotFoundError, ValidationError
from src.modules.appointments.service import AppointmentService
from src.modules.medical_records.models import MedicalRecord
from src.modules.patients.models import Patient
from src.modules.patients.service import PatientService


@pytest.fixture
def service(db):
    return PatientService(db)


@pytest_asyncio.fixture
async def history(db, db_session, people):
    db_session.add_all(
        [
            MedicalRecord(patient_id=people["alice"], staff_id=people["doctor"], examination_date=date(2024, 5, 1)),
            MedicalRecord(patient_id=people["alice"], staff_id=people["doctor"], examination_date=date(2024, 6, 3)),
            MedicalRecord(patient_id=people["bob"], staff_id=people["doctor"], examination_date=date(2024, 6, 3)),
        ]
    )
    await db_session.commit()

    appointments = AppointmentService(db)
    for day, patient in (("2024-06-03", "alice"), ("2024-06-10", "alice"), ("2024-06-03", "bob")):
        await appointments.create_appointment(
            {
                "patient_id": people[patient],
                "doctor_id": people["doctor"],
                "appointment_date": day,
                "time_slot": "09:00" if patient == "alice" else "10:00",
                "reason": "Review",
            }
        )
    return people


@pytest.mark.asyncio
async def test_list_patients_orders_by_name_and_pages(service, people):
    page = await service.list_patients({"limit": "1", "page": "2"})
    assert [row["full_name"] for row in page.data] == ["Bob Tran"]
    assert page.pagination.total == 2
    assert page.pagination.total_pages == 2


@pytest.mark.asyncio
async def test_name_search_is_case_insensitive_substring(service, people):
    page = await service.list_patients({"name": "nguy"})
    assert [row["full_name"] for row in page.data] == ["Alice Nguyen"]
    assert page.pagination.total == 1

    everyone = await service.list_patients({"name": "  "})
    assert everyone.pagination.total == 2


@pytest.mark.asyncio
async def test_name_search_treats_wildcards_literally(db_session, service, people):
    db_session.add(Patient(full_name="Ha_Linh"))
    await db_session.commit()

    page = await service.list_patients({"name": "_"})
    assert [row["full_name"] for row in page.data] == ["Ha_Linh"]

    assert (await service.list_patients({"name": "%"})).pagination.total == 0


@pytest.mark.asyncio
async def test_list_patients_rejects_bad_paging(service):
    with pytest.raises(ValidationError) as exc_info:
        await service.list_patients({"page": str(10**20), "limit": "0"})
    assert {error["field"] for error in exc_info.value.errors} == {"page", "limit"}


@pytest.mark.asyncio
async def test_medical_history_lists_newest_first(service, history):
    records = await service.medical_history(history["alice"])
    assert [str(row["examination_date"]) for row in records] == ["2024-06-03", "2024-05-01"]
    assert {row["patient_name"] for row in records} == {"Alice Nguyen"}


@pytest.mark.asyncio
async def test_patient_appointments_list_latest_date_first(service, history):
    rows = await service.appointments(history["alice"])
    assert [str(row["appointment_date"]) for row in rows] == ["2024-06-10", "2024-06-03"]
    assert {row["patient_id"] for row in rows} == {history["alice"]}


@pytest.mark.asyncio
async def test_history_of_unknown_patient_is_not_found(service):
    with pytest.raises(NotFoundError):
        await service.medical_history(999)
    with pytest.raises(NotFoundError):
        await service.appointments(999)


@pytest.mark.asyncio
async def test_patient_history_routes(client, history):
    alice = history["alice"]

    records = await client.get(f"/api/v1/patients/{alice}/medical-history")
    assert records.status_code == 200
    assert len(records.json()["data"]) == 2

    appointments = await client.get(f"/api/v1/patients/{alice}/appointments")
    assert appointments.status_code == 200
    assert [row["appointment_date"] for row in appointments.json()["data"]] == ["2024-06-10", "2024-06-03"]

    missing = await client.get("/api/v1/patients/999/appointments")
    assert missing.status_code == 404
    assert missing.json() == {"success": False, "message": "Patient not found"}


@pytest.mark.asyncio
async def test_patient_name_search_route(client, people):
    response = await client.get("/api/v1/patients", params={"name": "TRAN"})
    assert response.status_code == 200
    assert [row["full_name"] for row in response.json()["data"]] == ["Bob Tran"]

    response = await client.get("/api/v1/patients", params={"page": str(10**20)})
    assert response.status_code == 422
    assert [error["field"] for error in response.json()["errors"]] == ["page"]
