from datetime import date

import pytest
import pytest_asyncio

from src.core.config import settings
from src.core.exceptions import ConflictError, NotFoundError, ValidationError
from src.modules.invoices import repository as invoice_repository
from src.modules.invoices.models import ClinicSetting
from src.modules.invoices.service import InvoiceService
from src.modules.medical_records.models import MedicalRecord, Medicine, Prescription
from src.shared.enums import InvoiceStatus


@pytest_asyncio.fixture
async def record_id(db_session, people):
    paracetamol = Medicine(name="Paracetamol", unit="tablet", price=2000)
    syrup = Medicine(name="Cough syrup", unit="bottle", price=45000)
    db_session.add_all([paracetamol, syrup])
    await db_session.flush()

    record = MedicalRecord(
        patient_id=people["alice"],
        staff_id=people["doctor"],
        examination_date=date(2024, 6, 3),
        symptoms="Cough",
    )
    db_session.add(record)
    await db_session.flush()
    db_session.add_all(
        [
            Prescription(medical_record_id=record.id, medicine_id=paracetamol.id, quantity=10),
            Prescription(medical_record_id=record.id, medicine_id=syrup.id, quantity=1),
        ]
    )
    await db_session.commit()
    return record.id


@pytest.fixture
def service(db):
    return InvoiceService(db)


@pytest.mark.asyncio
async def test_create_invoice_sums_fees(service, record_id):
    invoice = await service.create_invoice(record_id)

    assert invoice["medicine_fee"] == 65000
    assert invoice["examination_fee"] == settings.default_examination_fee
    assert invoice["total_fee"] == 65000 + settings.default_examination_fee
    assert invoice["status"] == InvoiceStatus.PENDING
    assert invoice["patient_name"] == "Alice Nguyen"
    assert {item["medicine_name"] for item in invoice["medicines"]} == {"Paracetamol", "Cough syrup"}


@pytest.mark.asyncio
async def test_examination_fee_comes_from_settings(db_session, service, record_id):
    db_session.add(ClinicSetting(setting_key="examination_fee", setting_value="50000"))
    await db_session.commit()

    invoice = await service.create_invoice(record_id)
    assert invoice["examination_fee"] == 50000
    assert invoice["total_fee"] == 115000


@pytest.mark.asyncio
async def test_one_invoice_per_record(service, record_id):
    await service.create_invoice(record_id)
    with pytest.raises(ConflictError):
        await service.create_invoice(record_id)


@pytest.mark.asyncio
async def test_missing_record_is_not_found(service):
    with pytest.raises(NotFoundError):
        await service.create_invoice(9999)


@pytest.mark.asyncio
async def test_failure_after_insert_rolls_back(monkeypatch, db, service, record_id):
    async def _broken_items(*_args, **_kwargs):
        raise RuntimeError("items query failed")

    monkeypatch.setattr(invoice_repository, "get_items", _broken_items)

    with pytest.raises(RuntimeError):
        await service.create_invoice(record_id)

    assert await invoice_repository.invoice_repository(db).count() == 0
    assert not db.in_transaction


@pytest.mark.asyncio
async def test_mark_paid_stamps_payment_date(service, record_id):
    invoice = await service.create_invoice(record_id)
    assert invoice["payment_date"] is None

    paid = await service.update_status(invoice["id"], InvoiceStatus.PAID)
    assert paid["status"] == InvoiceStatus.PAID
    assert paid["payment_date"] is not None

    with pytest.raises(NotFoundError):
        await service.update_status(999, InvoiceStatus.PAID)


@pytest.mark.asyncio
async def test_list_invoices_filters(service, record_id, people):
    invoice = await service.create_invoice(record_id)

    pending = await service.list_invoices({"status": "pending"})
    assert [row["id"] for row in pending.data] == [invoice["id"]]
    assert (await service.list_invoices({"status": "paid"})).pagination.total == 0
    assert (await service.list_invoices({"patient_id": str(people["bob"])})).pagination.total == 0

    await service.update_status(invoice["id"], InvoiceStatus.PAID)
    paid = await service.get_invoice(invoice["id"])
    paid_day = str(paid["payment_date"])[:10]
    assert (await service.list_invoices({"date": paid_day})).pagination.total == 1
    assert (await service.list_invoices({"date": "1999-01-01"})).pagination.total == 0


@pytest.mark.asyncio
async def test_list_invoices_rejects_bad_params(service):
    with pytest.raises(ValidationError) as exc_info:
        await service.list_invoices({"status": "refunded", "date": "June"})
    assert {error["field"] for error in exc_info.value.errors} == {"status", "date"}
