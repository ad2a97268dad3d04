from pathlib import Path
import os
import sys

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from src.core.database import Base, Database, get_db  # noqa: E402
from src.modules.appointments import models as appointment_models  # noqa: E402,F401
from src.modules.invoices import models as invoice_models  # noqa: E402,F401
from src.modules.medical_records import models as medical_record_models  # noqa: E402,F401
from src.modules.patients.models import Patient, Staff  # noqa: E402
from src.shared.enums import StaffRole  # noqa: E402


@pytest_asyncio.fixture
async def db_session():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    SessionLocal = async_sessionmaker(engine, expire_on_commit=False)
    async with SessionLocal() as session:
        yield session
    await engine.dispose()


@pytest_asyncio.fixture
async def db(db_session):
    return Database(db_session)


@pytest_asyncio.fixture
async def people(db_session):
    """Two patients and two doctors, committed."""
    alice = Patient(full_name="Alice Nguyen", gender="female", birth_year=1990, phone="0901000001")
    bob = Patient(full_name="Bob Tran", gender="male", birth_year=1985, phone="0901000002")
    doctor = Staff(full_name="Dr. Le", role=StaffRole.DOCTOR, email="le@clinic.test")
    other_doctor = Staff(full_name="Dr. Pham", role=StaffRole.DOCTOR, email="pham@clinic.test")
    db_session.add_all([alice, bob, doctor, other_doctor])
    await db_session.commit()
    return {
        "alice": alice.id,
        "bob": bob.id,
        "doctor": doctor.id,
        "other_doctor": other_doctor.id,
    }


@pytest_asyncio.fixture
async def client(db_session):
    from main import app

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()
