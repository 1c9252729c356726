"""
Shared test fixtures.

Every test gets its own file-backed SQLite database under tmp_path, so tests
never share state and concurrent transactions behave like a real file store.
Async code is driven with asyncio.run (workflow tests) or through the
TestClient portal (HTTP tests), so no async pytest plugin is needed.
"""
import asyncio
from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from medinv.core.config import Settings
from medinv.core.security import create_access_token, get_password_hash
from medinv.db.database import Database
from medinv.db.init_db import init_db
from medinv.main import create_app
from medinv.models import (
    Employee, Inventory, MedicalLog, Medicine, Patient, StaffAccount, Supplier,
)

TEST_SECRET = "test-secret-key-not-for-production"
STAFF_USERNAME = "pharmacist"
STAFF_PASSWORD = "Str0ng!Passw0rd"


def seed_pharmacy(connection):
    """
    Patients 1-2, supplier 1, employee 1, medicines 1-3.
    Stock: medicine 1 -> 20, medicine 2 -> 5, medicine 3 has no Inventory row.
    """
    session = Session(bind=connection)
    session.add_all([
        Patient(patient_id=1, name="John Doe", email="john.doe@example.com"),
        Patient(patient_id=2, name="Jane Smith", email="jane.smith@example.com"),
        Supplier(supplier_id=1, name="MediSupply Inc."),
        Employee(employee_id=1, name="Dr. Mike Johnson", role="Doctor"),
        Medicine(medicine_id=1, name="Paracetamol", price=Decimal("9.99"), unit="bottle"),
        Medicine(medicine_id=2, name="Amoxicillin", price=Decimal("19.99"), unit="pack"),
        Medicine(medicine_id=3, name="Loratadine", price=Decimal("15.50"), unit="box"),
    ])
    session.flush()
    session.add_all([
        Inventory(inventory_id=1, medicine_id=1, quantity=20, location="Shelf A1"),
        Inventory(inventory_id=2, medicine_id=2, quantity=5, location="Shelf B2"),
        MedicalLog(patient_id=1, medicine_id=1, log_date=date(2025, 5, 1), dosage="1 tablet"),
        MedicalLog(patient_id=1, medicine_id=1, log_date=date(2025, 5, 15), dosage="2 tablets"),
        StaffAccount(username=STAFF_USERNAME, password=get_password_hash(STAFF_PASSWORD), employee_id=1),
    ])
    session.flush()
    session.close()


class DbProbe:
    """Read-side helpers for assertions."""

    async def count(self, database: Database, model, **filters) -> int:
        statement = select(func.count().label("n")).select_from(model)
        for column, value in filters.items():
            statement = statement.where(getattr(model, column) == value)
        row = await database.fetch_one(statement)
        return row["n"]

    async def stock(self, database: Database, medicine_id: int) -> int:
        row = await database.fetch_one(
            select(func.coalesce(func.sum(Inventory.quantity), 0).label("quantity"))
            .where(Inventory.medicine_id == medicine_id)
        )
        return row["quantity"]


class PoolHolder:
    """
    Fills a one-slot pool: one open transaction plus one parked waiter.
    Use with DB_CONNECTION_LIMIT=1 and DB_QUEUE_LIMIT=1. Must run on the
    database's event loop.
    """

    async def start(self, database: Database) -> None:
        self._release = asyncio.Event()
        held = asyncio.Event()
        self._holder = asyncio.create_task(self._hold(database, held))
        await held.wait()
        self._waiter = asyncio.create_task(database.fetch_one(select(Patient.patient_id)))
        while database.stats()["waiting"] == 0:
            await asyncio.sleep(0)

    async def _hold(self, database: Database, held: asyncio.Event) -> None:
        async with database.transaction():
            held.set()
            await self._release.wait()

    async def stop(self) -> None:
        self._release.set()
        await self._holder
        await self._waiter


@pytest.fixture
def pool_holder():
    return PoolHolder()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'medinv_test.db'}",
        SECRET_KEY=TEST_SECRET,
        DEPLOYMENT_MODE="local",
        DB_ACQUIRE_TIMEOUT_SECONDS=5.0,
    )


@pytest.fixture
def open_database(tmp_path):
    """Async factory: an initialized, seeded Database. Caller must shutdown()."""

    async def _open(**overrides) -> Database:
        values = {
            "DATABASE_URL": f"sqlite+aiosqlite:///{tmp_path / 'medinv_test.db'}",
            "SECRET_KEY": TEST_SECRET,
            "DB_ACQUIRE_TIMEOUT_SECONDS": 5.0,
        }
        values.update(overrides)
        database = Database(Settings(**values))
        await database.init()
        await init_db(database)
        await database.run_sync(seed_pharmacy)
        return database

    return _open


@pytest.fixture
def probe():
    return DbProbe()


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        test_client.portal.call(app.state.database.run_sync, seed_pharmacy)
        yield test_client


@pytest.fixture
def auth_headers(settings):
    token = create_access_token(subject=STAFF_USERNAME, employee_id=1, settings=settings)
    return {"Authorization": f"Bearer {token}"}
