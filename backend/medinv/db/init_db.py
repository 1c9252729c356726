"""Create all tables and the first staff account. Run on app startup.

SECURITY: The default admin password is random (not hardcoded) and printed
once. Change it after first login.
In demo deployment mode, empty tables are filled with the demo dataset.
"""
import logging
import secrets

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from medinv.core.security import get_password_hash
from medinv.db.base import Base
from medinv.db.database import Database
from medinv.db.demo_data import seed_demo_data
from medinv import models  # noqa: F401 - register models
from medinv.models import Patient, StaffAccount

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_USERNAME = "admin"


def _create_default_admin(session: Session) -> None:
    account_count = session.scalar(select(func.count()).select_from(StaffAccount))
    if account_count:
        return

    default_password = secrets.token_urlsafe(16)
    session.add(StaffAccount(username=DEFAULT_ADMIN_USERNAME, password=get_password_hash(default_password)))
    session.flush()

    print("\n" + "=" * 70)
    print("DEFAULT STAFF ACCOUNT CREATED")
    print("=" * 70)
    print(f"Username: {DEFAULT_ADMIN_USERNAME}")
    print(f"Password: {default_password}")
    print("\nChange this password immediately after first login!")
    print("=" * 70 + "\n")


def _setup(connection, demo: bool) -> None:
    Base.metadata.create_all(bind=connection)
    session = Session(bind=connection)
    try:
        _create_default_admin(session)
        if demo:
            patient_count = session.scalar(select(func.count()).select_from(Patient))
            if not patient_count:
                seed_demo_data(session)
                logger.info("Demo dataset seeded")
    finally:
        session.close()


async def init_db(database: Database) -> None:
    demo = database.settings.DEPLOYMENT_MODE == "demo"
    await database.run_sync(_setup, demo)
    logger.info(f"Database schema ready (deployment mode: {database.settings.DEPLOYMENT_MODE})")
