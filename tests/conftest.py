import os

# Must be set before surgery_scheduler.database is imported
os.environ["SURGERY_DATABASE_URL"] = "sqlite://"
os.environ["SURGERY_ROOM_STORE_PATH"] = ""
os.environ["SURGERY_LOG_LEVEL"] = "WARNING"

import pytest
from sqlalchemy.orm import sessionmaker

from surgery_scheduler.database import make_engine, init_db
from surgery_scheduler.models import Surgery


@pytest.fixture
def make_case():
    def _make(date="2024-03-04", patient_name="Ali Veli", **kw) -> Surgery:
        kw.setdefault("operation", "TUR-P")
        return Surgery(date=date, patient_name=patient_name, **kw)
    return _make


@pytest.fixture
def session_factory():
    engine = make_engine("sqlite://")
    init_db(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()
