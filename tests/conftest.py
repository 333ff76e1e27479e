# tests/conftest.py

import os

# Point the app at a private in-memory database before anything imports settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("SCORING_SCHEME", None)
os.environ.pop("SCORE_RANGE_POLICY", None)
os.environ.pop("COURSE_UNITS", None)

from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook

from app.core.database import Base, SessionLocal, engine, init_db
from app.main import app
from app.services.transcript import TranscriptService

COURSE_UNITS = ["MATHEMATICS", "TRADE THEORY", "DIGITAL LITERACY"]


@pytest.fixture
def tables():
    init_db()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(tables):
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def registry(db):
    return TranscriptService(db, COURSE_UNITS)


@pytest.fixture
def client(tables):
    with TestClient(app) as test_client:
        yield test_client


def build_workbook(rows):
    """Serialize header + rows into .xlsx bytes; rows[0] is the header row."""
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    output = BytesIO()
    wb.save(output)
    return output.getvalue()


@pytest.fixture
def make_xlsx():
    return build_workbook


@pytest.fixture
def sample_raw_row():
    return {
        "name": "Jane Roe",
        "admissionNumber": "ADM/2024/099",
        "course": "Welding",
        "MATHEMATICS_CAT": 20,
        "MATHEMATICS_EXAM": 45,
    }
