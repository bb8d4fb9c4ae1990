import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from pharmadesk.core.db import Base, get_db  # noqa: E402
from pharmadesk.core.security import create_access_token, hash_password  # noqa: E402
from pharmadesk.main import app  # noqa: E402
from pharmadesk.models import Appointment, Medicine, Patient, User  # noqa: E402

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

API = "/api/dispensary"


@pytest.fixture(scope="session")
def password_hash():
    return hash_password("secret123")


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def users(db, password_hash):
    out = {}
    for role in ("admin", "chemist", "receptionist", "doctor"):
        u = User(username=role, email=f"{role}@example.com", password=password_hash, role=role)
        db.add(u)
        out[role] = u
    db.commit()
    return out


@pytest.fixture
def auth_headers(users):
    def _headers(role="chemist"):
        user = users[role]
        return {"Authorization": f"Bearer {create_access_token(str(user.id), user.role)}"}

    return _headers


@pytest.fixture
def patient(db):
    p = Patient(first_name="Asha", last_name="Rao", phone="9876543210", email="asha@example.com")
    db.add(p)
    db.commit()
    return p


@pytest.fixture
def appointment(db, patient):
    a = Appointment(
        patient_id=patient.id,
        appointment_date=datetime(2024, 3, 1, 10, 30),
        appointment_time="10:30",
        appointment_day=datetime(2024, 3, 1),
        daily_token=7,
        status="scheduled",
    )
    db.add(a)
    db.commit()
    return a


@pytest.fixture
def medicines(db):
    meds = {
        "para500": Medicine(name="Paracetamol", strength="500 mg", form="tablet", selling_price=2.0, stock_qty=100),
        "para650": Medicine(name="Paracetamol", strength="650 mg", form="tablet", selling_price=2.5, stock_qty=50),
        "syrup": Medicine(name="Cough Syrup", selling_price=85.0, stock_qty=5, reorder_level=10),
    }
    db.add_all(meds.values())
    db.commit()
    return meds
