import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import tripledger.models  # noqa: F401
from tripledger.db.base import Base
from tripledger.db.session import get_db
from tripledger.main import app
from tripledger.models import Trip, TripParticipant, User
from tripledger.schemas.trip import TripMember

SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


ALICE_ID = "00000000-0000-0000-0000-000000000001"
BOB_ID = "00000000-0000-0000-0000-000000000002"
CAROL_ID = "00000000-0000-0000-0000-000000000003"
OUTSIDER_ID = "00000000-0000-0000-0000-000000000009"


@pytest.fixture
def roster():
    return [
        TripMember(user_id=ALICE_ID, full_name="Alice"),
        TripMember(user_id=BOB_ID, full_name="Bob"),
        TripMember(user_id=CAROL_ID, full_name="Carol"),
    ]


@pytest.fixture
def trip(db, roster):
    """EUR trip with Alice, Bob and Carol, joined in that order."""
    trip = Trip(id=str(uuid.uuid4()), name="Lisbon", base_currency="EUR")
    db.add(trip)
    joined = datetime(2025, 2, 1, tzinfo=timezone.utc)
    for offset, member in enumerate(roster):
        db.add(User(id=member.user_id, full_name=member.full_name))
        db.add(TripParticipant(
            trip_id=trip.id,
            user_id=member.user_id,
            joined_at=joined + timedelta(minutes=offset),
        ))
    db.add(User(id=OUTSIDER_ID, full_name="Dave"))
    db.commit()
    return trip.id
