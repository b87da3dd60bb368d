import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')
os.environ.setdefault('SEED_DEMO_DATA', 'false')

from medibook.database import Base  # noqa: E402
from medibook.models.appointment import Appointment  # noqa: E402
from medibook.models.availability import AvailabilityOverride  # noqa: E402
from medibook.models.doctor import Doctor  # noqa: E402

ALL_WEEK = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday']
TABLES = [Doctor.__table__, Appointment.__table__, AvailabilityOverride.__table__]


@pytest.fixture
def db_engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine, tables=TABLES)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine, tables=list(reversed(TABLES)))
        engine.dispose()


@pytest.fixture
def db(db_engine):
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_doctor(db):
    def _make_doctor(doctor_id: str = '1', **overrides) -> Doctor:
        fields = {
            'id': doctor_id,
            'name': 'Dr. Prakash Das',
            'specialization': 'Psychologist',
            'experience': '8 years',
            'consultation_fee': 500,
            'location': 'Apollo Hospital, Delhi',
            'working_days': ALL_WEEK,
            'working_hours': '10:00 AM - 7:00 PM',
            'is_available': True,
        }
        fields.update(overrides)
        doctor = Doctor(**fields)
        db.add(doctor)
        db.commit()
        db.refresh(doctor)
        return doctor

    return _make_doctor
