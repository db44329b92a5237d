import os
from datetime import date, time

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from backend.database import Base  # noqa: E402
from backend.models.appointment import Appointment  # noqa: E402
from backend.models.doctor import Doctor  # noqa: E402
from backend.models.patient import Patient  # noqa: E402
from backend.models.user import User  # noqa: E402

SCHEDULE_DAY = date(2025, 8, 4)


@pytest.fixture
def db_session():
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    tables = [User.__table__, Doctor.__table__, Patient.__table__, Appointment.__table__]
    Base.metadata.create_all(bind=engine, tables=tables)

    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine, tables=list(reversed(tables)))
        engine.dispose()


@pytest.fixture
def doctors(db_session):
    wong = Doctor(name='Dr. Wong')
    smith = Doctor(name='Dr. Smith')
    db_session.add_all([wong, smith])
    db_session.commit()
    return wong, smith


@pytest.fixture
def patient(db_session):
    record = Patient(lastname='Nguyen', firstname='Ana', patient_status='active')
    db_session.add(record)
    db_session.commit()
    return record


@pytest.fixture
def book(db_session, patient):
    def _book(provider, start: time, duration_minutes: int, day: date = SCHEDULE_DAY, status: str = 'booked'):
        appointment = Appointment(
            patient_id=patient.id,
            provider_id=provider.id,
            appointment_date=day,
            start_time=start,
            duration_minutes=duration_minutes,
            reason='',
            status=status,
        )
        db_session.add(appointment)
        db_session.commit()
        db_session.refresh(appointment)
        return appointment

    return _book
