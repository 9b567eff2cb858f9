from datetime import date, datetime, timedelta

import pytest

from himsog import create_app, db
from himsog.models import (
    User, Provider, Service, OperatingHours, BreakTime, Appointment
)
from himsog.models.appointment import STATUS_CONFIRMED
from himsog.models.provider import PROVIDER_VERIFIED
from himsog.models.user import ROLE_PROVIDER

# A Monday and the Sunday before it, far enough ahead to never be "today"
MONDAY = date(2030, 1, 7)
SUNDAY = date(2030, 1, 6)
BEFORE_MONDAY = datetime(2030, 1, 1, 8, 0)


@pytest.fixture
def app():
    app = create_app('testing')
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """Application context for calling the scheduling core directly"""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


def make_user(email='juan.delacruz@gmail.com', name='Juan Dela Cruz', role='USER'):
    user = User(email=email, name=name, password='secret123', role=role)
    db.session.add(user)
    db.session.commit()
    return user


def make_provider(owner=None, slot_duration=30, status=PROVIDER_VERIFIED,
                  hours=None, closed_days=(0,), name='Himsog Family Clinic'):
    """
    Provider with Monday-Saturday 09:00-17:00 unless hours are given.

    hours maps day_of_week to (start, end); days in closed_days get a closed row.
    """
    if owner is None:
        owner = make_user(email=f'owner{User.query.count()}@gmail.com', name='Dr. Santos', role=ROLE_PROVIDER)
    provider = Provider(user_id=owner.id, healthcare_name=name, slot_duration=slot_duration, status=status)
    db.session.add(provider)
    db.session.flush()

    if hours is None:
        hours = {day: ('09:00', '17:00') for day in range(1, 7)}
    for day, (start, end) in hours.items():
        db.session.add(OperatingHours(provider.id, day, start, end))
    for day in closed_days:
        if day not in hours:
            db.session.add(OperatingHours(provider.id, day, is_closed=True))
    db.session.commit()
    return provider


def make_service(provider, name='General Consultation', price='500.00', is_active=True):
    service = Service(provider_id=provider.id, name=name, price=price, is_active=is_active)
    db.session.add(service)
    db.session.commit()
    return service


def make_break(provider, day_of_week=1, start='12:00', end='13:00', name='Lunch Break'):
    break_time = BreakTime(provider.id, day_of_week, start, end, name=name)
    db.session.add(break_time)
    db.session.commit()
    return break_time


def make_appointment(provider, user, start, minutes=30, status=STATUS_CONFIRMED):
    appointment = Appointment(
        user_id=user.id,
        provider_id=provider.id,
        start_time=start,
        end_time=start + timedelta(minutes=minutes),
        patient_name=user.name,
        patient_email=user.email,
        total_price=500
    )
    appointment.status = status
    db.session.add(appointment)
    db.session.commit()
    return appointment


def patient_info(**overrides):
    info = {
        'patient_name': 'Juan Dela Cruz',
        'patient_email': 'juan.delacruz@gmail.com',
        'patient_phone': '09171234567',
        'notes': None
    }
    info.update(overrides)
    return info


def login(client, user_id):
    with client.session_transaction() as session:
        session['_user_id'] = str(user_id)
        session['_fresh'] = True
