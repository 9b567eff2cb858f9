from types import SimpleNamespace

import pytest

from himsog import db
from himsog.models import Appointment, BreakTime, OperatingHours
from conftest import make_user, make_provider, make_service, make_break, login


@pytest.fixture
def seeded(app):
    with app.app_context():
        provider = make_provider()
        lunch = make_break(provider)
        service = make_service(provider)
        patient = make_user()
        return SimpleNamespace(
            provider_id=provider.id,
            owner_id=provider.user_id,
            service_id=service.id,
            patient_id=patient.id,
            lunch_id=lunch.id
        )


def booking_payload(seeded, **overrides):
    payload = {
        'service_ids': [seeded.service_id],
        'date': '2030-01-07',
        'time': '14:00',
        'patient_name': 'Juan Dela Cruz',
        'patient_email': 'juan.delacruz@gmail.com',
        'patient_phone': '09171234567'
    }
    payload.update(overrides)
    return payload


def book(client, seeded, **overrides):
    return client.post(f'/providers/{seeded.provider_id}/appointments', json=booking_payload(seeded, **overrides))


class TestAvailabilityEndpoints:

    def test_availability(self, client, seeded):
        response = client.get(f'/providers/{seeded.provider_id}/availability?date=2030-01-07')

        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['isOperating'] is True
        slots = {s['time']: s for s in data['timeSlots']}
        assert slots['12:00'] == {'time': '12:00', 'available': False, 'reason': 'Break time'}
        assert slots['14:00'] == {'time': '14:00', 'available': True}

    def test_closed_sunday(self, client, seeded):
        data = client.get(f'/providers/{seeded.provider_id}/availability?date=2030-01-06').get_json()['data']

        assert data['isOperating'] is False
        assert data['timeSlots'] == []

    def test_bad_date(self, client, seeded):
        response = client.get(f'/providers/{seeded.provider_id}/availability?date=next-monday')

        assert response.status_code == 400
        assert response.get_json() == {'success': False, 'error': 'Invalid date. Use YYYY-MM-DD format'}

    def test_unknown_provider(self, client, seeded):
        response = client.get('/providers/999/availability?date=2030-01-07')

        assert response.status_code == 404
        assert response.get_json()['error'] == 'Provider not found'

    def test_operating_days(self, client, seeded):
        response = client.get(f'/providers/{seeded.provider_id}/operating-days')

        assert response.get_json()['data'] == [1, 2, 3, 4, 5, 6]


class TestBookingEndpoints:

    def test_requires_login(self, client, seeded):
        response = book(client, seeded)

        assert response.status_code == 401
        assert response.get_json()['success'] is False

    def test_books_appointment(self, app, client, seeded):
        login(client, seeded.patient_id)

        response = book(client, seeded)

        assert response.status_code == 201
        data = response.get_json()['data']
        assert data['status'] == 'PENDING'
        assert data['date'] == '2030-01-07'
        assert data['time'] == '14:00'
        assert data['startTime'] == '2030-01-07T14:00:00'
        assert data['endTime'] == '2030-01-07T14:30:00'
        assert data['totalPrice'] == 500.0
        with app.app_context():
            assert Appointment.query.count() == 1

    def test_taken_slot_returns_fresh_availability(self, client, seeded):
        login(client, seeded.patient_id)
        book(client, seeded)

        response = book(client, seeded, patient_name='Maria Clara')

        assert response.status_code == 409
        body = response.get_json()
        assert body['success'] is False
        assert body['reason'] == 'Already booked'
        slots = {s['time']: s for s in body['availability']['timeSlots']}
        assert slots['14:00']['reason'] == 'Already booked'
        assert slots['14:30']['available'] is True

    def test_break_time_booking_is_rejected(self, client, seeded):
        login(client, seeded.patient_id)

        response = book(client, seeded, time='12:00')

        assert response.status_code == 409
        assert response.get_json()['reason'] == 'Break time'

    def test_missing_patient_email(self, client, seeded):
        login(client, seeded.patient_id)
        payload = booking_payload(seeded)
        del payload['patient_email']

        response = client.post(f'/providers/{seeded.provider_id}/appointments', json=payload)

        assert response.status_code == 400
        assert response.get_json()['error'].startswith('Patient Email')

    def test_bad_time_format(self, client, seeded):
        login(client, seeded.patient_id)

        response = book(client, seeded, time='2pm')

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Time: Use HH:MM format'

    def test_service_of_another_provider(self, app, client, seeded):
        with app.app_context():
            foreign_service = make_service(make_provider(name='Other Clinic')).id
        login(client, seeded.patient_id)

        response = book(client, seeded, service_ids=[foreign_service])

        assert response.status_code == 400

    def test_list_and_cancel_own_appointment(self, client, seeded):
        login(client, seeded.patient_id)
        appointment_id = book(client, seeded).get_json()['data']['id']

        listed = client.get('/appointments').get_json()['data']
        assert [a['id'] for a in listed] == [appointment_id]

        response = client.post(f'/appointments/{appointment_id}/cancel',
                               json={'reason': 'FEELING_BETTER', 'notes': 'fever is gone'})
        assert response.status_code == 200
        assert response.get_json()['data']['cancellationReason'] == 'Feeling better: fever is gone'

        again = client.post(f'/appointments/{appointment_id}/cancel', json={'reason': 'OTHER'})
        assert again.status_code == 409
        assert again.get_json()['error'] == 'Cannot change appointment status from CANCELLED to CANCELLED'

    def test_cannot_cancel_someone_elses_appointment(self, app, client, seeded):
        login(client, seeded.patient_id)
        appointment_id = book(client, seeded).get_json()['data']['id']
        with app.app_context():
            stranger_id = make_user(email='stranger@gmail.com').id

        login(client, stranger_id)
        response = client.post(f'/appointments/{appointment_id}/cancel', json={'reason': 'OTHER'})

        assert response.status_code == 403


class TestProviderEndpoints:

    def test_patients_are_turned_away(self, client, seeded):
        login(client, seeded.patient_id)

        response = client.get('/provider/break-times')

        assert response.status_code == 403

    def test_break_time_crud(self, app, client, seeded):
        login(client, seeded.owner_id)

        created = client.post('/provider/break-times', json={
            'name': 'Merienda', 'day_of_week': 3, 'start_time': '15:00', 'end_time': '15:30'
        })
        assert created.status_code == 201
        break_id = created.get_json()['data']['id']

        patched = client.patch(f'/provider/break-times/{break_id}', json={'name': 'Afternoon Snack'})
        assert patched.get_json()['data']['name'] == 'Afternoon Snack'
        assert patched.get_json()['data']['startTime'] == '15:00'

        listed = client.get('/provider/break-times').get_json()['data']
        assert [b['name'] for b in listed] == ['Lunch Break', 'Afternoon Snack']

        assert client.delete(f'/provider/break-times/{break_id}').status_code == 200
        with app.app_context():
            assert BreakTime.query.count() == 1

    def test_sunday_break_time(self, client, seeded):
        login(client, seeded.owner_id)

        response = client.post('/provider/break-times', json={
            'name': 'Rest', 'day_of_week': 0, 'start_time': '11:00', 'end_time': '11:30'
        })

        assert response.status_code == 201
        assert response.get_json()['data']['dayOfWeek'] == 0

    def test_break_time_end_before_start(self, client, seeded):
        login(client, seeded.owner_id)

        response = client.post('/provider/break-times', json={
            'name': 'Lunch', 'day_of_week': 1, 'start_time': '13:00', 'end_time': '12:00'
        })

        assert response.status_code == 400
        assert 'End time must be after start time' in response.get_json()['error']

    def test_cannot_edit_another_providers_break(self, app, client, seeded):
        with app.app_context():
            rival_owner_id = make_provider(name='Rival Clinic').user_id
        login(client, rival_owner_id)

        response = client.patch(f'/provider/break-times/{seeded.lunch_id}', json={'name': 'Mine now'})

        assert response.status_code == 403
        with app.app_context():
            assert db.session.get(BreakTime, seeded.lunch_id).name == 'Lunch Break'

    def test_update_operating_hours(self, app, client, seeded):
        login(client, seeded.owner_id)

        response = client.put('/provider/operating-hours', json={'hours': [
            {'day_of_week': 1, 'start_time': '08:00', 'end_time': '12:00', 'is_closed': False},
            {'day_of_week': 2, 'is_closed': True},
        ]})

        assert response.status_code == 200
        with app.app_context():
            monday = OperatingHours.query.filter_by(provider_id=seeded.provider_id, day_of_week=1).one()
            assert (monday.start_time, monday.end_time) == ('08:00', '12:00')
        days = client.get(f'/providers/{seeded.provider_id}/operating-days').get_json()['data']
        assert days == [1, 3, 4, 5, 6]

    def test_operating_hours_need_a_body(self, client, seeded):
        login(client, seeded.owner_id)

        response = client.put('/provider/operating-hours', json={})

        assert response.status_code == 400

    def test_status_flow(self, client, seeded):
        login(client, seeded.patient_id)
        appointment_id = book(client, seeded).get_json()['data']['id']
        login(client, seeded.owner_id)

        confirmed = client.post(f'/provider/appointments/{appointment_id}/status', json={'status': 'CONFIRMED'})
        assert confirmed.get_json()['data']['status'] == 'CONFIRMED'

        completed = client.post(f'/provider/appointments/{appointment_id}/status',
                                json={'status': 'COMPLETED', 'activity_notes': 'Routine checkup done'})
        assert completed.get_json()['data']['activityNotes'] == 'Routine checkup done'

        cancelled = client.post(f'/provider/appointments/{appointment_id}/cancel', json={'reason': 'SCHEDULING_ERROR'})
        assert cancelled.status_code == 409
        assert cancelled.get_json()['success'] is False

        pending_list = client.get('/provider/appointments?status=completed').get_json()['data']
        assert [a['id'] for a in pending_list] == [appointment_id]

    def test_status_endpoint_does_not_cancel(self, client, seeded):
        login(client, seeded.patient_id)
        appointment_id = book(client, seeded).get_json()['data']['id']
        login(client, seeded.owner_id)

        response = client.post(f'/provider/appointments/{appointment_id}/status', json={'status': 'CANCELLED'})

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Use the cancel endpoint to cancel an appointment'

    def test_bulk_status_and_reschedule(self, client, seeded):
        login(client, seeded.patient_id)
        first = book(client, seeded).get_json()['data']['id']
        second = book(client, seeded, time='15:00').get_json()['data']['id']
        login(client, seeded.owner_id)

        bulk = client.post('/provider/appointments/bulk-status',
                           json={'appointment_ids': [first, second, 999], 'status': 'CONFIRMED'})
        assert bulk.get_json()['data'] == {
            'updated': 2, 'failed': 1, 'errors': ['Appointment 999 was not found']
        }

        moved = client.post(f'/provider/appointments/{first}/reschedule', json={'date': '2030-01-08', 'time': '09:00'})
        assert moved.status_code == 200
        assert moved.get_json()['data']['startTime'] == '2030-01-08T09:00:00'

        clash = client.post(f'/provider/appointments/{second}/reschedule', json={'date': '2030-01-08', 'time': '09:00'})
        assert clash.status_code == 409
        assert clash.get_json()['reason'] == 'Already booked'


class TestMainEndpoints:

    def test_directory_lists_verified_providers(self, client, seeded):
        data = client.get('/').get_json()['data']

        assert [p['healthcareName'] for p in data] == ['Himsog Family Clinic']

    @pytest.mark.parametrize('who, target', [('patient_id', '/appointments'), ('owner_id', '/provider/appointments')])
    def test_dashboard_redirects_by_role(self, client, seeded, who, target):
        login(client, getattr(seeded, who))

        response = client.get('/dashboard')

        assert response.status_code == 302
        assert response.headers['Location'].endswith(target)
