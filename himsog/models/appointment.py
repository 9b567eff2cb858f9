from himsog import db
from himsog.errors import InvalidTransitionError
from himsog.scheduling.timeutils import local_now
from datetime import datetime
import secrets
import string
import time

# Appointment status constants
STATUS_PENDING = 'PENDING'
STATUS_CONFIRMED = 'CONFIRMED'
STATUS_COMPLETED = 'COMPLETED'
STATUS_CANCELLED = 'CANCELLED'
STATUS_NO_SHOW = 'NO_SHOW'

ALL_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED, STATUS_COMPLETED, STATUS_CANCELLED, STATUS_NO_SHOW)

# Statuses that hold a slot
ACTIVE_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED)

# Allowed status changes; terminal statuses map to nothing
TRANSITIONS = {
    STATUS_PENDING: (STATUS_CONFIRMED, STATUS_CANCELLED),
    STATUS_CONFIRMED: (STATUS_COMPLETED, STATUS_CANCELLED, STATUS_NO_SHOW),
    STATUS_COMPLETED: (),
    STATUS_CANCELLED: (),
    STATUS_NO_SHOW: (),
}

_ACTIVE_SLOT_WHERE = "status IN ('PENDING', 'CONFIRMED')"


def generate_appointment_number():
    """APT + last 8 digits of the epoch millis + 4 random characters"""
    millis = str(int(time.time() * 1000))[-8:]
    suffix = ''.join(secrets.choice(string.ascii_uppercase + string.digits) for _ in range(4))
    return f'APT{millis}{suffix}'


class Appointment(db.Model):
    __tablename__ = 'appointments'

    id = db.Column(db.Integer, primary_key=True)
    appointment_number = db.Column(db.String(20), unique=True, nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    provider_id = db.Column(db.Integer, db.ForeignKey('providers.id'), nullable=False)
    start_time = db.Column(db.DateTime, nullable=False)  # Provider-local wall clock
    end_time = db.Column(db.DateTime, nullable=False)
    status = db.Column(db.String(20), nullable=False, default=STATUS_PENDING)
    total_price = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    patient_name = db.Column(db.String(100), nullable=False)
    patient_email = db.Column(db.String(120), nullable=False)
    patient_phone = db.Column(db.String(20), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    cancellation_reason = db.Column(db.Text, nullable=True)
    cancelled_at = db.Column(db.DateTime, nullable=True)
    cancelled_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    activity_notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    services = db.relationship('AppointmentService', backref='appointment', lazy='selectin',
                               cascade='all, delete-orphan')

    __table_args__ = (
        # Backstop for the booking transaction: one active appointment per provider start time
        db.Index('uq_appointments_active_slot', 'provider_id', 'start_time', unique=True,
                 sqlite_where=db.text(_ACTIVE_SLOT_WHERE),
                 postgresql_where=db.text(_ACTIVE_SLOT_WHERE)),
    )

    def __init__(self, user_id, provider_id, start_time, end_time, patient_name, patient_email,
                 total_price=0, patient_phone=None, notes=None):
        self.appointment_number = generate_appointment_number()
        self.user_id = user_id
        self.provider_id = provider_id
        self.start_time = start_time
        self.end_time = end_time
        self.status = STATUS_PENDING
        self.total_price = total_price
        self.patient_name = patient_name
        self.patient_email = patient_email
        self.patient_phone = patient_phone
        self.notes = notes

    def can_transition_to(self, new_status):
        return new_status in TRANSITIONS.get(self.status, ())

    def transition_to(self, new_status):
        if not self.can_transition_to(new_status):
            raise InvalidTransitionError(self.status, new_status)
        self.status = new_status

    def confirm(self):
        self.transition_to(STATUS_CONFIRMED)

    def complete(self, activity_notes=None):
        self.transition_to(STATUS_COMPLETED)
        if activity_notes:
            self.activity_notes = activity_notes

    def mark_no_show(self):
        self.transition_to(STATUS_NO_SHOW)

    def cancel(self, reason, cancelled_by, cancelled_at=None):
        self.transition_to(STATUS_CANCELLED)
        self.cancellation_reason = reason
        self.cancelled_by = cancelled_by
        self.cancelled_at = cancelled_at or local_now()

    def is_active(self):
        return self.status in ACTIVE_STATUSES

    def overlaps(self, start_time, end_time):
        return self.start_time < end_time and self.end_time > start_time

    def to_dict(self):
        return {
            'id': self.id,
            'appointmentNumber': self.appointment_number,
            'providerId': self.provider_id,
            'userId': self.user_id,
            'date': self.start_time.strftime('%Y-%m-%d'),
            'time': self.start_time.strftime('%H:%M'),
            'startTime': self.start_time.isoformat(),
            'endTime': self.end_time.isoformat(),
            'status': self.status,
            'totalPrice': float(self.total_price),
            'services': [s.to_dict() for s in self.services],
            'patientName': self.patient_name,
            'patientEmail': self.patient_email,
            'patientPhone': self.patient_phone,
            'notes': self.notes,
            'cancellationReason': self.cancellation_reason,
            'cancelledAt': self.cancelled_at.isoformat() if self.cancelled_at else None,
            'cancelledBy': self.cancelled_by,
            'activityNotes': self.activity_notes
        }

    def __repr__(self):
        return f'<Appointment {self.appointment_number}: {self.start_time} - {self.end_time} {self.status}>'


class AppointmentService(db.Model):
    __tablename__ = 'appointment_services'

    id = db.Column(db.Integer, primary_key=True)
    appointment_id = db.Column(db.Integer, db.ForeignKey('appointments.id'), nullable=False)
    service_id = db.Column(db.Integer, db.ForeignKey('services.id'), nullable=False)
    price_at_booking = db.Column(db.Numeric(10, 2), nullable=False)

    service = db.relationship('Service')

    def __init__(self, service_id, price_at_booking):
        self.service_id = service_id
        self.price_at_booking = price_at_booking

    def to_dict(self):
        return {
            'id': self.service_id,
            'name': self.service.name if self.service else None,
            'priceAtBooking': float(self.price_at_booking)
        }
