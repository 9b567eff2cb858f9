from himsog import db
from datetime import datetime

# Notification types
APPOINTMENT_CREATED = 'APPOINTMENT_CREATED'
APPOINTMENT_CONFIRMED = 'APPOINTMENT_CONFIRMED'
APPOINTMENT_COMPLETED = 'APPOINTMENT_COMPLETED'
APPOINTMENT_CANCELLED = 'APPOINTMENT_CANCELLED'
APPOINTMENT_NO_SHOW = 'APPOINTMENT_NO_SHOW'
APPOINTMENT_RESCHEDULED = 'APPOINTMENT_RESCHEDULED'

class Notification(db.Model):
    __tablename__ = 'notifications'
    
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    type = db.Column(db.String(40), nullable=False)
    title = db.Column(db.String(150), nullable=False)
    message = db.Column(db.Text, nullable=False)
    appointment_id = db.Column(db.Integer, db.ForeignKey('appointments.id'), nullable=True)
    provider_id = db.Column(db.Integer, db.ForeignKey('providers.id'), nullable=True)
    is_read = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    
    def __init__(self, user_id, type, title, message, appointment_id=None, provider_id=None):
        self.user_id = user_id
        self.type = type
        self.title = title
        self.message = message
        self.appointment_id = appointment_id
        self.provider_id = provider_id
    
    def __repr__(self):
        return f'<Notification {self.type} for user {self.user_id}>'
