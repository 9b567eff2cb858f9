from himsog import db
from datetime import datetime

# Provider verification statuses
PROVIDER_PENDING = 'PENDING'
PROVIDER_VERIFIED = 'VERIFIED'
PROVIDER_SUSPENDED = 'SUSPENDED'

class Provider(db.Model):
    __tablename__ = 'providers'
    
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), unique=True, nullable=False)
    healthcare_name = db.Column(db.String(150), nullable=False)
    description = db.Column(db.Text, nullable=True)
    address = db.Column(db.String(255), nullable=True)
    status = db.Column(db.String(20), default=PROVIDER_PENDING)
    slot_duration = db.Column(db.Integer, nullable=True, default=30)  # Minutes per slot
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    services = db.relationship('Service', backref='provider', lazy='dynamic')
    operating_hours = db.relationship('OperatingHours', backref='provider', lazy='dynamic')
    break_times = db.relationship('BreakTime', backref='provider', lazy='dynamic')
    appointments = db.relationship('Appointment', backref='provider', lazy='dynamic')
    
    def __init__(self, user_id, healthcare_name, slot_duration=30, status=PROVIDER_PENDING,
                 description=None, address=None):
        self.user_id = user_id
        self.healthcare_name = healthcare_name
        self.slot_duration = slot_duration
        self.status = status
        self.description = description
        self.address = address
    
    def is_verified(self):
        return self.status == PROVIDER_VERIFIED
    
    def is_owned_by(self, user):
        return user is not None and user.id == self.user_id
    
    def __repr__(self):
        return f'<Provider {self.healthcare_name}>'
