from himsog import db
from datetime import datetime

# Days of the week constants (0 = Sunday, 6 = Saturday)
SUNDAY = 0
MONDAY = 1
TUESDAY = 2
WEDNESDAY = 3
THURSDAY = 4
FRIDAY = 5
SATURDAY = 6

DAY_NAMES = ['Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday']

class OperatingHours(db.Model):
    __tablename__ = 'operating_hours'

    id = db.Column(db.Integer, primary_key=True)
    provider_id = db.Column(db.Integer, db.ForeignKey('providers.id'), nullable=False)
    day_of_week = db.Column(db.Integer, nullable=False)  # 0-6 (Sunday-Saturday)
    start_time = db.Column(db.String(5), nullable=True)  # "HH:MM", 24-hour
    end_time = db.Column(db.String(5), nullable=True)
    is_closed = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint('provider_id', 'day_of_week', name='uq_operating_hours_provider_day'),
    )

    def __init__(self, provider_id, day_of_week, start_time=None, end_time=None, is_closed=False):
        self.provider_id = provider_id
        self.day_of_week = day_of_week
        self.start_time = start_time
        self.end_time = end_time
        self.is_closed = is_closed

    def is_open(self):
        """A day without both times is treated as closed"""
        return not self.is_closed and bool(self.start_time) and bool(self.end_time)

    def to_dict(self):
        return {
            'dayOfWeek': self.day_of_week,
            'startTime': self.start_time,
            'endTime': self.end_time,
            'isClosed': not self.is_open()
        }

    def __repr__(self):
        if not self.is_open():
            return f'<OperatingHours: {DAY_NAMES[self.day_of_week]} - CLOSED>'
        return f'<OperatingHours: {DAY_NAMES[self.day_of_week]} - {self.start_time} to {self.end_time}>'


class BreakTime(db.Model):
    __tablename__ = 'break_times'

    id = db.Column(db.Integer, primary_key=True)
    provider_id = db.Column(db.Integer, db.ForeignKey('providers.id'), nullable=False)
    name = db.Column(db.String(100), nullable=False, default='Lunch Break')
    day_of_week = db.Column(db.Integer, nullable=False)
    start_time = db.Column(db.String(5), nullable=False)
    end_time = db.Column(db.String(5), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __init__(self, provider_id, day_of_week, start_time, end_time, name='Lunch Break'):
        self.provider_id = provider_id
        self.day_of_week = day_of_week
        self.start_time = start_time
        self.end_time = end_time
        self.name = name

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'dayOfWeek': self.day_of_week,
            'startTime': self.start_time,
            'endTime': self.end_time
        }

    def __repr__(self):
        return f'<BreakTime {self.name}: {DAY_NAMES[self.day_of_week]} {self.start_time} to {self.end_time}>'
