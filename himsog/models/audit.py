from himsog import db
from datetime import datetime
import json
from himsog.utils.json_utils import SchedulingJSONEncoder

class AuditLog(db.Model):
    """Model for tracking audit logs of scheduling events"""
    __tablename__ = 'audit_logs'
    
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    timestamp = db.Column(db.DateTime, default=datetime.utcnow)
    action = db.Column(db.String(50), nullable=False)  # create, update, cancel, delete, etc.
    entity_type = db.Column(db.String(50), nullable=False)  # appointment, break_time, operating_hours
    entity_id = db.Column(db.Integer, nullable=True)
    details = db.Column(db.Text, nullable=True)  # JSON-serialized additional details
    ip_address = db.Column(db.String(50), nullable=True)
    
    def __init__(self, action, entity_type, user_id=None, entity_id=None, details=None, ip_address=None):
        self.user_id = user_id
        self.action = action
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.details = json.dumps(details, cls=SchedulingJSONEncoder) if isinstance(details, (dict, list)) else details
        self.ip_address = ip_address
    
    def __repr__(self):
        return f'<AuditLog {self.action} {self.entity_type} {self.entity_id}>'
