from flask_login import UserMixin
from werkzeug.security import generate_password_hash
from datetime import datetime
from himsog import db, login_manager

# User roles
ROLE_USER = 'USER'
ROLE_PROVIDER = 'PROVIDER'

class User(UserMixin, db.Model):
    __tablename__ = 'users'
    
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    phone = db.Column(db.String(20), nullable=True)
    role = db.Column(db.String(20), default=ROLE_USER)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    appointments = db.relationship('Appointment', foreign_keys='Appointment.user_id', backref='user', lazy='dynamic')
    provider = db.relationship('Provider', backref='owner', uselist=False)
    
    def __init__(self, email, name, password, role=ROLE_USER, phone=None):
        self.email = email
        self.name = name
        self.set_password(password)
        self.role = role
        self.phone = phone
    
    def set_password(self, password):
        self.password_hash = generate_password_hash(password)
    
    def is_provider(self):
        return self.role == ROLE_PROVIDER
    
    def __repr__(self):
        return f'<User {self.email}>'

@login_manager.user_loader
def load_user(id):
    return db.session.get(User, int(id))
