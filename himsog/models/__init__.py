# Import all models here for easier imports elsewhere
from .user import User
from .provider import Provider
from .service import Service
from .availability import OperatingHours, BreakTime
from .appointment import Appointment, AppointmentService
from .notification import Notification
from .audit import AuditLog
