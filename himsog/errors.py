"""
Error types raised by the scheduling core.

Every error carries a user-facing message and the HTTP status the request
layer answers with; see register_error_handlers() in himsog/__init__.py.
"""


class SchedulingError(Exception):
    """Base class for expected scheduling failures"""
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'success': False, 'error': self.message}


class NotFoundError(SchedulingError):
    status_code = 404


class AuthorizationError(SchedulingError):
    status_code = 403


class ValidationError(SchedulingError):
    status_code = 400


class SlotUnavailableError(SchedulingError):
    """Raised when a chosen slot fails re-validation at booking time"""
    status_code = 409

    def __init__(self, reason, message=None):
        super().__init__(message or f'This time slot is no longer available ({reason}). Please select another time.')
        self.reason = reason

    def to_dict(self):
        payload = super().to_dict()
        payload['reason'] = self.reason
        return payload


class InvalidTransitionError(SchedulingError):
    status_code = 409

    def __init__(self, current_status, new_status):
        super().__init__(f'Cannot change appointment status from {current_status} to {new_status}')
        self.current_status = current_status
        self.new_status = new_status
