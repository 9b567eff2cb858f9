from flask import request, current_app, has_request_context
from flask_login import current_user
from himsog.models.audit import AuditLog
from himsog import db
from functools import wraps

def log_audit(action, entity_type, entity_id=None, details=None, user_id=None):
    """
    Log an audit entry

    Parameters:
    - action: The action performed (e.g., 'create', 'update', 'cancel')
    - entity_type: The type of entity affected (e.g., 'appointment', 'break_time')
    - entity_id: ID of the affected entity (optional)
    - details: Additional details about the action (optional)
    - user_id: Acting user; defaults to the logged in user when inside a request

    Never raises: a failed audit entry must not undo the action it describes.
    """
    try:
        ip_address = None
        if has_request_context():
            if user_id is None and current_user and current_user.is_authenticated:
                user_id = current_user.id
            ip_address = request.remote_addr

        audit_entry = AuditLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            ip_address=ip_address
        )

        db.session.add(audit_entry)
        db.session.commit()

        return True
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to log audit entry: {e}")
        return False

def audit_log_decorator(action, entity_type, get_entity_id=None, get_details=None):
    """
    Decorator for automatically logging audit entries

    Parameters:
    - action: The action performed (e.g., 'create', 'update', 'delete')
    - entity_type: The type of entity affected (e.g., 'break_time')
    - get_entity_id: Function to extract entity_id from function args/kwargs/return value
                    Should accept (result, *args, **kwargs) parameters
    - get_details: Function to extract details from function args/kwargs/return value
                  Should accept (result, *args, **kwargs) parameters

    Example usage:

    @audit_log_decorator(
        action='create',
        entity_type='break_time',
        get_entity_id=lambda result, *args, **kwargs: result.id
    )
    def create_break_time(actor, ...):
        return break_time
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                # The failed unit of work is discarded before the failure is recorded
                db.session.rollback()
                log_audit(
                    action=f"{action}_failed",
                    entity_type=entity_type,
                    details={"error": str(e)}
                )
                raise

            entity_id = None
            if get_entity_id:
                try:
                    entity_id = get_entity_id(result, *args, **kwargs)
                except Exception as e:
                    current_app.logger.error(f"Error extracting entity_id for audit log: {e}")

            details = None
            if get_details:
                try:
                    details = get_details(result, *args, **kwargs)
                except Exception as e:
                    current_app.logger.error(f"Error extracting details for audit log: {e}")

            log_audit(action, entity_type, entity_id, details)

            return result
        return wrapper
    return decorator
