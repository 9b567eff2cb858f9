from flask import current_app
from himsog import db
from himsog.models.notification import Notification

def notify(user_id, type, title, message, appointment_id=None, provider_id=None):
    """
    Create an in-app notification

    Runs after the change it reports has been committed, so a failure here is
    logged and the change stays.
    """
    try:
        notification = Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            appointment_id=appointment_id,
            provider_id=provider_id
        )
        db.session.add(notification)
        db.session.commit()
        return notification
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to create {type} notification for user {user_id}: {e}")
        return None
