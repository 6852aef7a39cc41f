"""
In-app Notification Service
Append-only notification records addressed to a provider username or "admin"
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..models import ADMIN_RECIPIENT, NOTIFICATION_TYPES, Notification

logger = logging.getLogger(__name__)


def add_notification(
    db: Session,
    recipient: str,
    message: str,
    notification_type: str = "general",
    link: Optional[str] = None,
) -> Notification:
    """
    Append a notification

    Args:
        db: Database session
        recipient: Provider username or "admin"
        message: Text shown in the notification list
        notification_type: "new_booking" or "general"
        link: Deep link path opened from the notification

    Returns:
        The stored Notification
    """
    if notification_type not in NOTIFICATION_TYPES:
        raise ValueError(f"Unknown notification type: {notification_type}")

    notification = Notification(
        recipient=recipient,
        message=message,
        type=notification_type,
        link=link,
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)

    logger.info(f"🔔 Notification for {recipient}: {message}")
    return notification


def notify_new_booking(db: Session, provider_username: str, customer_name: str, service_type: str):
    """Tell a provider about a confirmed booking"""
    return add_notification(
        db,
        provider_username,
        f"New booking from {customer_name} for {service_type}.",
        notification_type="new_booking",
        link="/bookings",
    )


def notify_admin(db: Session, message: str, link: str = "/admin/providers"):
    return add_notification(db, ADMIN_RECIPIENT, message, notification_type="general", link=link)


def list_notifications(
    db: Session, recipient: str, unread_only: bool = False, limit: int = 50
) -> list[Notification]:
    """Newest first"""
    query = db.query(Notification).filter(Notification.recipient == recipient)
    if unread_only:
        query = query.filter(Notification.read.is_(False))
    return query.order_by(Notification.id.desc()).limit(limit).all()


def mark_notification_read(db: Session, notification_id: int) -> Optional[Notification]:
    notification = db.query(Notification).filter(Notification.id == notification_id).first()
    if not notification:
        return None
    notification.read = True
    db.commit()
    db.refresh(notification)
    return notification
