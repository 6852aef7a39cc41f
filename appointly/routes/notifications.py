from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from ..database import get_db
from ..services.notification_service import list_notifications, mark_notification_read

router = APIRouter(prefix="/notifications", tags=["Notifications"])


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    recipient: str
    message: str
    type: str
    link: Optional[str] = None
    read: bool
    created_at: Optional[datetime] = None


class NotificationListResponse(BaseModel):
    unread_count: int
    notifications: list[NotificationResponse]


@router.get("/{recipient}", response_model=NotificationListResponse)
async def get_notifications(
    recipient: str,
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    """Get notifications for a provider username or "admin", newest first"""
    notifications = list_notifications(db, recipient, unread_only=unread_only, limit=limit)
    return NotificationListResponse(
        unread_count=sum(1 for n in notifications if not n.read),
        notifications=notifications,
    )


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(notification_id: int, db: Session = Depends(get_db)):
    """Mark a notification as read"""
    notification = mark_notification_read(db, notification_id)
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification
