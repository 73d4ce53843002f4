from typing import Optional

from sqlmodel import Session, select

from farmconnect.exceptions import AuthorizationError, NotFoundError
from farmconnect.models.notifications import Notification, NotificationType
from farmconnect.models.user import User


def create_notification(
    *,
    session: Session,
    user_id: int,
    type: NotificationType,
    event: str,
    message: str,
    related_id: Optional[int] = None,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        type=type,
        event=event,
        message=message,
        related_id=related_id,
        is_read=False,
    )
    session.add(notification)
    session.flush()
    return notification


def notification_to_dict(notification: Notification) -> dict:
    return {
        "id": notification.id,
        "user_id": notification.user_id,
        "type": notification.type.value,
        "event": notification.event,
        "related_id": notification.related_id,
        "message": notification.message,
        "is_read": notification.is_read,
        "created_at": notification.created_at,
    }


def user_notifications_query(user_id: int, unread_only: bool = False):
    query = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        query = query.where(Notification.is_read == False)  # noqa: E712
    return query.order_by(Notification.created_at.desc(), Notification.id.desc())


def mark_notification_read(session: Session, notification_id: int, user: User) -> Notification:
    notification = session.get(Notification, notification_id)

    if not notification:
        raise NotFoundError("Notification not found")

    if notification.user_id != user.id:
        raise AuthorizationError("Unauthorized")

    notification.is_read = True
    session.add(notification)
    session.commit()
    session.refresh(notification)
    return notification
