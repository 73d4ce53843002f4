from fastapi import APIRouter, Depends
from sqlmodel import Session

from farmconnect.database import get_session
from farmconnect.models.user import User
from farmconnect.services.notification_service import (
    mark_notification_read,
    notification_to_dict,
    user_notifications_query,
)
from farmconnect.utils.pagination import paginate
from farmconnect.utils.token import get_current_user

router = APIRouter()


@router.get("")
def list_notifications(
    page: int = 1,
    limit: int = 20,
    unread_only: bool = False,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return paginate(
        session=session,
        query=user_notifications_query(current_user.id, unread_only),
        page=page,
        limit=limit,
        serialize=notification_to_dict,
    )


@router.patch("/{notification_id}/read")
def mark_as_read(
    notification_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    notification = mark_notification_read(session, notification_id, current_user)
    return {
        "message": "Notification marked as read",
        "notification": notification_to_dict(notification),
    }
