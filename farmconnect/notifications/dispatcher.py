import logging
from typing import Iterable, List, NamedTuple, Optional

from fastapi import BackgroundTasks
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from farmconnect.models.user import User, UserRole
from farmconnect.notifications.channels import Channel
from farmconnect.notifications.events import OrderEvent
from farmconnect.notifications.realtime import manager
from farmconnect.notifications.rules import NOTIFICATION_RULES, NOTIFICATION_TYPES
from farmconnect.services.notification_service import (
    create_notification,
    notification_to_dict,
)

logger = logging.getLogger(__name__)


class NotificationTarget(NamedTuple):
    user_id: int
    message: str
    related_id: Optional[int] = None
    role: Optional[UserRole] = None   # recipient must have this role when set
    data: Optional[dict] = None       # extra push payload


def dispatch_order_event(
    *,
    event: OrderEvent,
    session: Session,
    targets: Iterable[NotificationTarget],
    background_tasks: Optional[BackgroundTasks] = None,
) -> List[dict]:
    """
    Best-effort fan-out for one event. Runs after the business transaction
    has committed and never raises.

    Handles:
    - persisted in-app notification per recipient (one commit)
    - websocket push per recipient, scheduled as a background task
    """
    try:
        return _dispatch(event, session, list(targets), background_tasks)
    except Exception:
        logger.exception(f"Dispatch of {event.value} failed")
        try:
            session.rollback()
        except SQLAlchemyError:
            logger.exception(f"Rollback after failed {event.value} dispatch failed")
        return []


def _dispatch(event, session, targets, background_tasks):
    rules = NOTIFICATION_RULES.get(event, {})
    resolved = []

    for target in targets:
        user = session.get(User, target.user_id)
        if user is None or (target.role and user.role != target.role):
            logger.warning(
                f"Skipping {event.value} notification: user {target.user_id} "
                f"could not be resolved"
            )
            continue
        resolved.append(target)

    # -------------------------
    # IN-APP
    # -------------------------
    payloads = []
    if rules.get(Channel.INAPP) and resolved:
        try:
            notifications = [
                create_notification(
                    session=session,
                    user_id=target.user_id,
                    type=NOTIFICATION_TYPES[event],
                    event=event.value,
                    message=target.message,
                    related_id=target.related_id,
                )
                for target in resolved
            ]
            session.commit()
            payloads = [notification_to_dict(n) for n in notifications]
        except SQLAlchemyError:
            session.rollback()
            logger.exception(f"Could not persist {event.value} notifications")

    if not payloads:
        payloads = [
            {"user_id": t.user_id, "message": t.message, "related_id": t.related_id}
            for t in resolved
        ]

    # -------------------------
    # REALTIME
    # -------------------------
    pushes = [
        (target.user_id, {**payload, **(target.data or {})})
        for target, payload in zip(resolved, payloads)
    ]
    if rules.get(Channel.REALTIME) and pushes:
        if background_tasks is None:
            logger.info(f"No background runner, {event.value} push skipped")
        else:
            background_tasks.add_task(manager.emit_many, event.value, pushes)

    return payloads
