import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy import and_, or_
from sqlmodel import Session, select

from farmconnect.database import get_session
from farmconnect.models.message import Message
from farmconnect.models.user import User
from farmconnect.notifications import NotificationTarget, OrderEvent, dispatch_order_event
from farmconnect.schemas.message_schemas import MessageCreate, MessageOut
from farmconnect.utils.token import get_current_user

router = APIRouter()
logger = logging.getLogger(__name__)


def _message_to_out(message: Message) -> MessageOut:
    return MessageOut(
        id=message.id,
        sender_id=message.sender_id,
        recipient_id=message.recipient_id,
        content=message.content,
        is_read=message.is_read,
        created_at=message.created_at,
    )


@router.post("", status_code=status.HTTP_201_CREATED)
def send_message(
    data: MessageCreate,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    if data.recipient_id == current_user.id:
        raise HTTPException(400, "Cannot send a message to yourself")

    recipient = session.get(User, data.recipient_id)
    if not recipient:
        raise HTTPException(404, "Recipient not found")

    message = Message(
        sender_id=current_user.id,
        recipient_id=recipient.id,
        content=data.content,
    )
    session.add(message)
    session.commit()
    session.refresh(message)

    out = _message_to_out(message)
    logger.info(f"Message {message.id} sent from {current_user.id} to {recipient.id}")

    dispatch_order_event(
        event=OrderEvent.RECEIVE_MESSAGE,
        session=session,
        background_tasks=background_tasks,
        targets=[
            NotificationTarget(
                user_id=recipient.id,
                message=f"New message from {current_user.full_name}: {data.content}",
                related_id=message.id,
                data={"chat_message": out.model_dump(mode="json")},
            )
        ],
    )

    return {"message": "Message sent successfully", "data": out}


@router.get("/{user_id}")
def get_conversation(
    user_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    messages = session.exec(
        select(Message)
        .where(
            or_(
                and_(Message.sender_id == current_user.id, Message.recipient_id == user_id),
                and_(Message.sender_id == user_id, Message.recipient_id == current_user.id),
            )
        )
        .order_by(Message.created_at, Message.id)
    ).all()

    return {"messages": [_message_to_out(m) for m in messages]}


@router.patch("/{message_id}/read")
def mark_message_read(
    message_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    message = session.get(Message, message_id)

    if not message:
        raise HTTPException(404, "Message not found")

    if message.recipient_id != current_user.id:
        raise HTTPException(403, "Unauthorized")

    message.is_read = True
    session.add(message)
    session.commit()
    session.refresh(message)

    return {"message": "Message marked as read", "data": _message_to_out(message)}
