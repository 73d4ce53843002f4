from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import SQLModel, Field


class NotificationType(str, Enum):
    order_placement = "OrderPlacement"
    order_status_update = "OrderStatusUpdate"
    order_cancellation = "OrderCancellation"
    message = "Message"


class Notification(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: int = Field(foreign_key="user.id", index=True)
    type: NotificationType
    event: str           # real-time event name the record was pushed as
    related_id: Optional[int] = None   # order / sub-order / message id

    message: str
    is_read: bool = Field(default=False)

    created_at: datetime = Field(default_factory=datetime.utcnow)
