from datetime import datetime

from pydantic import BaseModel, Field


class MessageCreate(BaseModel):
    recipient_id: int
    content: str = Field(min_length=1, max_length=2000)


class MessageOut(BaseModel):
    id: int
    sender_id: int
    recipient_id: int
    content: str
    is_read: bool
    created_at: datetime
