from sqlmodel import SQLModel, Field, Relationship
from typing import List, Optional, TYPE_CHECKING
from datetime import datetime

if TYPE_CHECKING:
    from farmconnect.models.sub_order import SubOrder


class Order(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    customer_id: int = Field(foreign_key="user.id", index=True)

    total_amount: float

    # delivery address
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: Optional[str] = None
    country: str
    postal_code: str

    created_at: datetime = Field(default_factory=datetime.utcnow)

    sub_orders: List["SubOrder"] = Relationship(
        back_populates="order",
        sa_relationship_kwargs={"order_by": "SubOrder.id"},
    )
