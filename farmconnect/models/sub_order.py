from sqlmodel import SQLModel, Field, Relationship
from typing import List, Optional, TYPE_CHECKING
from datetime import datetime

from farmconnect.constants.order_status import OrderStatus

if TYPE_CHECKING:
    from farmconnect.models.order import Order
    from farmconnect.models.order_item import OrderItem


class SubOrder(SQLModel, table=True):
    __tablename__ = "sub_order"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: Optional[int] = Field(default=None, foreign_key="order.id", index=True)
    farmer_id: int = Field(foreign_key="user.id", index=True)

    total_amount: float
    order_status: OrderStatus = Field(default=OrderStatus.pending)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    order: Optional["Order"] = Relationship(back_populates="sub_orders")
    products: List["OrderItem"] = Relationship(
        back_populates="sub_order",
        sa_relationship_kwargs={"order_by": "OrderItem.id"},
    )
