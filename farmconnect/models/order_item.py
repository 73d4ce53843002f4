from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from farmconnect.models.sub_order import SubOrder


class OrderItem(SQLModel, table=True):
    __tablename__ = "order_item"

    id: Optional[int] = Field(default=None, primary_key=True)
    sub_order_id: Optional[int] = Field(default=None, foreign_key="sub_order.id", index=True)
    product_id: int = Field(foreign_key="product.id")

    # snapshot taken at checkout; never follows later catalog changes
    product_name: str
    price: float
    quantity: int

    sub_order: Optional["SubOrder"] = Relationship(back_populates="products")

    @property
    def line_total(self) -> float:
        return self.price * self.quantity
