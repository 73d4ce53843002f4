from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from farmconnect.constants.order_status import OrderStatus


class DeliveryAddress(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True
    )

    address_line1: str = Field(min_length=1)
    address_line2: Optional[str] = None
    city: str = Field(min_length=1)
    state: Optional[str] = None
    country: str = Field(min_length=1)
    postal_code: str = Field(min_length=1)


class CheckoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    delivery_address: DeliveryAddress = Field(alias="deliveryAddress")


class OrderStatusUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_status: OrderStatus = Field(alias="orderStatus")


class AddressOut(BaseModel):
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: Optional[str] = None
    country: str
    postal_code: str


class OrderItemOut(BaseModel):
    id: int
    product_id: int
    product_name: str
    price: float
    quantity: int
    line_total: float


class SubOrderOut(BaseModel):
    id: int
    order_id: int
    farmer_id: int
    total_amount: float
    order_status: OrderStatus
    created_at: datetime
    updated_at: datetime
    products: List[OrderItemOut]


class OrderOut(BaseModel):
    id: int
    customer_id: int
    total_amount: float
    delivery_address: AddressOut
    created_at: datetime
    sub_orders: List[SubOrderOut]


def sub_order_to_out(sub_order) -> SubOrderOut:
    return SubOrderOut(
        id=sub_order.id,
        order_id=sub_order.order_id,
        farmer_id=sub_order.farmer_id,
        total_amount=round(sub_order.total_amount, 2),
        order_status=sub_order.order_status,
        created_at=sub_order.created_at,
        updated_at=sub_order.updated_at,
        products=[
            OrderItemOut(
                id=item.id,
                product_id=item.product_id,
                product_name=item.product_name,
                price=item.price,
                quantity=item.quantity,
                line_total=round(item.line_total, 2),
            )
            for item in sub_order.products
        ],
    )


def order_to_out(order) -> OrderOut:
    return OrderOut(
        id=order.id,
        customer_id=order.customer_id,
        total_amount=round(order.total_amount, 2),
        delivery_address=AddressOut(
            address_line1=order.address_line1,
            address_line2=order.address_line2,
            city=order.city,
            state=order.state,
            country=order.country,
            postal_code=order.postal_code,
        ),
        created_at=order.created_at,
        sub_orders=[sub_order_to_out(s) for s in order.sub_orders],
    )
