import logging
from datetime import datetime
from typing import Optional, Union

from fastapi import BackgroundTasks
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from farmconnect.constants.order_status import (
    FARMER_SETTABLE,
    OrderStatus,
    can_transition,
)
from farmconnect.exceptions import (
    AuthorizationError,
    ConflictError,
    MarketplaceError,
    MissingCustomer,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from farmconnect.models.cart import CartItem
from farmconnect.models.order import Order
from farmconnect.models.product import Product
from farmconnect.models.sub_order import SubOrder
from farmconnect.models.user import User, UserRole
from farmconnect.notifications import (
    NotificationTarget,
    OrderEvent,
    dispatch_order_event,
)
from farmconnect.schemas.orders_schemas import DeliveryAddress
from farmconnect.services.order_aggregator import build_sub_orders

logger = logging.getLogger(__name__)


def _validate_address(delivery_address: Union[DeliveryAddress, dict, None]) -> DeliveryAddress:
    if isinstance(delivery_address, DeliveryAddress):
        return delivery_address
    if delivery_address is None:
        raise ValidationError("Delivery address is required")
    try:
        return DeliveryAddress.model_validate(delivery_address)
    except PydanticValidationError as exc:
        error = exc.errors()[0]
        field = ".".join(str(part) for part in error["loc"])
        raise ValidationError(f"Invalid delivery address: {field} {error['msg'].lower()}")


def clear_cart(session: Session, customer_id: int, line_ids: list):
    """Delete exactly the cart lines this checkout read."""
    result = session.execute(
        delete(CartItem).where(
            CartItem.customer_id == customer_id,
            CartItem.id.in_(line_ids),
        )
    )
    if result.rowcount != len(line_ids):
        # another checkout consumed (part of) the cart first
        raise PersistenceError("Cart changed during checkout, please retry")


# -------------------------
# CHECKOUT
# -------------------------

def place_order(
    session: Session,
    customer: Optional[User],
    delivery_address: Union[DeliveryAddress, dict, None],
    background_tasks: Optional[BackgroundTasks] = None,
) -> Order:
    """
    Turn the customer's cart into an order with one sub-order per farmer.

    Order, sub-orders and line items are written and the cart is cleared in
    a single transaction. Farmers are notified only after it commits.
    """
    if customer is None or customer.id is None:
        raise MissingCustomer()
    address = _validate_address(delivery_address)

    try:
        cart_lines = session.exec(
            select(CartItem, Product)
            .join(Product, CartItem.product_id == Product.id, isouter=True)
            .where(CartItem.customer_id == customer.id)
            .order_by(CartItem.created_at, CartItem.id)
            .with_for_update(of=CartItem)
        ).all()

        sub_orders, total_amount = build_sub_orders(cart_lines)

        order = Order(
            customer_id=customer.id,
            total_amount=total_amount,
            **address.model_dump(),
        )
        session.add(order)
        session.flush()

        for sub_order in sub_orders:
            sub_order.order = order
            session.add(sub_order)
            session.flush()

        clear_cart(session, customer.id, [line.id for line, _ in cart_lines])
        session.commit()

    except MarketplaceError:
        session.rollback()
        raise
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception(f"Checkout failed for customer {customer.id}, rolled back")
        raise PersistenceError("Failed to create order") from exc

    session.refresh(order)
    logger.info(
        f"Order {order.id} placed by customer {customer.id}: "
        f"{len(order.sub_orders)} sub-orders, total {order.total_amount}"
    )

    dispatch_order_event(
        event=OrderEvent.ORDER_PLACED,
        session=session,
        background_tasks=background_tasks,
        targets=[
            NotificationTarget(
                user_id=sub_order.farmer_id,
                message=f"A new order has been placed by customer {customer.full_name}",
                related_id=sub_order.id,
                role=UserRole.farmer,
                data={"order_id": order.id, "sub_order_id": sub_order.id},
            )
            for sub_order in order.sub_orders
        ],
    )

    return order


# -------------------------
# STATUS MACHINE
# -------------------------

def update_sub_order_status(
    session: Session,
    sub_order_id: int,
    farmer: User,
    new_status: Union[OrderStatus, str],
    background_tasks: Optional[BackgroundTasks] = None,
) -> SubOrder:
    try:
        new_status = OrderStatus(new_status)
    except ValueError:
        raise ValidationError(f"Unknown order status: {new_status}")

    try:
        sub_order = session.exec(
            select(SubOrder)
            .where(SubOrder.id == sub_order_id, SubOrder.farmer_id == farmer.id)
            .with_for_update()
        ).first()

        if not sub_order:
            raise NotFoundError(
                "Order not found or you do not have permission to update this order."
            )

        if new_status not in FARMER_SETTABLE:
            raise ConflictError("Sub-orders can only be marked as shipped or delivered")

        current = sub_order.order_status
        if not can_transition(current, new_status):
            raise ConflictError(
                f"Cannot change order status from {current.value} to {new_status.value}"
            )

        sub_order.order_status = new_status
        sub_order.updated_at = datetime.utcnow()
        session.add(sub_order)
        session.commit()

    except MarketplaceError:
        session.rollback()
        raise
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception(f"Status update of sub-order {sub_order_id} failed")
        raise PersistenceError("Failed to update sub-order status") from exc

    session.refresh(sub_order)
    order = sub_order.order
    logger.info(
        f"Sub-order {sub_order.id} of order {order.id} moved "
        f"{current.value} -> {new_status.value} by farmer {farmer.id}"
    )

    dispatch_order_event(
        event=OrderEvent.ORDER_STATUS_UPDATED,
        session=session,
        background_tasks=background_tasks,
        targets=[
            NotificationTarget(
                user_id=order.customer_id,
                message=(
                    f"Your order from {farmer.full_name} has been updated "
                    f"to {new_status.value}."
                ),
                related_id=order.id,
                role=UserRole.customer,
                data={
                    "order_id": order.id,
                    "sub_order_id": sub_order.id,
                    "order_status": new_status.value,
                },
            )
        ],
    )

    return sub_order


def cancel_order(
    session: Session,
    order_id: int,
    customer: User,
    background_tasks: Optional[BackgroundTasks] = None,
) -> Order:
    """Cancel every sub-order at once, allowed only while all are pending."""
    try:
        order = session.exec(
            select(Order).where(Order.id == order_id).with_for_update()
        ).first()

        if not order:
            raise NotFoundError("Order not found")

        if order.customer_id != customer.id:
            raise AuthorizationError("Not authorized to cancel this order")

        sub_orders = session.exec(
            select(SubOrder)
            .where(SubOrder.order_id == order.id)
            .order_by(SubOrder.id)
            .with_for_update()
        ).all()

        progressed = [s for s in sub_orders if s.order_status != OrderStatus.pending]
        if progressed:
            raise ConflictError(
                "Cannot cancel order. Current status: "
                + ", ".join(sorted({s.order_status.value for s in progressed}))
            )

        now = datetime.utcnow()
        for sub_order in sub_orders:
            sub_order.order_status = OrderStatus.canceled
            sub_order.updated_at = now
            session.add(sub_order)

        session.commit()

    except MarketplaceError:
        session.rollback()
        raise
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception(f"Cancellation of order {order_id} failed")
        raise PersistenceError("Failed to cancel order") from exc

    session.refresh(order)
    logger.info(f"Order {order.id} canceled by customer {customer.id}")

    targets = [
        NotificationTarget(
            user_id=order.customer_id,
            message=f"Your order #{order.id} has been canceled.",
            related_id=order.id,
            role=UserRole.customer,
            data={"order_id": order.id},
        )
    ]
    targets += [
        NotificationTarget(
            user_id=sub_order.farmer_id,
            message=f"Order #{order.id} was canceled by the customer.",
            related_id=sub_order.id,
            role=UserRole.farmer,
            data={"order_id": order.id, "sub_order_id": sub_order.id},
        )
        for sub_order in order.sub_orders
    ]
    dispatch_order_event(
        event=OrderEvent.ORDER_CANCELED,
        session=session,
        background_tasks=background_tasks,
        targets=targets,
    )

    return order


# -------------------------
# READS
# -------------------------

def customer_orders_query(customer_id: int):
    return (
        select(Order)
        .where(Order.customer_id == customer_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )


def farmer_sub_orders_query(farmer_id: int, status: Optional[OrderStatus] = None):
    query = select(SubOrder).where(SubOrder.farmer_id == farmer_id)
    if status:
        query = query.where(SubOrder.order_status == status)
    return query.order_by(SubOrder.created_at.desc(), SubOrder.id.desc())


def get_order_for_user(session: Session, order_id: int, user: User) -> Order:
    """The order, if ``user`` is its customer or one of its farmers."""
    order = session.get(Order, order_id)

    if order and (
        order.customer_id == user.id
        or any(s.farmer_id == user.id for s in order.sub_orders)
    ):
        return order

    raise NotFoundError("Order not found")
