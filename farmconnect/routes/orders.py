from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlmodel import Session

from farmconnect.constants.order_status import OrderStatus
from farmconnect.database import get_session
from farmconnect.models.user import User
from farmconnect.schemas.orders_schemas import (
    CheckoutRequest,
    OrderOut,
    OrderStatusUpdate,
    order_to_out,
    sub_order_to_out,
)
from farmconnect.services import order_service
from farmconnect.utils.pagination import paginate
from farmconnect.utils.token import (
    get_current_customer,
    get_current_farmer,
    get_current_user,
)

router = APIRouter()


# Checkout

@router.post("", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: CheckoutRequest,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_customer),
):
    order = order_service.place_order(
        session,
        current_user,
        payload.delivery_address,
        background_tasks=background_tasks,
    )
    return order_to_out(order)


# Order history

@router.get("")
def customer_order_history(
    page: int = 1,
    limit: int = 10,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_customer),
):
    return paginate(
        session=session,
        query=order_service.customer_orders_query(current_user.id),
        page=page,
        limit=limit,
        serialize=order_to_out,
    )


@router.get("/farmer")
def farmer_orders(
    page: int = 1,
    limit: int = 10,
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_farmer),
):
    return paginate(
        session=session,
        query=order_service.farmer_sub_orders_query(current_user.id, order_status),
        page=page,
        limit=limit,
        serialize=sub_order_to_out,
    )


# Track order

@router.get("/{order_id}", response_model=OrderOut)
def track_order(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    order = order_service.get_order_for_user(session, order_id, current_user)
    return order_to_out(order)


# Farmer status update

@router.patch("/{sub_order_id}/status")
def update_sub_order_status(
    sub_order_id: int,
    payload: OrderStatusUpdate,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_farmer),
):
    sub_order = order_service.update_sub_order_status(
        session,
        sub_order_id,
        current_user,
        payload.order_status,
        background_tasks=background_tasks,
    )
    return {
        "message": "Sub-order status updated",
        "sub_order": sub_order_to_out(sub_order),
    }


# Customer cancellation

@router.patch("/{order_id}/cancel")
def cancel_order(
    order_id: int,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    order = order_service.cancel_order(
        session,
        order_id,
        current_user,
        background_tasks=background_tasks,
    )
    return {
        "message": "Order has been canceled",
        "order": order_to_out(order),
    }
