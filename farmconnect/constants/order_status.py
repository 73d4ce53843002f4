from enum import Enum


class OrderStatus(str, Enum):
    pending = "pending"
    shipped = "shipped"
    delivered = "delivered"
    canceled = "canceled"


ALLOWED_TRANSITIONS = {
    OrderStatus.pending: [OrderStatus.shipped, OrderStatus.canceled],
    OrderStatus.shipped: [OrderStatus.delivered],
    OrderStatus.delivered: [],
    OrderStatus.canceled: [],
}

# Statuses a farmer may set on their own sub-order. Cancellation goes through
# the customer's whole-order cancel.
FARMER_SETTABLE = {OrderStatus.shipped, OrderStatus.delivered}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, [])
