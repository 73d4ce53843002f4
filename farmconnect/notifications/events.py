from enum import Enum


class OrderEvent(str, Enum):
    """Real-time event names; values are what clients listen for."""

    ORDER_PLACED = "order-placed"
    ORDER_STATUS_UPDATED = "order-status-updated"
    ORDER_CANCELED = "order-canceled"
    RECEIVE_MESSAGE = "receive-message"
