from .events import OrderEvent
from .dispatcher import NotificationTarget, dispatch_order_event

__all__ = [
    "OrderEvent",
    "NotificationTarget",
    "dispatch_order_event",
]
