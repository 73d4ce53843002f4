from farmconnect.models.notifications import NotificationType
from farmconnect.notifications.channels import Channel
from farmconnect.notifications.events import OrderEvent


NOTIFICATION_RULES = {

    OrderEvent.ORDER_PLACED: {
        Channel.INAPP: True,
        Channel.REALTIME: True,
    },

    OrderEvent.ORDER_STATUS_UPDATED: {
        Channel.INAPP: True,
        Channel.REALTIME: True,
    },

    OrderEvent.ORDER_CANCELED: {
        Channel.INAPP: True,
        Channel.REALTIME: True,
    },

    OrderEvent.RECEIVE_MESSAGE: {
        Channel.INAPP: True,
        Channel.REALTIME: True,
    },

}

NOTIFICATION_TYPES = {
    OrderEvent.ORDER_PLACED: NotificationType.order_placement,
    OrderEvent.ORDER_STATUS_UPDATED: NotificationType.order_status_update,
    OrderEvent.ORDER_CANCELED: NotificationType.order_cancellation,
    OrderEvent.RECEIVE_MESSAGE: NotificationType.message,
}
