from farmconnect.models.user import User, UserRole
from farmconnect.models.product import Product
from farmconnect.models.cart import CartItem
from farmconnect.models.order import Order
from farmconnect.models.sub_order import SubOrder
from farmconnect.models.order_item import OrderItem
from farmconnect.models.notifications import Notification, NotificationType
from farmconnect.models.message import Message

# add ALL models here
