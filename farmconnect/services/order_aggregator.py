"""Split a customer's cart into one sub-order per farmer.

Pure functions over already-loaded rows: nothing here touches the session,
so the transactional writer decides when and how the results are persisted.
"""
from typing import Dict, Iterable, List, Tuple

from farmconnect.exceptions import EmptyCart, ValidationError
from farmconnect.models.cart import CartItem
from farmconnect.models.order_item import OrderItem
from farmconnect.models.product import Product
from farmconnect.models.sub_order import SubOrder


def group_cart_by_farmer(
    cart_lines: Iterable[Tuple[CartItem, Product]],
) -> Dict[int, List[Tuple[CartItem, Product]]]:
    """Partition (cart line, product) pairs by the product's farmer.

    Farmers keep the order in which their first product appears in the cart
    and lines keep cart order inside each group.
    """
    groups: Dict[int, List[Tuple[CartItem, Product]]] = {}

    for cart_item, product in cart_lines:
        if product is None:
            raise ValidationError(
                f"Product {cart_item.product_id} in your cart is no longer available"
            )
        if cart_item.quantity <= 0:
            raise ValidationError(f"Invalid quantity for {product.name}")
        groups.setdefault(product.farmer_id, []).append((cart_item, product))

    return groups


def build_sub_orders(
    cart_lines: Iterable[Tuple[CartItem, Product]],
) -> Tuple[List[SubOrder], float]:
    """Materialize unsaved sub-orders (with line items) and the order total."""
    cart_lines = list(cart_lines)
    if not cart_lines:
        raise EmptyCart()

    sub_orders = []
    total_amount = 0.0

    for farmer_id, lines in group_cart_by_farmer(cart_lines).items():
        items = [
            OrderItem(
                product_id=product.id,
                product_name=product.name,
                price=product.price,
                quantity=cart_item.quantity,
            )
            for cart_item, product in lines
        ]
        sub_total = sum(item.price * item.quantity for item in items)
        total_amount += sub_total

        sub_orders.append(
            SubOrder(farmer_id=farmer_id, total_amount=sub_total, products=items)
        )

    return sub_orders, total_amount
