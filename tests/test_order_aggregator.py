import pytest

from farmconnect.exceptions import EmptyCart, ValidationError
from farmconnect.models import CartItem, Product
from farmconnect.services.order_aggregator import build_sub_orders, group_cart_by_farmer


def line(product_id, farmer_id, price, quantity, name=None):
    product = Product(
        id=product_id,
        farmer_id=farmer_id,
        name=name or f"product-{product_id}",
        price=price,
    )
    item = CartItem(id=product_id, customer_id=99, product_id=product_id, quantity=quantity)
    return item, product


class TestGroupCartByFarmer:
    def test_farmers_follow_first_appearance_in_cart(self):
        cart = [
            line(1, farmer_id=7, price=1, quantity=1),
            line(2, farmer_id=3, price=1, quantity=1),
            line(3, farmer_id=7, price=1, quantity=1),
            line(4, farmer_id=5, price=1, quantity=1),
        ]

        groups = group_cart_by_farmer(cart)

        assert list(groups) == [7, 3, 5]
        assert [p.id for _, p in groups[7]] == [1, 3]

    def test_missing_product_is_rejected(self):
        item = CartItem(id=1, customer_id=99, product_id=42, quantity=1)

        with pytest.raises(ValidationError):
            group_cart_by_farmer([(item, None)])


class TestBuildSubOrders:
    def test_one_sub_order_per_farmer_with_totals(self):
        cart = [
            line(1, farmer_id=1, price=10, quantity=2),
            line(2, farmer_id=2, price=5, quantity=1),
        ]

        sub_orders, total = build_sub_orders(cart)

        assert [s.farmer_id for s in sub_orders] == [1, 2]
        assert [s.total_amount for s in sub_orders] == [20, 5]
        assert total == 25

    def test_total_is_sum_of_line_items(self):
        cart = [
            line(1, farmer_id=1, price=2.5, quantity=4),
            line(2, farmer_id=2, price=3.0, quantity=3),
            line(3, farmer_id=1, price=1.25, quantity=2),
            line(4, farmer_id=3, price=7.0, quantity=1),
        ]

        sub_orders, total = build_sub_orders(cart)

        assert len(sub_orders) == 3
        all_items = [item for s in sub_orders for item in s.products]
        assert total == pytest.approx(sum(i.price * i.quantity for i in all_items))
        for sub_order in sub_orders:
            assert sub_order.total_amount == pytest.approx(
                sum(i.price * i.quantity for i in sub_order.products)
            )

    def test_line_items_snapshot_price_and_name(self):
        item, product = line(1, farmer_id=1, price=10, quantity=2, name="Okra")

        sub_orders, _ = build_sub_orders([(item, product)])
        product.price = 99

        snapshot = sub_orders[0].products[0]
        assert snapshot.price == 10
        assert snapshot.product_name == "Okra"
        assert snapshot.quantity == 2

    def test_line_items_keep_cart_order(self):
        cart = [
            line(5, farmer_id=1, price=1, quantity=1),
            line(2, farmer_id=1, price=1, quantity=1),
            line(9, farmer_id=1, price=1, quantity=1),
        ]

        sub_orders, _ = build_sub_orders(cart)

        assert [i.product_id for i in sub_orders[0].products] == [5, 2, 9]

    def test_empty_cart(self):
        with pytest.raises(EmptyCart):
            build_sub_orders([])
