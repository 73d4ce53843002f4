from sqlmodel import select

from conftest import auth_headers
from farmconnect.constants.order_status import OrderStatus
from farmconnect.models import Notification, NotificationType, SubOrder


def cancel(client, user, order_id):
    return client.patch(f"/orders/{order_id}/cancel", headers=auth_headers(user))


def statuses(session, order_id):
    session.expire_all()
    return [
        s.order_status
        for s in session.exec(select(SubOrder).where(SubOrder.order_id == order_id)).all()
    ]


class TestCancelOrder:
    def test_all_pending_order_is_canceled(self, client, session, customer, placed_order):
        response = cancel(client, customer, placed_order["id"])

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Order has been canceled"
        assert all(s["order_status"] == "canceled" for s in body["order"]["sub_orders"])
        assert statuses(session, placed_order["id"]) == [OrderStatus.canceled] * 2

    def test_customer_and_farmers_are_notified(self, client, session, customer, farmer_one, farmer_two, placed_order):
        cancel(client, customer, placed_order["id"])

        notifications = session.exec(
            select(Notification).where(Notification.type == NotificationType.order_cancellation)
        ).all()
        assert sorted(n.user_id for n in notifications) == sorted(
            [customer.id, farmer_one.id, farmer_two.id]
        )
        assert all(n.event == "order-canceled" for n in notifications)

    def test_rejected_once_a_sub_order_has_shipped(self, client, session, customer, farmer_one, placed_order):
        shipped_id = next(s["id"] for s in placed_order["sub_orders"] if s["farmer_id"] == farmer_one.id)
        client.patch(
            f"/orders/{shipped_id}/status",
            json={"orderStatus": "shipped"},
            headers=auth_headers(farmer_one),
        )

        response = cancel(client, customer, placed_order["id"])

        assert response.status_code == 400
        assert "shipped" in response.json()["detail"]
        assert sorted(statuses(session, placed_order["id"])) == sorted(
            [OrderStatus.shipped, OrderStatus.pending]
        )

    def test_cannot_cancel_twice(self, client, customer, placed_order):
        assert cancel(client, customer, placed_order["id"]).status_code == 200

        response = cancel(client, customer, placed_order["id"])

        assert response.status_code == 400

    def test_only_the_owner_can_cancel(self, client, session, other_customer, placed_order):
        response = cancel(client, other_customer, placed_order["id"])

        assert response.status_code == 403
        assert statuses(session, placed_order["id"]) == [OrderStatus.pending] * 2

    def test_farmer_of_the_order_cannot_cancel(self, client, session, farmer_one, placed_order):
        response = cancel(client, farmer_one, placed_order["id"])

        assert response.status_code == 403

    def test_unknown_order(self, client, customer):
        response = cancel(client, customer, 9999)

        assert response.status_code == 404
