from sqlmodel import select

from conftest import auth_headers
from farmconnect.models import Message, Notification, NotificationType


class TestNotificationFeed:
    def test_farmer_sees_order_placement(self, client, farmer_one, placed_order):
        response = client.get("/notifications", headers=auth_headers(farmer_one))

        body = response.json()
        assert body["total_items"] == 1
        notification = body["results"][0]
        assert notification["type"] == "OrderPlacement"
        assert notification["is_read"] is False

    def test_mark_as_read(self, client, farmer_one, placed_order):
        notification_id = client.get(
            "/notifications", headers=auth_headers(farmer_one)
        ).json()["results"][0]["id"]

        response = client.patch(
            f"/notifications/{notification_id}/read", headers=auth_headers(farmer_one)
        )

        assert response.status_code == 200
        assert response.json()["notification"]["is_read"] is True
        unread = client.get(
            "/notifications", params={"unread_only": True}, headers=auth_headers(farmer_one)
        ).json()
        assert unread["total_items"] == 0

    def test_cannot_mark_someone_elses(self, client, farmer_one, farmer_two, placed_order):
        notification_id = client.get(
            "/notifications", headers=auth_headers(farmer_one)
        ).json()["results"][0]["id"]

        response = client.patch(
            f"/notifications/{notification_id}/read", headers=auth_headers(farmer_two)
        )

        assert response.status_code == 403

    def test_unknown_notification(self, client, customer):
        response = client.patch("/notifications/9999/read", headers=auth_headers(customer))

        assert response.status_code == 404


class TestMessages:
    def test_send_creates_notification(self, client, session, customer, farmer_one):
        response = client.post(
            "/messages",
            json={"recipient_id": farmer_one.id, "content": "Are the yams fresh?"},
            headers=auth_headers(customer),
        )

        assert response.status_code == 201
        assert response.json()["data"]["sender_id"] == customer.id

        notification = session.exec(
            select(Notification).where(Notification.user_id == farmer_one.id)
        ).one()
        assert notification.type == NotificationType.message
        assert "Are the yams fresh?" in notification.message

    def test_unknown_recipient(self, client, customer):
        response = client.post(
            "/messages",
            json={"recipient_id": 9999, "content": "hello"},
            headers=auth_headers(customer),
        )

        assert response.status_code == 404

    def test_empty_content(self, client, customer, farmer_one):
        response = client.post(
            "/messages",
            json={"recipient_id": farmer_one.id, "content": ""},
            headers=auth_headers(customer),
        )

        assert response.status_code == 400

    def test_conversation_is_between_two_users(self, client, customer, other_customer, farmer_one):
        for sender, recipient, text in [
            (customer, farmer_one, "first"),
            (farmer_one, customer, "second"),
            (other_customer, farmer_one, "unrelated"),
        ]:
            client.post(
                "/messages",
                json={"recipient_id": recipient.id, "content": text},
                headers=auth_headers(sender),
            )

        response = client.get(f"/messages/{farmer_one.id}", headers=auth_headers(customer))

        assert [m["content"] for m in response.json()["messages"]] == ["first", "second"]

    def test_only_recipient_marks_read(self, client, session, customer, farmer_one):
        message_id = client.post(
            "/messages",
            json={"recipient_id": farmer_one.id, "content": "hi"},
            headers=auth_headers(customer),
        ).json()["data"]["id"]

        assert client.patch(
            f"/messages/{message_id}/read", headers=auth_headers(customer)
        ).status_code == 403
        assert client.patch(
            f"/messages/{message_id}/read", headers=auth_headers(farmer_one)
        ).status_code == 200

        session.expire_all()
        assert session.get(Message, message_id).is_read is True
