"""
Notification sink and inbox API tests.
"""
import pytest
from unittest import mock
from rest_framework import status

from notifications.models import Notification
from notifications.services import NotificationService

NOTIFICATIONS_URL = "/api/notifications/"


@pytest.fixture
def inbox(customer_user, other_customer_user):
    NotificationService.enqueue(customer_user.pk, Notification.Type.ORDER_STATUS, "Order confirmed", "Confirmed.")
    NotificationService.enqueue(customer_user.pk, Notification.Type.ORDER_DELIVERED, "Order delivered", "Enjoy.")
    NotificationService.enqueue(other_customer_user.pk, Notification.Type.PAYMENT, "Payment", "Paid.")
    return Notification.objects.filter(user=customer_user)


@pytest.mark.django_db
class TestNotificationService:
    def test_enqueue(self, customer_user):
        notification = NotificationService.enqueue(
            customer_user.pk, Notification.Type.ORDER_STATUS, "Hello", "World", {"order_number": "ORD-1"}
        )

        assert notification.user == customer_user
        assert notification.is_read is False
        assert notification.data == {"order_number": "ORD-1"}

    def test_no_recipient(self, db):
        assert NotificationService.enqueue(None, Notification.Type.ORDER_STATUS, "Hello", "World") is None
        assert not Notification.objects.exists()

    def test_failure_is_swallowed(self, customer_user):
        with mock.patch.object(Notification.objects, "create", side_effect=RuntimeError("db down")):
            result = NotificationService.enqueue(customer_user.pk, Notification.Type.ORDER_STATUS, "Hello", "World")

        assert result is None

    def test_mark_read(self, inbox):
        notification = NotificationService.mark_read(inbox.first())

        assert notification.is_read
        assert notification.read_at is not None

    def test_mark_all_read_only_touches_own(self, inbox, customer_user, other_customer_user):
        assert NotificationService.mark_all_read(customer_user) == 2
        assert Notification.objects.filter(user=other_customer_user, is_read=False).count() == 1


@pytest.mark.django_db
class TestNotificationAPI:
    def test_lists_only_own(self, authenticated_client, customer_user, inbox):
        response = authenticated_client(customer_user).get(NOTIFICATIONS_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data["count"] == 2

    def test_filter_unread(self, authenticated_client, customer_user, inbox):
        NotificationService.mark_read(inbox.first())

        response = authenticated_client(customer_user).get(NOTIFICATIONS_URL, {"is_read": "false"})

        assert response.data["count"] == 1

    def test_read(self, authenticated_client, customer_user, inbox):
        notification = inbox.first()

        response = authenticated_client(customer_user).post(f"{NOTIFICATIONS_URL}{notification.pk}/read/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["is_read"] is True

    def test_cannot_read_someone_elses(self, authenticated_client, other_customer_user, inbox):
        response = authenticated_client(other_customer_user).post(f"{NOTIFICATIONS_URL}{inbox.first().pk}/read/")

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_read_all(self, authenticated_client, customer_user, inbox):
        response = authenticated_client(customer_user).post(f"{NOTIFICATIONS_URL}read-all/")

        assert response.data == {"updated": 2}

    def test_requires_authentication(self, api_client):
        response = api_client.get(NOTIFICATIONS_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
