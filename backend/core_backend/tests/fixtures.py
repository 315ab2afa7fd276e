"""
Shared test fixtures for all backend tests.

This module provides reusable pytest fixtures for common test objects
like users, restaurants, drivers, vouchers and orders.
"""
import pytest
from decimal import Decimal
from django.utils import timezone
from datetime import timedelta

from users.models import User
from restaurants.models import MenuItem, Region, Restaurant
from drivers.models import Driver
from vouchers.models import Voucher


# ============================================================================
# USER FIXTURES
# ============================================================================

@pytest.fixture
def customer_user(db):
    """Create a registered customer"""
    return User.objects.create_user(
        email='anna@example.com',
        username='anna',
        password='password123',
        role=User.Role.CUSTOMER,
    )


@pytest.fixture
def other_customer_user(db):
    """Create a second registered customer"""
    return User.objects.create_user(
        email='ben@example.com',
        username='ben',
        password='password123',
        role=User.Role.CUSTOMER,
    )


@pytest.fixture
def owner_user(db):
    """Create a restaurant owner"""
    return User.objects.create_user(
        email='owner@pizzeria.ch',
        username='pizzeria_owner',
        password='password123',
        role=User.Role.RESTAURANT_OWNER,
    )


@pytest.fixture
def other_owner_user(db):
    """Create the owner of a different restaurant"""
    return User.objects.create_user(
        email='owner@burgers.ch',
        username='burger_owner',
        password='password123',
        role=User.Role.RESTAURANT_OWNER,
    )


@pytest.fixture
def admin_user(db):
    """Create a platform admin"""
    return User.objects.create_user(
        email='admin@platform.ch',
        username='platform_admin',
        password='password123',
        role=User.Role.SUPER_ADMIN,
    )


@pytest.fixture
def driver_user(db):
    """Create a user with the driver role (profile created by `driver`)"""
    return User.objects.create_user(
        email='driver@example.com',
        username='driver_one',
        password='password123',
        role=User.Role.DRIVER,
    )


@pytest.fixture
def other_driver_user(db):
    return User.objects.create_user(
        email='driver2@example.com',
        username='driver_two',
        password='password123',
        role=User.Role.DRIVER,
    )


# ============================================================================
# RESTAURANT FIXTURES
# ============================================================================

@pytest.fixture
def restaurant(owner_user):
    """Active restaurant in Zurich with coordinates (Zurich HB)"""
    return Restaurant.objects.create(
        owner=owner_user,
        name='Pizzeria Centrale',
        region=Region.ZURICH,
        address='Bahnhofplatz 1',
        city='Zurich',
        latitude=Decimal('47.378177'),
        longitude=Decimal('8.540192'),
        status=Restaurant.Status.ACTIVE,
        min_order_amount=Decimal('15.00'),
    )


@pytest.fixture
def other_restaurant(other_owner_user):
    """Active restaurant in Bern without coordinates"""
    return Restaurant.objects.create(
        owner=other_owner_user,
        name='Burger Bern',
        region=Region.BERN,
        city='Bern',
        status=Restaurant.Status.ACTIVE,
    )


@pytest.fixture
def pizza(restaurant):
    """Menu item priced 20.00"""
    return MenuItem.objects.create(restaurant=restaurant, name='Margherita', price=Decimal('20.00'))


@pytest.fixture
def salad(restaurant):
    """Menu item priced 12.50"""
    return MenuItem.objects.create(restaurant=restaurant, name='Insalata Mista', price=Decimal('12.50'))


# ============================================================================
# DRIVER FIXTURES
# ============================================================================

@pytest.fixture
def driver(driver_user):
    """Active driver picking up in Zurich"""
    return Driver.objects.create(
        user=driver_user,
        pickup_zone=Region.ZURICH,
        status=Driver.Status.ACTIVE,
        vehicle_type='bike',
    )


@pytest.fixture
def other_driver(other_driver_user):
    """Second active driver picking up in Zurich"""
    return Driver.objects.create(
        user=other_driver_user,
        pickup_zone=Region.ZURICH,
        status=Driver.Status.ACTIVE,
        vehicle_type='scooter',
    )


# ============================================================================
# VOUCHER FIXTURES
# ============================================================================

@pytest.fixture
def welcome_voucher(db):
    """WELCOME10: 10% off orders from 20.00, capped at 5.00, 100 uses"""
    now = timezone.now()
    return Voucher.objects.create(
        code='WELCOME10',
        description='10% off your first order',
        discount_type=Voucher.DiscountType.PERCENTAGE,
        discount_value=Decimal('10'),
        min_order_amount=Decimal('20.00'),
        max_discount_amount=Decimal('5.00'),
        usage_limit=100,
        valid_from=now - timedelta(days=1),
        valid_until=now + timedelta(days=30),
    )


@pytest.fixture
def single_use_voucher(db):
    """FIVEOFF: 5.00 off, exactly one use"""
    now = timezone.now()
    return Voucher.objects.create(
        code='FIVEOFF',
        discount_type=Voucher.DiscountType.FIXED_AMOUNT,
        discount_value=Decimal('5.00'),
        usage_limit=1,
        valid_from=now - timedelta(days=1),
        valid_until=now + timedelta(days=30),
    )


# ============================================================================
# ORDER FIXTURES
# ============================================================================

@pytest.fixture
def delivery_details():
    """Drop-off 0.8 km from the restaurant fixture (fee 6.20)"""
    from orders.services import DeliveryDetails
    return DeliveryDetails(
        address='Limmatquai 10',
        city='Zurich',
        postal_code='8001',
        latitude=Decimal('47.371500'),
        longitude=Decimal('8.544000'),
    )


@pytest.fixture
def order_factory(restaurant, pizza, delivery_details):
    """
    Factory placing an order through FulfillmentService.

    Usage:
        def test_example(order_factory, customer_user):
            order = order_factory(customer=customer_user)
            order = order_factory(guest_email='guest@example.com')
    """
    from orders.identity import GuestCustomer, RegisteredCustomer
    from orders.services import FulfillmentService

    def _create(customer=None, guest_email='guest@example.com', quantity=1, voucher_code=None, items=None):
        if customer is not None:
            identity = RegisteredCustomer(user_id=customer.pk)
        else:
            identity = GuestCustomer(name='Guest Customer', email=guest_email, phone='+41790000000')
        return FulfillmentService.create_order(
            customer=identity,
            restaurant_id=restaurant.pk,
            items=items or [{'menu_item_id': pizza.pk, 'quantity': quantity}],
            delivery=delivery_details,
            voucher_code=voucher_code,
        )

    return _create


@pytest.fixture
def order(order_factory, customer_user):
    """Registered customer's order: 1 x Margherita"""
    return order_factory(customer=customer_user)


@pytest.fixture
def order_in_status():
    """
    Move an existing order to a status directly (test setup only).

    Usage:
        order = order_in_status(order, Order.Status.READY_FOR_PICKUP)
    """
    from orders.models import Order

    def _move(order, status, driver=None):
        fields = {'status': status}
        if driver is not None:
            fields['driver'] = driver
        Order.objects.filter(pk=order.pk).update(**fields)
        order.refresh_from_db()
        return order

    return _move


# ============================================================================
# AUTHENTICATED CLIENTS
# ============================================================================

@pytest.fixture
def authenticated_client():
    """
    Factory returning an API client authenticated as the given user.

    Usage:
        def test_example(authenticated_client, customer_user):
            client = authenticated_client(customer_user)
            response = client.get('/api/orders/')
    """
    from rest_framework.test import APIClient

    def _client(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    return _client


@pytest.fixture
def mock_stripe():
    """
    Mock Stripe PaymentIntent creation.

    Usage:
        def test_stripe_payment(mock_stripe):
            result = PaymentIntentService.create_for_order(order)
            mock_stripe.assert_called_once()
    """
    from unittest.mock import patch, MagicMock

    with patch('stripe.PaymentIntent.create') as mock_create:
        mock_create.return_value = MagicMock(
            id='pi_test_123',
            client_secret='pi_test_123_secret_abc',
            status='requires_payment_method',
        )
        yield mock_create
