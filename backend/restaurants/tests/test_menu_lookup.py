import pytest
from decimal import Decimal

from core_backend.exceptions import ResourceNotFoundError, ValidationFailedError
from restaurants.exceptions import RestaurantClosedError
from restaurants.models import MenuItem, Restaurant
from restaurants.services import MenuLookupService


@pytest.mark.django_db
class TestOrderableRestaurant:
    def test_active_restaurant(self, restaurant):
        assert MenuLookupService.get_orderable_restaurant(restaurant.pk) == restaurant

    def test_unknown_restaurant(self, db):
        with pytest.raises(ResourceNotFoundError):
            MenuLookupService.get_orderable_restaurant(999999)

    def test_inactive_restaurant(self, restaurant):
        Restaurant.objects.filter(pk=restaurant.pk).update(status=Restaurant.Status.INACTIVE)

        with pytest.raises(RestaurantClosedError):
            MenuLookupService.get_orderable_restaurant(restaurant.pk)


@pytest.mark.django_db
class TestResolveItems:
    def test_snapshots_current_menu(self, restaurant, pizza, salad):
        snapshots = MenuLookupService.resolve_items(
            restaurant,
            [
                {"menu_item_id": pizza.pk, "quantity": 2, "special_instructions": "extra basil"},
                {"menu_item_id": salad.pk, "quantity": 1},
            ],
        )

        assert [s.name for s in snapshots] == ["Margherita", "Insalata Mista"]
        assert snapshots[0].line_subtotal == Decimal("40.00")
        assert snapshots[0].special_instructions == "extra basil"
        assert snapshots[1].special_instructions is None

    def test_empty_order(self, restaurant):
        with pytest.raises(ValidationFailedError):
            MenuLookupService.resolve_items(restaurant, [])

    def test_zero_quantity(self, restaurant, pizza):
        with pytest.raises(ValidationFailedError):
            MenuLookupService.resolve_items(restaurant, [{"menu_item_id": pizza.pk, "quantity": 0}])

    def test_item_from_another_restaurant(self, restaurant, other_restaurant):
        burger = MenuItem.objects.create(restaurant=other_restaurant, name="Burger", price=Decimal("18.00"))

        with pytest.raises(ValidationFailedError) as exc_info:
            MenuLookupService.resolve_items(restaurant, [{"menu_item_id": burger.pk, "quantity": 1}])

        assert exc_info.value.details == {"menu_item_ids": [burger.pk]}

    def test_unavailable_item(self, restaurant, pizza):
        MenuItem.objects.filter(pk=pizza.pk).update(status=MenuItem.Status.INACTIVE)

        with pytest.raises(ValidationFailedError):
            MenuLookupService.resolve_items(restaurant, [{"menu_item_id": pizza.pk, "quantity": 1}])
