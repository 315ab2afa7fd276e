"""
Menu lookup used at order placement.

This is the only place the order lifecycle reads live menu data; the
returned snapshots are frozen onto OrderItem rows.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional
import logging

from core_backend.exceptions import ResourceNotFoundError, ValidationFailedError

from .exceptions import RestaurantClosedError
from .models import MenuItem, Restaurant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MenuItemSnapshot:
    menu_item_id: int
    name: str
    unit_price: Decimal
    quantity: int
    special_instructions: Optional[str] = None

    @property
    def line_subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


class MenuLookupService:
    @staticmethod
    def get_orderable_restaurant(restaurant_id) -> Restaurant:
        try:
            restaurant = Restaurant.objects.select_related("owner").get(pk=restaurant_id)
        except (Restaurant.DoesNotExist, ValueError, TypeError):
            raise ResourceNotFoundError("Restaurant not found")

        if not restaurant.is_accepting_orders:
            raise RestaurantClosedError()
        return restaurant

    @staticmethod
    def resolve_items(restaurant: Restaurant, requested_items: List[dict]) -> List[MenuItemSnapshot]:
        """
        Resolve requested line items against the restaurant's current menu.

        Each requested item is a dict with ``menu_item_id``, ``quantity`` and an
        optional ``special_instructions``.
        """
        if not requested_items:
            raise ValidationFailedError("Order must contain at least one item")

        for item in requested_items:
            if int(item.get("quantity") or 0) < 1:
                raise ValidationFailedError(
                    "Item quantity must be at least 1",
                    details={"menu_item_id": item.get("menu_item_id")},
                )

        menu_item_ids = {item["menu_item_id"] for item in requested_items}
        menu_items = {
            menu_item.id: menu_item
            for menu_item in MenuItem.objects.filter(
                restaurant=restaurant, id__in=menu_item_ids
            )
        }

        missing = sorted(menu_item_ids - set(menu_items))
        if missing:
            raise ValidationFailedError(
                "One or more menu items not found or do not belong to this restaurant",
                details={"menu_item_ids": missing},
            )

        snapshots = []
        for item in requested_items:
            menu_item = menu_items[item["menu_item_id"]]
            if not menu_item.is_available:
                raise ValidationFailedError(f'Menu item "{menu_item.name}" is not available')
            snapshots.append(
                MenuItemSnapshot(
                    menu_item_id=menu_item.id,
                    name=menu_item.name,
                    unit_price=menu_item.price,
                    quantity=int(item["quantity"]),
                    special_instructions=item.get("special_instructions") or None,
                )
            )
        return snapshots
