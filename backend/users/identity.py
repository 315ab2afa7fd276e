"""
Resolution of an authenticated request user into the actor the order
lifecycle reasons about.

Authentication itself is handled by DRF/simplejwt and trusted completely;
this module only attaches the restaurants or driver the user acts for.
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from .models import User


@dataclass(frozen=True)
class Actor:
    actor_id: Optional[int]
    role: str
    restaurant_ids: Tuple[int, ...] = ()
    driver_id: Optional[int] = None

    SYSTEM = "system"

    @classmethod
    def from_user(cls, user) -> "Actor":
        if user.is_platform_admin:
            return cls(actor_id=user.pk, role=User.Role.SUPER_ADMIN)

        if user.role == User.Role.RESTAURANT_OWNER:
            return cls(
                actor_id=user.pk,
                role=user.role,
                restaurant_ids=tuple(
                    user.restaurants.order_by("id").values_list("id", flat=True)
                ),
            )

        if user.role == User.Role.DRIVER:
            driver = getattr(user, "driver_profile", None)
            return cls(
                actor_id=user.pk,
                role=user.role,
                driver_id=driver.id if driver else None,
            )

        return cls(actor_id=user.pk, role=user.role)

    @classmethod
    def system(cls) -> "Actor":
        """Principal for system-initiated changes (payment reconciliation)."""
        return cls(actor_id=None, role=cls.SYSTEM)

    @property
    def is_admin(self):
        return self.role == User.Role.SUPER_ADMIN

    @property
    def is_system(self):
        return self.role == self.SYSTEM

    @property
    def is_driver(self):
        return self.role == User.Role.DRIVER

    @property
    def is_restaurant(self):
        return self.role == User.Role.RESTAURANT_OWNER

    @property
    def is_customer(self):
        return self.role == User.Role.CUSTOMER

    def owns_restaurant(self, restaurant_id) -> bool:
        return self.is_restaurant and restaurant_id in self.restaurant_ids
