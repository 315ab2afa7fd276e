"""
Order status rules.

TRANSITIONS is the single source of truth for which status may follow which.
``is_permitted`` decides whether an actor may ask for a status at all; it is
evaluated before the table and knows nothing about persistence.
"""
from typing import FrozenSet

from .models import Order

S = Order.Status


class OrderStateMachine:
    TRANSITIONS = {
        S.NEW: frozenset({S.CONFIRMED, S.CANCELLED}),
        S.CONFIRMED: frozenset({S.PREPARING, S.CANCELLED}),
        S.PREPARING: frozenset({S.READY_FOR_PICKUP, S.CANCELLED}),
        S.READY_FOR_PICKUP: frozenset({S.ASSIGNED, S.CANCELLED}),
        S.ASSIGNED: frozenset({S.IN_TRANSIT, S.CANCELLED}),
        S.IN_TRANSIT: frozenset({S.DELIVERED, S.CANCELLED}),
        S.DELIVERED: frozenset(),
        S.CANCELLED: frozenset(),
    }

    RESTAURANT_TRANSITIONS = frozenset({S.CONFIRMED, S.PREPARING, S.READY_FOR_PICKUP, S.CANCELLED})
    ASSIGNED_DRIVER_TRANSITIONS = frozenset({S.IN_TRANSIT, S.DELIVERED})

    @classmethod
    def allowed_next(cls, current: str) -> FrozenSet[str]:
        return cls.TRANSITIONS.get(current, frozenset())

    @classmethod
    def is_valid_transition(cls, current: str, requested: str) -> bool:
        return requested in cls.allowed_next(current)

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        return not cls.allowed_next(status)

    @classmethod
    def is_permitted(cls, actor, order, requested: str) -> bool:
        """
        Whether ``actor`` may request ``requested`` for ``order``.

        ``order`` only needs ``restaurant_id`` and ``driver_id``. Accepting
        (``assigned``) is open to any driver; whether that driver is active
        and in the right zone is checked by the accept operation itself.
        """
        if actor.is_admin or actor.is_system:
            return True

        if actor.is_restaurant and actor.owns_restaurant(order.restaurant_id):
            return requested in cls.RESTAURANT_TRANSITIONS

        if actor.is_driver and actor.driver_id is not None:
            if requested == S.ASSIGNED:
                return True
            if order.driver_id == actor.driver_id:
                return requested in cls.ASSIGNED_DRIVER_TRANSITIONS

        return False
