"""
Who an order belongs to: a registered customer or a guest, never both.
Only registered customers take part in loyalty accrual and in-app
notifications.
"""
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class RegisteredCustomer:
    user_id: int

    earns_loyalty = True

    def order_fields(self) -> dict:
        return {"customer_id": self.user_id, "guest_name": "", "guest_email": "", "guest_phone": ""}

    @property
    def notification_user_id(self):
        return self.user_id


@dataclass(frozen=True)
class GuestCustomer:
    name: str
    email: str
    phone: str = ""

    earns_loyalty = False

    def order_fields(self) -> dict:
        return {
            "customer_id": None,
            "guest_name": self.name,
            "guest_email": self.email,
            "guest_phone": self.phone or "",
        }

    @property
    def notification_user_id(self):
        return None


class CustomerIdentity:
    @staticmethod
    def for_order(order) -> Union[RegisteredCustomer, GuestCustomer]:
        if order.customer_id is not None:
            return RegisteredCustomer(user_id=order.customer_id)
        return GuestCustomer(name=order.guest_name, email=order.guest_email, phone=order.guest_phone)
