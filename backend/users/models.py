from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models
from django.utils.translation import gettext_lazy as _


class User(AbstractUser):
    class Role(models.TextChoices):
        CUSTOMER = "customer", _("Customer")
        RESTAURANT_OWNER = "restaurant_owner", _("Restaurant Owner")
        DRIVER = "driver", _("Driver")
        SUPER_ADMIN = "super_admin", _("Super Admin")

    email = models.EmailField(_("email address"), unique=True)
    phone_number = models.CharField(
        _("phone number"), max_length=20, blank=True, null=True
    )
    role = models.CharField(
        _("role"), max_length=30, choices=Role.choices, default=Role.CUSTOMER
    )
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    class Meta:
        indexes = [
            models.Index(fields=["role", "is_active"]),
        ]

    def __str__(self):
        return self.email

    @property
    def is_platform_admin(self):
        return self.role == self.Role.SUPER_ADMIN or self.is_superuser
