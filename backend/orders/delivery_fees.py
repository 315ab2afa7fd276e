"""
Distance-based delivery fee.

fee = base + per_km * distance, where distance is the great-circle
(haversine) distance between restaurant and drop-off, rounded to 0.1 km.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
import logging
import math

from django.conf import settings

from payments.money import quantize

from .exceptions import DeliveryUnavailableError

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


class DeliveryFeeCalculator:
    def __init__(self, base_fee=None, per_km=None, radius_km=None):
        self.base_fee = Decimal(base_fee if base_fee is not None else settings.DELIVERY_BASE_FEE)
        self.per_km = Decimal(per_km if per_km is not None else settings.DELIVERY_FEE_PER_KM)
        self.radius_km = Decimal(radius_km if radius_km is not None else settings.DELIVERY_RADIUS_KM)

    @staticmethod
    def distance_km(lat1, lng1, lat2, lng2) -> Decimal:
        phi1, phi2 = math.radians(float(lat1)), math.radians(float(lat2))
        d_phi = math.radians(float(lat2) - float(lat1))
        d_lambda = math.radians(float(lng2) - float(lng1))

        a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
        distance = 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))
        return Decimal(str(distance)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)

    def fee_for(self, restaurant, latitude: Optional[Decimal], longitude: Optional[Decimal]) -> Decimal:
        """
        Fee for delivering from ``restaurant`` to the given drop-off.

        Without coordinates on either end only the base fee is charged.

        Raises:
            DeliveryUnavailableError: drop-off is beyond the delivery radius
        """
        if latitude is None or longitude is None or not restaurant.has_coordinates:
            return quantize(self.base_fee)

        distance = self.distance_km(restaurant.latitude, restaurant.longitude, latitude, longitude)
        if distance > self.radius_km:
            logger.info(f"Drop-off {distance} km from restaurant {restaurant.pk} exceeds {self.radius_km} km")
            raise DeliveryUnavailableError(
                details={"distance_km": str(distance), "max_distance_km": str(self.radius_km)}
            )

        return quantize(self.base_fee + self.per_km * distance)
