# foodiebot/services/geo_pricing.py
"""Distance and delivery-fee calculation.

Every caller that needs a delivery fee (chat orders, manual admin orders,
web orders, the delivery-cost endpoint) goes through PricingConfig.quote().
"""
import math
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Sequence


EARTH_RADIUS_KM = 6371.0


class GeoPoint(NamedTuple):
    latitude: float
    longitude: float


class RateTier(NamedTuple):
    max_km: float
    fee: float


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points (haversine)."""
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.latitude)) * math.cos(math.radians(b.latitude)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def resolve_fee(distance: float, tiers: Sequence[RateTier]) -> float:
    """Fee of the first tier whose threshold covers the distance.

    Past the last threshold the largest tier's fee is charged. No tiers means
    no fee can be computed, so 0 is returned and the caller reports the fee
    as still to be calculated.
    """
    if not tiers:
        return 0.0
    ordered = sorted(tiers, key=lambda t: t.max_km)
    for tier in ordered:
        if distance <= tier.max_km:
            return tier.fee
    return ordered[-1].fee


@dataclass(frozen=True)
class DeliveryQuote:
    fee: float = 0.0
    distance_km: Optional[float] = None
    calculated: bool = False


@dataclass(frozen=True)
class PricingConfig:
    shop_location: Optional[GeoPoint] = None
    tiers: List[RateTier] = field(default_factory=list)

    @property
    def is_configured(self) -> bool:
        return self.shop_location is not None and bool(self.tiers)

    def quote(self, customer_location: Optional[GeoPoint]) -> DeliveryQuote:
        if customer_location is None or not self.is_configured:
            return DeliveryQuote()
        dist = distance_km(self.shop_location, customer_location)
        return DeliveryQuote(fee=resolve_fee(dist, self.tiers), distance_km=dist, calculated=True)
