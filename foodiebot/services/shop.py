# foodiebot/services/shop.py
from dataclasses import dataclass
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from foodiebot.core.config import settings
from foodiebot.models.sql_models import DeliveryRate, ShopSettings
from foodiebot.services.geo_pricing import GeoPoint, PricingConfig, RateTier


@dataclass(frozen=True)
class ShopInfo:
    name: str
    location: Optional[GeoPoint] = None
    upi_id: str = settings.DEFAULT_UPI_ID
    contact_phone: Optional[str] = None
    currency: str = settings.CURRENCY_SYMBOL


class ShopSettingsService:
    """The single shop_settings row plus its delivery rate tiers."""

    def __init__(self, db: Session):
        self.db = db

    def _row(self) -> Optional[ShopSettings]:
        return self.db.query(ShopSettings).first()

    def info(self) -> ShopInfo:
        row = self._row()
        if row is None:
            return ShopInfo(name=settings.DEFAULT_SHOP_NAME)
        location = None
        if row.latitude is not None and row.longitude is not None:
            location = GeoPoint(row.latitude, row.longitude)
        return ShopInfo(
            name=row.shop_name or settings.DEFAULT_SHOP_NAME,
            location=location,
            upi_id=row.upi_id or settings.DEFAULT_UPI_ID,
            contact_phone=row.contact_phone,
        )

    def tiers(self) -> List[RateTier]:
        rates = self.db.query(DeliveryRate).order_by(DeliveryRate.max_km).all()
        return [RateTier(r.max_km, r.fee) for r in rates]

    def pricing(self) -> PricingConfig:
        return PricingConfig(shop_location=self.info().location, tiers=self.tiers())

    def update(
        self,
        shop_name: Optional[str] = None,
        location: Optional[GeoPoint] = None,
        upi_id: Optional[str] = None,
        contact_phone: Optional[str] = None,
        tiers: Optional[Sequence[RateTier]] = None,
    ) -> ShopInfo:
        row = self._row()
        if row is None:
            row = ShopSettings(shop_name=settings.DEFAULT_SHOP_NAME)
            self.db.add(row)
        if shop_name is not None:
            row.shop_name = shop_name
        if location is not None:
            row.latitude, row.longitude = location.latitude, location.longitude
        if upi_id is not None:
            row.upi_id = upi_id
        if contact_phone is not None:
            row.contact_phone = contact_phone
        if tiers is not None:
            # Replace the whole tier table
            self.db.query(DeliveryRate).delete()
            for tier in tiers:
                self.db.add(DeliveryRate(max_km=tier.max_km, fee=tier.fee))
        self.db.commit()
        return self.info()
