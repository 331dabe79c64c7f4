# foodiebot/services/customers.py
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from foodiebot.core.exceptions import CustomerNotFound, DuplicateCustomer
from foodiebot.models.sql_models import Customer, PLACEHOLDER_NAME, utcnow
from foodiebot.services.geo_pricing import GeoPoint

logger = logging.getLogger(__name__)


def customer_location(customer: Customer) -> Optional[GeoPoint]:
    if customer.latitude is None or customer.longitude is None:
        return None
    return GeoPoint(customer.latitude, customer.longitude)


class CustomerDirectory:
    """Customer profiles keyed by phone number. Every write refreshes last_seen."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, phone: str) -> Optional[Customer]:
        return self.db.query(Customer).filter(Customer.phone_number == str(phone)).first()

    def find_or_create(self, phone: str) -> Customer:
        customer = self.get(phone)
        if customer:
            return customer
        customer = Customer(phone_number=str(phone), name=PLACEHOLDER_NAME, last_seen=utcnow())
        self.db.add(customer)
        self.db.commit()
        self.db.refresh(customer)
        logger.info("New customer %s", phone)
        return customer

    def update_profile(
        self,
        phone: str,
        name: Optional[str] = None,
        address: Optional[str] = None,
        location: Optional[GeoPoint] = None,
        profile_complete: Optional[bool] = None,
    ) -> Customer:
        customer = self.get(phone)
        if customer is None:
            raise CustomerNotFound(phone)
        if name is not None:
            customer.name = name
        if address is not None:
            customer.delivery_address = address
        if location is not None:
            customer.latitude, customer.longitude = location.latitude, location.longitude
        if profile_complete is not None:
            customer.is_profile_complete = profile_complete
        customer.last_seen = utcnow()
        self.db.commit()
        self.db.refresh(customer)
        return customer

    def touch(self, phone: str) -> Customer:
        return self.update_profile(phone)

    def list_recent(self) -> List[Customer]:
        return self.db.query(Customer).order_by(Customer.last_seen.desc()).all()

    def create(
        self,
        phone: str,
        name: str,
        address: Optional[str] = None,
        location: Optional[GeoPoint] = None,
    ) -> Customer:
        if self.get(phone):
            raise DuplicateCustomer(phone)
        customer = Customer(
            phone_number=str(phone),
            name=name,
            delivery_address=address,
            is_profile_complete=bool(name and address),
            last_seen=utcnow(),
        )
        if location is not None:
            customer.latitude, customer.longitude = location.latitude, location.longitude
        self.db.add(customer)
        self.db.commit()
        self.db.refresh(customer)
        return customer

    def delete(self, phone: str) -> None:
        customer = self.get(phone)
        if customer is None:
            raise CustomerNotFound(phone)
        self.db.delete(customer)
        self.db.commit()
