# foodiebot/models/sql_models.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, Boolean, BigInteger, DateTime, JSON, Text
from foodiebot.core.database import Base

PLACEHOLDER_NAME = "Customer"


def utcnow() -> datetime:
    # Naive UTC, matching the DateTime columns
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Customer(Base):
    __tablename__ = "customers"
    id = Column(Integer, primary_key=True, index=True)
    phone_number = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, default=PLACEHOLDER_NAME)
    delivery_address = Column(Text, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    is_profile_complete = Column(Boolean, default=False)
    created_at = Column(DateTime, default=utcnow)
    last_seen = Column(DateTime, default=utcnow, index=True)

    @property
    def has_name(self) -> bool:
        return bool(self.name) and self.name != PLACEHOLDER_NAME


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, index=True)  # Unique name prevents duplicates
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    image_url = Column(String, nullable=True)
    category = Column(String, default="Main Course")
    is_available = Column(Boolean, default=True)  # False = finished / out of stock
    is_trending = Column(Boolean, default=False)
    is_new = Column(Boolean, default=False)
    created_at = Column(DateTime, default=utcnow)


class DeliveryRate(Base):
    __tablename__ = "delivery_rates"
    id = Column(Integer, primary_key=True, index=True)
    max_km = Column(Float, nullable=False)
    fee = Column(Float, nullable=False)


class ShopSettings(Base):
    __tablename__ = "shop_settings"
    id = Column(Integer, primary_key=True, index=True)
    shop_name = Column(String)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    upi_id = Column(String, nullable=True)
    contact_phone = Column(String, nullable=True)


class Order(Base):
    __tablename__ = "orders"
    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(String, unique=True, index=True, nullable=False)
    customer_phone = Column(String, index=True, nullable=False)
    customer_name = Column(String)
    # [{"menu_item_id", "name", "quantity", "price"}], snapshotted at order time
    items = Column(JSON, nullable=False, default=list)
    subtotal = Column(Float, nullable=False)
    delivery_fee = Column(Float, default=0.0)
    total = Column(Float, nullable=False)
    delivery_address = Column(Text, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    distance_km = Column(Float, nullable=True)
    status = Column(String, default="pending_confirmation", index=True)
    payment_method = Column(String, default="cod")
    payment_status = Column(String, default="pending")
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


class PaymentProof(Base):
    __tablename__ = "payment_proofs"
    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(String, index=True, nullable=False)
    customer_phone = Column(String, index=True)
    kind = Column(String)  # "screenshot" or "utr"
    reference = Column(String)
    created_at = Column(DateTime, default=utcnow)


class Message(Base):
    __tablename__ = "messages"
    id = Column(Integer, primary_key=True, index=True)
    platform = Column(String)
    contact_id = Column(String, index=True)
    direction = Column(String)
    body = Column(Text)
    timestamp = Column(BigInteger)


class ConversationRecord(Base):
    __tablename__ = "conversation_sessions"
    id = Column(Integer, primary_key=True, index=True)
    phone_number = Column(String, unique=True, index=True, nullable=False)
    state = Column(String, default="default")
    payload = Column(JSON, default=dict)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
