# foodiebot/services/orders.py
import logging
import random
import string
import time
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from foodiebot.core.exceptions import (
    InvalidOrderStatus,
    OrderNotAwaitingConfirmation,
    OrderNotFound,
)
from foodiebot.models.sql_models import Order, PaymentProof, utcnow
from foodiebot.services.geo_pricing import GeoPoint
from foodiebot.services.order_parser import OrderLine

logger = logging.getLogger(__name__)


class OrderStatus:
    PENDING_CONFIRMATION = "pending_confirmation"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    # Forward lifecycle; cancellation is the only way out of it
    LIFECYCLE = [
        PENDING_CONFIRMATION,
        PENDING,
        CONFIRMED,
        PREPARING,
        READY,
        OUT_FOR_DELIVERY,
        DELIVERED,
        COMPLETED,
    ]
    TERMINAL = {DELIVERED, COMPLETED, CANCELLED}
    ALL = set(LIFECYCLE) | {CANCELLED}

    # Statuses the customer hears about when the admin sets them
    NOTIFIABLE = {CONFIRMED, PREPARING, READY, OUT_FOR_DELIVERY, DELIVERED, CANCELLED}

    LABELS = {
        PENDING_CONFIRMATION: "Pending Confirmation",
        PENDING: "Pending",
        CONFIRMED: "Confirmed",
        PREPARING: "Preparing",
        READY: "Ready",
        OUT_FOR_DELIVERY: "Out for Delivery",
        DELIVERED: "Delivered",
        COMPLETED: "Completed",
        CANCELLED: "Cancelled",
    }

    @classmethod
    def label(cls, status: str) -> str:
        return cls.LABELS.get(status, status.replace("_", " ").title())


class PaymentMethod:
    COD = "cod"
    UPI = "upi"
    ALL = {COD, UPI}


class PaymentStatus:
    PENDING = "pending"
    AWAITING_PROOF = "awaiting_proof"
    VERIFICATION_PENDING = "verification_pending"
    VERIFIED = "verified"
    REJECTED = "rejected"
    ALL = {PENDING, AWAITING_PROOF, VERIFICATION_PENDING, VERIFIED, REJECTED}


def generate_order_id() -> str:
    timestamp = str(int(time.time() * 1000))
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=5))
    return f"ORD{timestamp[-6:]}{suffix}"


def coordinates_address(location: GeoPoint) -> str:
    return f"Delivery near Lat: {location.latitude:.4f}, Lon: {location.longitude:.4f}"


def order_location(order: Order) -> Optional[GeoPoint]:
    if order.latitude is None or order.longitude is None:
        return None
    return GeoPoint(order.latitude, order.longitude)


class OrderStore:
    def __init__(self, db: Session):
        self.db = db

    def find(self, order_id: str) -> Optional[Order]:
        return self.db.query(Order).filter(Order.order_id == order_id).first()

    def get(self, order_id: str) -> Order:
        order = self.find(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order

    def create_pending(
        self,
        customer_phone: str,
        customer_name: str,
        lines: Sequence[OrderLine],
        subtotal: float,
        delivery_fee: float,
        total: Optional[float] = None,
        delivery_address: Optional[str] = None,
        location: Optional[GeoPoint] = None,
        distance_km: Optional[float] = None,
    ) -> Order:
        expected_total = subtotal + delivery_fee
        if total is None:
            total = expected_total
        elif abs(total - expected_total) > 1e-6:
            raise ValueError(f"total {total} != subtotal {subtotal} + fee {delivery_fee}")

        order = Order(
            order_id=generate_order_id(),
            customer_phone=str(customer_phone),
            customer_name=customer_name,
            items=[line.as_dict() for line in lines],
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            total=total,
            delivery_address=delivery_address,
            distance_km=distance_km,
            status=OrderStatus.PENDING_CONFIRMATION,
            payment_method=PaymentMethod.COD,
            payment_status=PaymentStatus.PENDING,
        )
        if location is not None:
            order.latitude, order.longitude = location.latitude, location.longitude
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        logger.info("Order %s created for %s (total %.2f)", order.order_id, customer_phone, total)
        return order

    def confirm(
        self,
        order_id: str,
        payment_method: str = PaymentMethod.COD,
        payment_status: str = PaymentStatus.PENDING,
        status: str = OrderStatus.PENDING,
        fallback_location: Optional[GeoPoint] = None,
    ) -> Order:
        order = self.get(order_id)
        if order.status != OrderStatus.PENDING_CONFIRMATION:
            raise OrderNotAwaitingConfirmation(order_id, order.status)

        order.status = status
        order.payment_method = payment_method
        order.payment_status = payment_status
        if not order.delivery_address:
            location = order_location(order) or fallback_location
            if location is not None:
                order.delivery_address = coordinates_address(location)
        order.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(order)
        logger.info("Order %s confirmed -> %s (%s)", order_id, status, payment_method)
        return order

    def set_status(self, order_id: str, status: str, payment_status: Optional[str] = None) -> Order:
        # Admin overwrite: any known status may follow any other
        if status not in OrderStatus.ALL:
            raise InvalidOrderStatus(status)
        order = self.get(order_id)
        order.status = status
        if payment_status is not None:
            order.payment_status = payment_status
        order.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(order)
        logger.info("Order %s status -> %s", order_id, status)
        return order

    def is_open(self, order_id: str) -> bool:
        order = self.find(order_id)
        return order is not None and order.status != OrderStatus.CANCELLED

    def cancel(self, order_id: str) -> Order:
        order = self.get(order_id)
        if order.status in OrderStatus.TERMINAL:
            return order
        return self.set_status(order_id, OrderStatus.CANCELLED)

    def list_recent(self, customer_phone: str, limit: int = 5) -> List[Order]:
        return (
            self.db.query(Order)
            .filter(Order.customer_phone == str(customer_phone))
            .order_by(Order.created_at.desc(), Order.id.desc())
            .limit(limit)
            .all()
        )

    def list_all(self) -> List[Order]:
        return self.db.query(Order).order_by(Order.created_at.desc(), Order.id.desc()).all()

    def latest_pending_confirmation(self, customer_phone: str) -> Optional[Order]:
        return (
            self.db.query(Order)
            .filter(
                Order.customer_phone == str(customer_phone),
                Order.status == OrderStatus.PENDING_CONFIRMATION,
            )
            .order_by(Order.created_at.desc(), Order.id.desc())
            .first()
        )

    def record_payment_proof(self, order_id: str, customer_phone: str, kind: str, reference: str) -> PaymentProof:
        order = self.get(order_id)
        proof = PaymentProof(order_id=order_id, customer_phone=str(customer_phone), kind=kind, reference=reference)
        self.db.add(proof)
        order.payment_status = PaymentStatus.VERIFICATION_PENDING
        order.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(proof)
        logger.info("Payment proof (%s) recorded for order %s", kind, order_id)
        return proof

    def delete(self, order_id: str) -> None:
        order = self.get(order_id)
        self.db.delete(order)
        self.db.commit()
