# foodiebot/services/order_service.py
"""Order operations that start outside the chat: admin status changes, manual and web orders."""
import logging
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from foodiebot.core.exceptions import MenuItemNotFound, MenuItemUnavailable
from foodiebot.core.runtime import BotRuntime
from foodiebot.models.schemas import OrderItemRequest, OrderRequest, WebOrderRequest, order_payload
from foodiebot.models.sql_models import Order
from foodiebot.services import replies
from foodiebot.services.customers import CustomerDirectory, customer_location
from foodiebot.services.geo_pricing import DeliveryQuote, GeoPoint
from foodiebot.services.menu import MenuCatalog
from foodiebot.services.order_parser import OrderLine
from foodiebot.services.orders import OrderStatus, OrderStore, coordinates_address
from foodiebot.services.shop import ShopSettingsService

logger = logging.getLogger(__name__)


def notify_customer(db: Session, runtime: BotRuntime, phone: str, text: str) -> bool:
    # A failed notification never undoes the change that triggered it
    try:
        return runtime.gateway.send(phone, text, db)
    except Exception:
        logger.exception("Could not notify %s", phone)
        db.rollback()
        return False


async def update_order_status(
    db: Session,
    runtime: BotRuntime,
    order_id: str,
    status: str,
    payment_status: Optional[str] = None,
) -> Order:
    store = OrderStore(db)
    order = store.set_status(order_id, status, payment_status)

    if status == OrderStatus.CONFIRMED:
        runtime.sessions.clear_cart(order.customer_phone)

    text = replies.status_update_text(order.order_id, status, ShopSettingsService(db).info().name)
    if text:
        notify_customer(db, runtime, order.customer_phone, text)

    await runtime.broadcaster.broadcast("order_updated", order_payload(order))
    return order


def price_items(db: Session, items: Sequence[OrderItemRequest]) -> Tuple[List[OrderLine], float]:
    catalog = MenuCatalog(db)
    lines = []
    for requested in items:
        try:
            item = catalog.get(requested.menu_item_id)
        except MenuItemNotFound:
            raise MenuItemUnavailable(requested.menu_item_id)
        if not item.is_available:
            raise MenuItemUnavailable(item.name)
        lines.append(OrderLine(item.id, item.name, requested.quantity, item.price))
    return lines, sum(line.line_total for line in lines)


def _quote(db: Session, location: Optional[GeoPoint]) -> DeliveryQuote:
    return ShopSettingsService(db).pricing().quote(location)


def _request_location(request: OrderRequest) -> Optional[GeoPoint]:
    if request.customer_location is None:
        return None
    return GeoPoint(request.customer_location.latitude, request.customer_location.longitude)


def _create(db: Session, request: OrderRequest, location: Optional[GeoPoint], address: Optional[str]) -> Order:
    lines, subtotal = price_items(db, request.items)
    quote = _quote(db, location)
    if not address and location is not None:
        address = coordinates_address(location)
    return OrderStore(db).create_pending(
        customer_phone=request.customer_phone,
        customer_name=request.customer_name,
        lines=lines,
        subtotal=subtotal,
        delivery_fee=quote.fee,
        delivery_address=address,
        location=location,
        distance_km=quote.distance_km,
    )


async def place_manual_order(db: Session, runtime: BotRuntime, request: OrderRequest) -> Order:
    """Admin-entered order; it skips the chat confirmation and starts out confirmed."""
    customer = CustomerDirectory(db).get(request.customer_phone)
    location = _request_location(request)
    address = request.delivery_address
    if customer is not None:
        location = location or customer_location(customer)
        address = address or customer.delivery_address

    order = _create(db, request, location, address)
    order = OrderStore(db).confirm(order.order_id, payment_method=request.payment_method, status=OrderStatus.CONFIRMED)
    logger.info("Manual order %s placed for %s", order.order_id, request.customer_phone)
    await runtime.broadcaster.broadcast("new_order", order_payload(order))
    return order


async def place_web_order(db: Session, runtime: BotRuntime, request: WebOrderRequest) -> Order:
    """Order from the public menu page; lands as pending and gets a WhatsApp receipt."""
    location = _request_location(request)
    directory = CustomerDirectory(db)
    directory.find_or_create(request.customer_phone)
    directory.update_profile(
        request.customer_phone,
        name=request.customer_name,
        address=request.delivery_address,
        location=location,
        profile_complete=True,
    )

    order = _create(db, request, location, request.delivery_address)
    order = OrderStore(db).confirm(order.order_id, payment_method=request.payment_method, status=OrderStatus.PENDING)
    await runtime.broadcaster.broadcast("new_order", order_payload(order))

    shop = ShopSettingsService(db).info()
    notify_customer(
        db,
        runtime,
        order.customer_phone,
        replies.web_order_receipt_text(order.order_id, order.total, order.status, shop.name, shop.currency),
    )
    return order
