# foodiebot/api/endpoints/admin.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from foodiebot.core.database import get_db
from foodiebot.core.exceptions import FoodieBotError
from foodiebot.core.runtime import BotRuntime, get_runtime
from foodiebot.models.schemas import (
    CustomerIn,
    CustomerOut,
    DeliveryRateIn,
    Location,
    MenuItemIn,
    MenuItemOut,
    MessageOut,
    OrderOut,
    OrderRequest,
    OrderStatusUpdate,
    ShopSettingsIn,
    ShopSettingsOut,
)
from foodiebot.models.sql_models import Message
from foodiebot.services import order_service
from foodiebot.services.customers import CustomerDirectory
from foodiebot.services.geo_pricing import GeoPoint, RateTier
from foodiebot.services.menu import MenuCatalog
from foodiebot.services.orders import OrderStore
from foodiebot.services.shop import ShopSettingsService

router = APIRouter()


# --- Orders ---
@router.get("/orders", response_model=List[OrderOut])
async def list_orders(db: Session = Depends(get_db)):
    return OrderStore(db).list_all()


@router.get("/orders/{order_id}", response_model=OrderOut)
async def get_order(order_id: str, db: Session = Depends(get_db)):
    try:
        return OrderStore(db).get(order_id)
    except FoodieBotError as e:
        raise e.to_http()


@router.put("/orders/{order_id}", response_model=OrderOut)
async def update_order(
    order_id: str,
    update: OrderStatusUpdate,
    db: Session = Depends(get_db),
    runtime: BotRuntime = Depends(get_runtime),
):
    try:
        return await order_service.update_order_status(db, runtime, order_id, update.status, update.payment_status)
    except FoodieBotError as e:
        raise e.to_http()


@router.delete("/orders/{order_id}", status_code=204)
async def delete_order(order_id: str, db: Session = Depends(get_db)):
    try:
        OrderStore(db).delete(order_id)
    except FoodieBotError as e:
        raise e.to_http()
    return Response(status_code=204)


@router.post("/orders", response_model=OrderOut, status_code=201)
async def create_manual_order(
    request: OrderRequest,
    db: Session = Depends(get_db),
    runtime: BotRuntime = Depends(get_runtime),
):
    try:
        return await order_service.place_manual_order(db, runtime, request)
    except FoodieBotError as e:
        raise e.to_http()


# --- Menu ---
@router.get("/menu", response_model=List[MenuItemOut])
async def list_menu(db: Session = Depends(get_db)):
    return MenuCatalog(db).list_all()


@router.post("/menu", response_model=MenuItemOut, status_code=201)
async def create_menu_item(item: MenuItemIn, db: Session = Depends(get_db)):
    return MenuCatalog(db).create(**item.model_dump())


@router.put("/menu/{item_id}", response_model=MenuItemOut)
async def update_menu_item(item_id: int, item: MenuItemIn, db: Session = Depends(get_db)):
    try:
        return MenuCatalog(db).update(item_id, **item.model_dump())
    except FoodieBotError as e:
        raise e.to_http()


@router.delete("/menu/{item_id}", status_code=204)
async def delete_menu_item(item_id: int, db: Session = Depends(get_db)):
    try:
        MenuCatalog(db).delete(item_id)
    except FoodieBotError as e:
        raise e.to_http()
    return Response(status_code=204)


# --- Settings ---
def settings_out(service: ShopSettingsService) -> ShopSettingsOut:
    info = service.info()
    return ShopSettingsOut(
        shop_name=info.name,
        shop_location=Location(latitude=info.location.latitude, longitude=info.location.longitude) if info.location else None,
        upi_id=info.upi_id,
        contact_phone=info.contact_phone,
        delivery_rates=[DeliveryRateIn(max_km=t.max_km, fee=t.fee) for t in service.tiers()],
    )


@router.get("/settings", response_model=ShopSettingsOut)
async def get_settings(db: Session = Depends(get_db)):
    return settings_out(ShopSettingsService(db))


@router.put("/settings", response_model=ShopSettingsOut)
async def update_settings(update: ShopSettingsIn, db: Session = Depends(get_db)):
    service = ShopSettingsService(db)
    location = None
    if update.shop_location is not None:
        location = GeoPoint(update.shop_location.latitude, update.shop_location.longitude)
    tiers = None
    if update.delivery_rates is not None:
        tiers = [RateTier(rate.max_km, rate.fee) for rate in update.delivery_rates]
    service.update(
        shop_name=update.shop_name,
        location=location,
        upi_id=update.upi_id,
        contact_phone=update.contact_phone,
        tiers=tiers,
    )
    return settings_out(service)


# --- Customers ---
@router.get("/customers", response_model=List[CustomerOut])
async def list_customers(db: Session = Depends(get_db)):
    return CustomerDirectory(db).list_recent()


@router.post("/customers", response_model=CustomerOut, status_code=201)
async def create_customer(customer: CustomerIn, db: Session = Depends(get_db)):
    location = None
    if customer.location is not None:
        location = GeoPoint(customer.location.latitude, customer.location.longitude)
    try:
        return CustomerDirectory(db).create(customer.phone_number, customer.name, customer.delivery_address, location)
    except FoodieBotError as e:
        raise e.to_http()


@router.delete("/customers/{phone}", status_code=204)
async def delete_customer(phone: str, db: Session = Depends(get_db), runtime: BotRuntime = Depends(get_runtime)):
    try:
        CustomerDirectory(db).delete(phone)
    except FoodieBotError as e:
        raise e.to_http()
    runtime.sessions.delete(phone)
    return Response(status_code=204)


# --- Chat log ---
@router.get("/messages", response_model=List[MessageOut])
async def list_messages(contact_id: Optional[str] = None, limit: int = 50, db: Session = Depends(get_db)):
    query = db.query(Message)
    if contact_id:
        query = query.filter(Message.contact_id == contact_id)
    msgs = query.order_by(Message.timestamp.desc(), Message.id.desc()).limit(limit).all()
    return list(reversed(msgs))


@router.delete("/messages")
async def clear_messages(db: Session = Depends(get_db)):
    db.query(Message).delete()
    db.commit()
    return {"status": "cleared"}


# --- Bot status ---
def bot_status(runtime: BotRuntime) -> dict:
    return {
        "whatsapp": runtime.gateway.status,
        "payment_proof_flow": runtime.flags.payment_proof_flow,
        "admin_approval_gate": runtime.flags.admin_approval_gate,
        "dashboards_connected": len(runtime.broadcaster.connections),
    }


@router.get("/bot-status")
async def get_bot_status(runtime: BotRuntime = Depends(get_runtime)):
    return bot_status(runtime)
