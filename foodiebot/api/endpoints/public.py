# foodiebot/api/endpoints/public.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from foodiebot.core.database import get_db
from foodiebot.core.exceptions import FoodieBotError
from foodiebot.core.runtime import BotRuntime, get_runtime
from foodiebot.models.schemas import (
    DeliveryQuoteOut,
    DeliveryQuoteRequest,
    Location,
    MenuItemOut,
    OrderOut,
    WebOrderRequest,
)
from foodiebot.models.sql_models import MenuItem
from foodiebot.services import order_service
from foodiebot.services.geo_pricing import GeoPoint
from foodiebot.services.orders import OrderStore
from foodiebot.services.shop import ShopSettingsService

router = APIRouter()


@router.get("/menu", response_model=List[MenuItemOut])
async def public_menu(db: Session = Depends(get_db)):
    return (
        db.query(MenuItem)
        .filter(MenuItem.is_available == True)  # noqa: E712
        .order_by(MenuItem.category, MenuItem.name)
        .all()
    )


@router.get("/public/settings")
async def public_settings(db: Session = Depends(get_db)):
    info = ShopSettingsService(db).info()
    return {
        "shop_name": info.name,
        "shop_location": Location(latitude=info.location.latitude, longitude=info.location.longitude) if info.location else None,
        "upi_id": info.upi_id,
        "contact_phone": info.contact_phone,
        "currency": info.currency,
    }


@router.post("/orders", response_model=OrderOut, status_code=201)
async def place_web_order(
    request: WebOrderRequest,
    db: Session = Depends(get_db),
    runtime: BotRuntime = Depends(get_runtime),
):
    try:
        return await order_service.place_web_order(db, runtime, request)
    except FoodieBotError as e:
        raise e.to_http()


@router.get("/order/{order_id}", response_model=OrderOut)
async def track_order(order_id: str, db: Session = Depends(get_db)):
    try:
        return OrderStore(db).get(order_id)
    except FoodieBotError as e:
        raise e.to_http()


@router.post("/calculate-delivery-cost", response_model=DeliveryQuoteOut)
async def calculate_delivery_cost(request: DeliveryQuoteRequest, db: Session = Depends(get_db)):
    pricing = ShopSettingsService(db).pricing()
    if not pricing.is_configured:
        raise HTTPException(status_code=400, detail="Shop location or delivery rates are not configured")
    quote = pricing.quote(GeoPoint(request.customer_location.latitude, request.customer_location.longitude))
    return DeliveryQuoteOut(distance_km=round(quote.distance_km, 2), delivery_fee=quote.fee)
