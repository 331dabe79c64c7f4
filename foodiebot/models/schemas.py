# foodiebot/models/schemas.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from foodiebot.services.orders import OrderStatus, PaymentMethod, PaymentStatus


# --- WhatsApp Cloud API webhook ---
class TextObject(BaseModel):
    body: str


class MediaObject(BaseModel):
    id: str
    mime_type: Optional[str] = None
    caption: Optional[str] = None


class LocationObject(BaseModel):
    latitude: float
    longitude: float
    name: Optional[str] = None
    address: Optional[str] = None


class MessageObject(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(..., alias="from")
    id: str
    timestamp: str
    type: str = "text"
    text: Optional[TextObject] = None
    image: Optional[MediaObject] = None
    document: Optional[MediaObject] = None
    location: Optional[LocationObject] = None


class ContactProfile(BaseModel):
    name: str


class ContactObject(BaseModel):
    profile: ContactProfile
    wa_id: str


class ValueObject(BaseModel):
    messaging_product: str
    metadata: dict
    contacts: List[ContactObject] = []
    messages: List[MessageObject] = []
    # Delivery/read receipts arrive here and are ignored
    statuses: List[dict] = []


class ChangeObject(BaseModel):
    value: ValueObject
    field: str = "messages"


class EntryObject(BaseModel):
    id: str
    changes: List[ChangeObject]


class WhatsAppWebhookSchema(BaseModel):
    object: str = "whatsapp_business_account"
    entry: List[EntryObject]

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "object": "whatsapp_business_account",
                "entry": [{
                    "id": "123456789",
                    "changes": [{
                        "value": {
                            "messaging_product": "whatsapp",
                            "metadata": {"display_phone_number": "1234", "phone_number_id": "1234"},
                            "contacts": [{"profile": {"name": "Test User"}, "wa_id": "919812345678"}],
                            "messages": [{
                                "from": "919812345678",
                                "id": "wamid.HBg...",
                                "timestamp": "17000000",
                                "text": {"body": "Burger x2, Pizza x1"},
                                "type": "text"
                            }]
                        },
                        "field": "messages"
                    }]
                }]
            }
        },
    )


# --- Shared ---
class Location(BaseModel):
    latitude: float
    longitude: float


# --- Orders ---
class OrderLineOut(BaseModel):
    menu_item_id: int
    name: str
    quantity: int
    price: float


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    order_id: str
    customer_phone: str
    customer_name: Optional[str] = None
    items: List[OrderLineOut]
    subtotal: float
    delivery_fee: float
    total: float
    delivery_address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    distance_km: Optional[float] = None
    status: str
    payment_method: str
    payment_status: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class OrderStatusUpdate(BaseModel):
    status: str
    payment_status: Optional[str] = Field(default=None, alias="paymentStatus")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("status")
    @classmethod
    def known_status(cls, value: str) -> str:
        if value not in OrderStatus.ALL:
            raise ValueError(f"status must be one of {sorted(OrderStatus.ALL)}")
        return value

    @field_validator("payment_status")
    @classmethod
    def known_payment_status(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in PaymentStatus.ALL:
            raise ValueError(f"payment_status must be one of {sorted(PaymentStatus.ALL)}")
        return value


class OrderItemRequest(BaseModel):
    menu_item_id: int
    quantity: int = Field(..., ge=1)


class OrderRequest(BaseModel):
    customer_phone: str = Field(..., min_length=3)
    customer_name: str = Field(..., min_length=1)
    items: List[OrderItemRequest] = Field(..., min_length=1)
    delivery_address: Optional[str] = None
    customer_location: Optional[Location] = None
    payment_method: str = PaymentMethod.COD

    @field_validator("payment_method")
    @classmethod
    def known_payment_method(cls, value: str) -> str:
        value = value.lower()
        if value not in PaymentMethod.ALL:
            raise ValueError(f"payment_method must be one of {sorted(PaymentMethod.ALL)}")
        return value


class WebOrderRequest(OrderRequest):
    delivery_address: str = Field(..., min_length=1)


# --- Menu ---
class MenuItemIn(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    image_url: Optional[str] = None
    category: str = "Main Course"
    is_available: bool = True
    is_trending: bool = False
    is_new: bool = False


class MenuItemOut(MenuItemIn):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: Optional[datetime] = None


# --- Customers ---
class CustomerIn(BaseModel):
    phone_number: str = Field(..., min_length=3)
    name: str = Field(..., min_length=1)
    delivery_address: Optional[str] = None
    location: Optional[Location] = None


class CustomerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    phone_number: str
    name: Optional[str] = None
    delivery_address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    is_profile_complete: bool = False
    last_seen: Optional[datetime] = None


# --- Settings ---
class DeliveryRateIn(BaseModel):
    max_km: float = Field(..., ge=0)
    fee: float = Field(..., ge=0)


class ShopSettingsIn(BaseModel):
    shop_name: Optional[str] = None
    shop_location: Optional[Location] = None
    upi_id: Optional[str] = None
    contact_phone: Optional[str] = None
    delivery_rates: Optional[List[DeliveryRateIn]] = None


class ShopSettingsOut(BaseModel):
    shop_name: str
    shop_location: Optional[Location] = None
    upi_id: Optional[str] = None
    contact_phone: Optional[str] = None
    delivery_rates: List[DeliveryRateIn] = []


class DeliveryQuoteRequest(BaseModel):
    customer_location: Location


class DeliveryQuoteOut(BaseModel):
    distance_km: float
    delivery_fee: float


class MessageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    platform: str
    contact_id: str
    direction: str
    body: Optional[str] = None
    timestamp: int


def order_payload(order) -> dict:
    """JSON-ready order dict for dashboard broadcasts."""
    return OrderOut.model_validate(order).model_dump(mode="json")
