# foodiebot/services/chat_manager.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from foodiebot.core.runtime import BotRuntime
from foodiebot.models.schemas import order_payload
from foodiebot.services import replies
from foodiebot.services.conversation import (
    CancelOrder,
    ConfirmOrder,
    CreatePendingOrder,
    CustomerProfile,
    InboundMessage,
    PendingOrderView,
    RecordPaymentProof,
    Reply,
    SendRecentOrders,
    Transition,
    TurnContext,
    UpdateProfile,
    transition,
)
from foodiebot.services.customers import CustomerDirectory, customer_location
from foodiebot.services.geo_pricing import PricingConfig
from foodiebot.services.menu import MenuCatalog
from foodiebot.services.orders import OrderStore
from foodiebot.services.session_store import SessionData
from foodiebot.services.shop import ShopSettingsService
from foodiebot.services.whatsapp import log_message

logger = logging.getLogger(__name__)


def describe_inbound(event: InboundMessage) -> str:
    if event.text:
        return event.text
    if event.location is not None:
        return f"[Location {event.location.latitude:.5f},{event.location.longitude:.5f}]"
    if event.has_media:
        return f"[{(event.media_type or 'media').title()} Received]"
    return ""


def build_context(db: Session, phone: str, runtime: BotRuntime, session: Optional[SessionData] = None) -> TurnContext:
    customer = CustomerDirectory(db).get(phone)
    profile = CustomerProfile(
        phone=phone,
        name=customer.name if customer.has_name else None,
        address=customer.delivery_address,
        location=customer_location(customer),
        profile_complete=bool(customer.is_profile_complete),
    )
    shop_service = ShopSettingsService(db)
    shop = shop_service.info()
    store = OrderStore(db)
    pending = store.latest_pending_confirmation(phone)
    proof_order_id = session.pending_order_id if session is not None else None
    return TurnContext(
        customer=profile,
        menu=MenuCatalog(db).snapshot(),
        pricing=PricingConfig(shop_location=shop.location, tiers=shop_service.tiers()),
        shop=shop,
        pending_order=PendingOrderView(pending.order_id, pending.total) if pending else None,
        flags=runtime.flags,
        recent_orders_limit=runtime.recent_orders_limit,
        proof_order_open=proof_order_id is None or store.is_open(proof_order_id),
    )


class EffectRunner:
    """Executes the effects of one transition, in order."""

    def __init__(self, db: Session, runtime: BotRuntime, event: InboundMessage, ctx: TurnContext):
        self.db = db
        self.runtime = runtime
        self.event = event
        self.ctx = ctx
        self.phone = event.sender
        self.orders = OrderStore(db)
        self.customers = CustomerDirectory(db)
        self.handlers = {
            Reply: self.reply,
            UpdateProfile: self.update_profile,
            CreatePendingOrder: self.create_pending_order,
            ConfirmOrder: self.confirm_order,
            CancelOrder: self.cancel_order,
            RecordPaymentProof: self.record_payment_proof,
            SendRecentOrders: self.send_recent_orders,
        }

    async def run(self, effects) -> None:
        for effect in effects:
            await self.handlers[type(effect)](effect)

    async def reply(self, effect: Reply):
        self.runtime.gateway.send(self.phone, effect.text, self.db)

    async def update_profile(self, effect: UpdateProfile):
        self.customers.update_profile(
            self.phone,
            name=effect.name,
            address=effect.address,
            location=effect.location,
            profile_complete=effect.profile_complete,
        )

    async def create_pending_order(self, effect: CreatePendingOrder):
        customer = self.customers.get(self.phone)
        order = self.orders.create_pending(
            customer_phone=self.phone,
            customer_name=customer.name,
            lines=effect.lines,
            subtotal=effect.subtotal,
            delivery_fee=effect.delivery_fee,
            total=effect.total,
            delivery_address=effect.delivery_address,
            location=effect.location,
            distance_km=effect.distance_km,
        )
        await self.runtime.broadcaster.broadcast("new_order", order_payload(order))

    async def confirm_order(self, effect: ConfirmOrder):
        order = self.orders.confirm(
            effect.order_id,
            payment_method=effect.payment_method,
            payment_status=effect.payment_status,
            status=effect.status,
            fallback_location=self.ctx.customer.location,
        )
        await self.runtime.broadcaster.broadcast("new_order", order_payload(order))

    async def cancel_order(self, effect: CancelOrder):
        order = self.orders.cancel(effect.order_id)
        await self.runtime.broadcaster.broadcast("order_updated", order_payload(order))

    async def record_payment_proof(self, effect: RecordPaymentProof):
        proof = self.orders.record_payment_proof(effect.order_id, self.phone, effect.kind, effect.reference)
        order = self.orders.get(effect.order_id)
        payload = order_payload(order)
        payload["payment_proof"] = {"kind": proof.kind, "reference": proof.reference}
        await self.runtime.broadcaster.broadcast("payment_proof", payload)

    async def send_recent_orders(self, effect: SendRecentOrders):
        orders = self.orders.list_recent(self.phone, effect.limit)
        self.runtime.gateway.send(self.phone, replies.recent_orders_text(orders, self.ctx.shop.currency), self.db)


async def handle_message(event: InboundMessage, db: Session, runtime: BotRuntime) -> Transition:
    directory = CustomerDirectory(db)
    directory.find_or_create(event.sender)
    directory.touch(event.sender)

    session = runtime.sessions.get(event.sender)
    ctx = build_context(db, event.sender, runtime, session)
    result = transition(session, event, ctx)
    logger.debug("%s: %s -> %s (%d effects)", event.sender, session.state.value, result.session.state.value, len(result.effects))

    await EffectRunner(db, runtime, event, ctx).run(result.effects)
    # Only a fully handled message moves the conversation forward
    runtime.sessions.set(event.sender, result.session)
    return result


async def process_message(event: InboundMessage, db: Session, runtime: BotRuntime) -> Optional[Transition]:
    """Entry point for one inbound message. Never raises for conversational failures."""
    logger.info("Message from %s: %s", event.sender, describe_inbound(event))
    try:
        log_message(db, event.sender, "inbound", describe_inbound(event), event.platform)
        return await handle_message(event, db, runtime)
    except Exception:
        logger.exception("Failed to handle message from %s", event.sender)
        db.rollback()
        runtime.gateway.send(event.sender, replies.error_text(), db)
        return None
