# foodiebot/services/conversation.py
"""
Conversation state machine.

transition(session, event, context) is pure: it reads the session, the
inbound message and a snapshot of what the database knew when the message
arrived, and returns the next session plus a list of effects. The chat
manager executes the effects (database writes, replies, dashboard
broadcasts) and only then stores the new session.
"""
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from foodiebot.services import replies
from foodiebot.services.geo_pricing import GeoPoint, PricingConfig
from foodiebot.services.menu import MenuSnapshot
from foodiebot.services.order_parser import OrderLine, looks_like_order, parse_order_text, resolve_candidates
from foodiebot.services.orders import OrderStatus, PaymentMethod, PaymentStatus
from foodiebot.services.session_store import ConversationState, SessionData
from foodiebot.services.shop import ShopInfo

# Commands that work before the profile is complete
PROFILE_EXEMPT_COMMANDS = {"hi", "hello", "start", "help", "profile", "order"}

UTR_PATTERN = re.compile(r"^\d{12}$")


# --- Inputs ---
@dataclass(frozen=True)
class InboundMessage:
    sender: str
    body: str = ""
    has_media: bool = False
    media_type: Optional[str] = None
    media_id: Optional[str] = None
    location: Optional[GeoPoint] = None
    sender_name: Optional[str] = None
    platform: str = "whatsapp"

    @property
    def text(self) -> str:
        return (self.body or "").strip()

    @property
    def command(self) -> str:
        return " ".join(self.text.lower().split())

    @property
    def is_image(self) -> bool:
        return self.has_media and self.media_type == "image"


@dataclass(frozen=True)
class CustomerProfile:
    phone: str
    name: Optional[str] = None
    address: Optional[str] = None
    location: Optional[GeoPoint] = None
    profile_complete: bool = False

    @property
    def needs_profile(self) -> bool:
        return not (self.profile_complete or (self.name and self.address))


@dataclass(frozen=True)
class PendingOrderView:
    order_id: str
    total: float


@dataclass(frozen=True)
class BotFlags:
    payment_proof_flow: bool = True
    admin_approval_gate: bool = True

    @property
    def confirmed_status(self) -> str:
        return OrderStatus.PENDING if self.admin_approval_gate else OrderStatus.CONFIRMED


@dataclass(frozen=True)
class TurnContext:
    customer: CustomerProfile
    menu: MenuSnapshot
    pricing: PricingConfig
    shop: ShopInfo
    pending_order: Optional[PendingOrderView] = None
    flags: BotFlags = field(default_factory=BotFlags)
    recent_orders_limit: int = 5
    # False once the order awaiting payment proof was deleted or cancelled
    proof_order_open: bool = True


# --- Effects ---
@dataclass(frozen=True)
class Reply:
    text: str


@dataclass(frozen=True)
class UpdateProfile:
    name: Optional[str] = None
    address: Optional[str] = None
    location: Optional[GeoPoint] = None
    profile_complete: Optional[bool] = None


@dataclass(frozen=True)
class CreatePendingOrder:
    lines: List[OrderLine]
    subtotal: float
    delivery_fee: float
    total: float
    delivery_address: Optional[str] = None
    location: Optional[GeoPoint] = None
    distance_km: Optional[float] = None


@dataclass(frozen=True)
class ConfirmOrder:
    order_id: str
    payment_method: str = PaymentMethod.COD
    payment_status: str = PaymentStatus.PENDING
    status: str = OrderStatus.PENDING


@dataclass(frozen=True)
class CancelOrder:
    order_id: str


@dataclass(frozen=True)
class RecordPaymentProof:
    order_id: str
    kind: str
    reference: str


@dataclass(frozen=True)
class SendRecentOrders:
    limit: int = 5


@dataclass(frozen=True)
class Transition:
    session: SessionData
    effects: List[object] = field(default_factory=list)


def _stay(session: SessionData, text: str) -> Transition:
    return Transition(session, [Reply(text)])


# --- Profile collection ---
def _collect_name(session, event, ctx):
    if not event.text:
        return _stay(session, replies.blank_input_text("name"))
    return Transition(
        session.evolve(state=ConversationState.COLLECTING_ADDRESS),
        [UpdateProfile(name=event.text), Reply(replies.ask_address_text())],
    )


def _collect_address(session, event, ctx):
    if not event.text:
        if event.location:
            return Transition(
                session,
                [UpdateProfile(location=event.location), Reply(replies.blank_input_text("address"))],
            )
        return _stay(session, replies.blank_input_text("address"))
    return Transition(
        session.evolve(state=ConversationState.DEFAULT),
        [UpdateProfile(address=event.text, profile_complete=True), Reply(replies.profile_complete_text())],
    )


def _edit_name(session, event, ctx):
    if not event.text:
        return _stay(session, replies.ask_new_name_text())
    return Transition(
        session.evolve(state=ConversationState.DEFAULT),
        [UpdateProfile(name=event.text), Reply(replies.name_updated_text())],
    )


def _edit_address(session, event, ctx):
    if not event.text:
        return _stay(session, replies.ask_new_address_text())
    return Transition(
        session.evolve(state=ConversationState.DEFAULT),
        [UpdateProfile(address=event.text), Reply(replies.address_updated_text())],
    )


def _start_profile(session, event, ctx):
    if not ctx.customer.name:
        return Transition(
            session.evolve(state=ConversationState.COLLECTING_NAME),
            [Reply(replies.ask_name_text(event.sender_name))],
        )
    return Transition(
        session.evolve(state=ConversationState.COLLECTING_ADDRESS),
        [Reply(replies.ask_address_text())],
    )


# --- Payment proof ---
def _payment_proof(session, event, ctx):
    order_id = session.pending_order_id
    if order_id is None:
        # Lost track of the order; fall back to normal handling
        return _default(session.evolve(state=ConversationState.DEFAULT), event, ctx)
    if not ctx.proof_order_open:
        return Transition(
            session.evolve(state=ConversationState.DEFAULT, pending_order_id=None),
            [Reply(replies.proof_order_closed_text(order_id))],
        )

    if event.is_image:
        proof = RecordPaymentProof(order_id, "screenshot", event.media_id or "image")
    elif UTR_PATTERN.match(event.text):
        proof = RecordPaymentProof(order_id, "utr", event.text)
    else:
        return _stay(session, replies.payment_proof_reprompt_text(order_id, ctx.shop.upi_id))

    return Transition(
        session.evolve(state=ConversationState.DEFAULT, pending_order_id=None),
        [proof, Reply(replies.payment_proof_received_text(order_id))],
    )


# --- Default-state commands ---
def _welcome(session, event, ctx):
    return _stay(session, replies.welcome_text(ctx.shop.name, event.sender_name))


def _order_menu(session, event, ctx):
    return _stay(session, replies.menu_text(ctx.shop.name, ctx.menu.items, ctx.shop.currency, for_ordering=True))


def _view_menu(session, event, ctx):
    return _stay(session, replies.menu_text(ctx.shop.name, ctx.menu.items, ctx.shop.currency))


def _my_orders(session, event, ctx):
    return Transition(session, [SendRecentOrders(ctx.recent_orders_limit)])


def _shop_location(session, event, ctx):
    return _stay(session, replies.shop_location_text(ctx.shop.location))


def _contact(session, event, ctx):
    return _stay(session, replies.contact_text(ctx.shop.contact_phone))


def _profile(session, event, ctx):
    c = ctx.customer
    return _stay(session, replies.profile_text(c.phone, c.name, c.address))


def _start_edit_name(session, event, ctx):
    return Transition(session.evolve(state=ConversationState.EDITING_NAME), [Reply(replies.ask_new_name_text())])


def _start_edit_address(session, event, ctx):
    return Transition(
        session.evolve(state=ConversationState.EDITING_ADDRESS), [Reply(replies.ask_new_address_text())]
    )


def _payments_info(session, event, ctx):
    return _stay(session, replies.payments_info_text(ctx.shop.upi_id, ctx.shop.contact_phone))


def _cancel(session, event, ctx):
    pending = ctx.pending_order
    if pending is None:
        return _stay(session, replies.cancel_help_text())
    return Transition(
        session.evolve(cart=[], pending_order_id=None),
        [CancelOrder(pending.order_id), Reply(replies.order_cancelled_text(pending.order_id))],
    )


def _place(ctx, pending, payment_method, payment_status=PaymentStatus.PENDING) -> ConfirmOrder:
    return ConfirmOrder(pending.order_id, payment_method, payment_status, ctx.flags.confirmed_status)


def _confirm(session, event, ctx):
    pending = ctx.pending_order
    if pending is None:
        return _stay(session, replies.no_pending_order_text())
    if ctx.flags.payment_proof_flow:
        return Transition(
            session.evolve(pending_order_id=pending.order_id),
            [Reply(replies.payment_choice_text(pending.order_id, pending.total, ctx.shop.currency))],
        )
    return _pay_cod(session, event, ctx)


def _pay_cod(session, event, ctx):
    pending = ctx.pending_order
    if pending is None:
        return _stay(session, replies.no_pending_order_text())
    confirm = _place(ctx, pending, PaymentMethod.COD)
    return Transition(
        session.evolve(cart=[], pending_order_id=None),
        [confirm, Reply(replies.order_placed_text(pending.order_id, confirm.status))],
    )


def _pay_upi(session, event, ctx):
    pending = ctx.pending_order
    if pending is None:
        return _stay(session, replies.no_pending_order_text())
    effects = [
        _place(ctx, pending, PaymentMethod.UPI, PaymentStatus.AWAITING_PROOF),
        Reply(replies.upi_instructions_text(pending.order_id, pending.total, ctx.shop.currency, ctx.shop.upi_id)),
    ]
    return Transition(
        session.evolve(
            state=ConversationState.AWAITING_PAYMENT_PROOF,
            pending_order_id=pending.order_id,
            cart=[],
        ),
        effects,
    )


def _location_shared(session, event, ctx):
    return Transition(
        session,
        [UpdateProfile(location=event.location), Reply(replies.location_saved_text(ctx.pending_order is not None))],
    )


def _take_order(session, event, ctx):
    result = resolve_candidates(parse_order_text(event.text), ctx.menu)
    if not result.resolved:
        if result.unresolved:
            return _stay(session, replies.items_not_found_text(result.unresolved))
        return _stay(session, replies.order_not_understood_text())

    effects = []
    location = ctx.customer.location
    learned_location = False
    if location is None and event.location is not None:
        location = event.location
        learned_location = True
        effects.append(UpdateProfile(location=location))

    quote = ctx.pricing.quote(location)
    subtotal = result.subtotal
    effects.append(
        CreatePendingOrder(
            lines=list(result.resolved),
            subtotal=subtotal,
            delivery_fee=quote.fee,
            total=subtotal + quote.fee,
            delivery_address=ctx.customer.address,
            location=location,
            distance_km=quote.distance_km,
        )
    )
    effects.append(
        Reply(
            replies.order_summary_text(
                result,
                quote,
                ctx.shop.currency,
                location_from_message=learned_location,
                location_missing=location is None,
            )
        )
    )
    cart = [line.as_dict() for line in result.resolved]
    return Transition(session.evolve(cart=cart, pending_order_id=None), effects)


Handler = Callable[[SessionData, InboundMessage, TurnContext], Transition]

COMMANDS: Dict[str, Handler] = {
    "hi": _welcome,
    "hello": _welcome,
    "start": _welcome,
    "help": _welcome,
    "order": _order_menu,
    "1": _order_menu,
    "order food": _order_menu,
    "menu": _view_menu,
    "2": _view_menu,
    "view menu": _view_menu,
    "my orders": _my_orders,
    "orders": _my_orders,
    "3": _my_orders,
    "shop location": _shop_location,
    "4": _shop_location,
    "contact us": _contact,
    "5": _contact,
    "profile": _profile,
    "edit name": _start_edit_name,
    "edit address": _start_edit_address,
    "payments": _payments_info,
    "cancel order": _cancel,
    "cancel": _cancel,
    "confirm order": _confirm,
    "confirm": _confirm,
}

PAYMENT_COMMANDS: Dict[str, Handler] = {
    "cod": _pay_cod,
    "upi": _pay_upi,
}


def _default(session, event, ctx):
    if event.location is not None and not event.text:
        return _location_shared(session, event, ctx)

    command = event.command
    if ctx.customer.needs_profile and command not in PROFILE_EXEMPT_COMMANDS:
        return _start_profile(session, event, ctx)

    handler = COMMANDS.get(command)
    if handler is None and ctx.flags.payment_proof_flow:
        handler = PAYMENT_COMMANDS.get(command)
    if handler is not None:
        return handler(session, event, ctx)

    if looks_like_order(event.text):
        return _take_order(session, event, ctx)
    return _stay(session, replies.fallback_text())


STATE_HANDLERS: Dict[ConversationState, Handler] = {
    ConversationState.DEFAULT: _default,
    ConversationState.COLLECTING_NAME: _collect_name,
    ConversationState.COLLECTING_ADDRESS: _collect_address,
    ConversationState.EDITING_NAME: _edit_name,
    ConversationState.EDITING_ADDRESS: _edit_address,
    ConversationState.AWAITING_PAYMENT_PROOF: _payment_proof,
}


def transition(session: SessionData, event: InboundMessage, ctx: TurnContext) -> Transition:
    return STATE_HANDLERS[session.state](session, event, ctx)
