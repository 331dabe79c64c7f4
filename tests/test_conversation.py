from foodiebot.services import replies
from foodiebot.services.conversation import (
    BotFlags,
    CancelOrder,
    ConfirmOrder,
    CreatePendingOrder,
    CustomerProfile,
    InboundMessage,
    PendingOrderView,
    RecordPaymentProof,
    Reply,
    SendRecentOrders,
    TurnContext,
    UpdateProfile,
    transition,
)
from foodiebot.services.geo_pricing import GeoPoint, PricingConfig, RateTier
from foodiebot.services.menu import MenuItemView, MenuSnapshot
from foodiebot.services.orders import OrderStatus, PaymentMethod, PaymentStatus
from foodiebot.services.session_store import ConversationState, SessionData
from foodiebot.services.shop import ShopInfo

PHONE = "919800000001"
SHOP = ShopInfo(name="Test Kitchen", location=GeoPoint(12.9716, 77.5946), upi_id="test@upi", currency="₹")
MENU = MenuSnapshot([MenuItemView(1, "Burger", 100.0), MenuItemView(2, "Pizza", 200.0)])
PRICING = PricingConfig(shop_location=SHOP.location, tiers=[RateTier(5, 20), RateTier(10, 40)])

COMPLETE = CustomerProfile(PHONE, name="Asha", address="12 MG Road", profile_complete=True)
NEW = CustomerProfile(PHONE)


def ctx(customer=COMPLETE, pending=None, flags=BotFlags(), proof_order_open=True):
    return TurnContext(
        customer=customer,
        menu=MENU,
        pricing=PRICING,
        shop=SHOP,
        pending_order=pending,
        flags=flags,
        proof_order_open=proof_order_open,
    )


def msg(body="", **kwargs):
    return InboundMessage(sender=PHONE, body=body, **kwargs)


def reply_texts(result):
    return [e.text for e in result.effects if isinstance(e, Reply)]


def of_type(result, kind):
    return [e for e in result.effects if isinstance(e, kind)]


def test_new_customer_is_asked_for_name():
    result = transition(SessionData(), msg("Burger x1"), ctx(NEW))
    assert result.session.state == ConversationState.COLLECTING_NAME
    assert of_type(result, CreatePendingOrder) == []


def test_name_then_address_completes_profile():
    result = transition(SessionData(state=ConversationState.COLLECTING_NAME), msg("Asha"), ctx(NEW))
    assert result.session.state == ConversationState.COLLECTING_ADDRESS
    assert of_type(result, UpdateProfile) == [UpdateProfile(name="Asha")]

    result = transition(result.session, msg("12 MG Road"), ctx(CustomerProfile(PHONE, name="Asha")))
    assert result.session.state == ConversationState.DEFAULT
    assert of_type(result, UpdateProfile) == [UpdateProfile(address="12 MG Road", profile_complete=True)]


def test_blank_name_keeps_asking():
    session = SessionData(state=ConversationState.COLLECTING_NAME)
    result = transition(session, msg("   "), ctx(NEW))
    assert result.session == session
    assert of_type(result, UpdateProfile) == []


def test_location_while_collecting_address_is_saved_but_address_still_required():
    session = SessionData(state=ConversationState.COLLECTING_ADDRESS)
    here = GeoPoint(12.98, 77.6)
    result = transition(session, msg(location=here), ctx(CustomerProfile(PHONE, name="Asha")))
    assert result.session.state == ConversationState.COLLECTING_ADDRESS
    assert of_type(result, UpdateProfile) == [UpdateProfile(location=here)]


def test_greeting_is_allowed_before_profile():
    result = transition(SessionData(), msg("Hi"), ctx(NEW))
    assert result.session.state == ConversationState.DEFAULT
    assert "Test Kitchen" in reply_texts(result)[0]


def test_known_customer_with_name_skips_to_address():
    result = transition(SessionData(), msg("menu"), ctx(CustomerProfile(PHONE, name="Asha")))
    assert result.session.state == ConversationState.COLLECTING_ADDRESS


def test_order_creates_pending_order_and_summary():
    result = transition(SessionData(), msg("Burger x2, Pizza x1"), ctx())
    [create] = of_type(result, CreatePendingOrder)
    assert create.subtotal == 400
    assert create.delivery_fee == 0
    assert create.total == 400
    assert create.delivery_address == "12 MG Road"
    assert len(result.session.cart) == 2
    assert "Please share your current location" in reply_texts(result)[0]


def test_order_with_known_location_is_priced():
    customer = CustomerProfile(PHONE, "Asha", "12 MG Road", GeoPoint(12.9716 + 0.063, 77.5946), True)
    result = transition(SessionData(), msg("Pizza x1, Burger x1"), ctx(customer))
    [create] = of_type(result, CreatePendingOrder)
    assert create.delivery_fee == 40
    assert create.total == 340
    assert "₹340.00" in reply_texts(result)[0]


def test_location_sent_with_order_is_saved_and_priced():
    here = GeoPoint(12.9716 + 0.063, 77.5946)
    result = transition(SessionData(), msg("Burger x1", location=here), ctx())
    assert of_type(result, UpdateProfile) == [UpdateProfile(location=here)]
    [create] = of_type(result, CreatePendingOrder)
    assert create.location == here
    assert create.delivery_fee == 40
    assert "Received from your message" in reply_texts(result)[0]


def test_location_sent_with_order_does_not_replace_known_location():
    known = GeoPoint(12.98, 77.6)
    customer = CustomerProfile(PHONE, "Asha", "12 MG Road", known, True)
    result = transition(SessionData(), msg("Burger x1", location=GeoPoint(13.5, 78.0)), ctx(customer))
    assert of_type(result, UpdateProfile) == []
    [create] = of_type(result, CreatePendingOrder)
    assert create.location == known
    assert create.delivery_fee == 20


def test_unknown_items_create_nothing():
    result = transition(SessionData(), msg("Sandwitch x1"), ctx())
    assert of_type(result, CreatePendingOrder) == []
    assert reply_texts(result) == [replies.items_not_found_text(["Sandwitch"])]


def test_confirm_without_pending_order():
    result = transition(SessionData(), msg("Confirm Order"), ctx())
    assert of_type(result, ConfirmOrder) == []
    assert reply_texts(result) == [replies.no_pending_order_text()]


def test_confirm_offers_payment_choice():
    pending = PendingOrderView("ORD123456ABCDE", 340.0)
    result = transition(SessionData(), msg("confirm order"), ctx(pending=pending))
    assert of_type(result, ConfirmOrder) == []
    assert result.session.pending_order_id == "ORD123456ABCDE"
    assert "COD" in reply_texts(result)[0]


def test_cod_places_order_for_admin_approval():
    pending = PendingOrderView("ORD123456ABCDE", 340.0)
    session = SessionData(pending_order_id=pending.order_id, cart=[{"name": "Pizza"}])
    result = transition(session, msg("COD"), ctx(pending=pending))
    assert of_type(result, ConfirmOrder) == [
        ConfirmOrder(pending.order_id, PaymentMethod.COD, PaymentStatus.PENDING, OrderStatus.PENDING)
    ]
    assert result.session.cart == []
    assert result.session.pending_order_id is None


def test_confirm_without_approval_gate_goes_straight_to_confirmed():
    pending = PendingOrderView("ORD123456ABCDE", 340.0)
    flags = BotFlags(payment_proof_flow=False, admin_approval_gate=False)
    result = transition(SessionData(), msg("confirm"), ctx(pending=pending, flags=flags))
    [confirm] = of_type(result, ConfirmOrder)
    assert confirm.status == OrderStatus.CONFIRMED
    assert confirm.payment_method == PaymentMethod.COD


def test_payment_commands_ignored_without_proof_flow():
    pending = PendingOrderView("ORD123456ABCDE", 340.0)
    flags = BotFlags(payment_proof_flow=False)
    result = transition(SessionData(), msg("upi"), ctx(pending=pending, flags=flags))
    assert of_type(result, ConfirmOrder) == []
    assert reply_texts(result) == [replies.fallback_text()]


def test_upi_waits_for_proof():
    pending = PendingOrderView("ORD123456ABCDE", 340.0)
    result = transition(SessionData(pending_order_id=pending.order_id), msg("UPI"), ctx(pending=pending))
    [confirm] = of_type(result, ConfirmOrder)
    assert confirm.payment_method == PaymentMethod.UPI
    assert confirm.payment_status == PaymentStatus.AWAITING_PROOF
    assert result.session.state == ConversationState.AWAITING_PAYMENT_PROOF
    assert "test@upi" in reply_texts(result)[0]


def test_utr_is_accepted_as_proof():
    session = SessionData(state=ConversationState.AWAITING_PAYMENT_PROOF, pending_order_id="ORD1")
    result = transition(session, msg("123456789012"), ctx())
    assert of_type(result, RecordPaymentProof) == [RecordPaymentProof("ORD1", "utr", "123456789012")]
    assert result.session.state == ConversationState.DEFAULT


def test_screenshot_is_accepted_as_proof():
    session = SessionData(state=ConversationState.AWAITING_PAYMENT_PROOF, pending_order_id="ORD1")
    result = transition(session, msg(has_media=True, media_type="image", media_id="media-7"), ctx())
    assert of_type(result, RecordPaymentProof) == [RecordPaymentProof("ORD1", "screenshot", "media-7")]


def test_other_text_reprompts_for_proof():
    session = SessionData(state=ConversationState.AWAITING_PAYMENT_PROOF, pending_order_id="ORD1")
    result = transition(session, msg("paid"), ctx())
    assert result.session == session
    assert of_type(result, RecordPaymentProof) == []


def test_closed_proof_order_returns_to_default():
    session = SessionData(state=ConversationState.AWAITING_PAYMENT_PROOF, pending_order_id="ORDGONE")
    for body in ("123456789012", "hi", "cancel"):
        result = transition(session, msg(body), ctx(proof_order_open=False))
        assert result.session == SessionData()
        assert of_type(result, RecordPaymentProof) == []
        assert reply_texts(result) == [replies.proof_order_closed_text("ORDGONE")]


def test_cancel_pending_order():
    pending = PendingOrderView("ORD1", 100.0)
    result = transition(SessionData(cart=[{"name": "Burger"}]), msg("cancel order"), ctx(pending=pending))
    assert of_type(result, CancelOrder) == [CancelOrder("ORD1")]
    assert result.session.cart == []


def test_cancel_without_pending_order_explains():
    result = transition(SessionData(), msg("cancel"), ctx())
    assert of_type(result, CancelOrder) == []
    assert reply_texts(result) == [replies.cancel_help_text()]


def test_my_orders_asks_for_recent_orders():
    result = transition(SessionData(), msg("My Orders"), ctx())
    assert of_type(result, SendRecentOrders) == [SendRecentOrders(5)]


def test_edit_name_round_trip():
    result = transition(SessionData(), msg("edit name"), ctx())
    assert result.session.state == ConversationState.EDITING_NAME
    result = transition(result.session, msg("Asha K"), ctx())
    assert result.session.state == ConversationState.DEFAULT
    assert of_type(result, UpdateProfile) == [UpdateProfile(name="Asha K")]


def test_shared_location_is_stored():
    here = GeoPoint(12.98, 77.6)
    result = transition(SessionData(), msg(location=here), ctx())
    assert of_type(result, UpdateProfile) == [UpdateProfile(location=here)]


def test_unrecognised_text_gets_fallback():
    result = transition(SessionData(), msg("what's up"), ctx())
    assert reply_texts(result) == [replies.fallback_text()]
