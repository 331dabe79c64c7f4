import asyncio

from sqlalchemy.exc import OperationalError

from foodiebot.core.runtime import BotRuntime
from foodiebot.models.sql_models import Customer, Message, Order, PaymentProof
from foodiebot.services import replies
from foodiebot.services.chat_manager import process_message
from foodiebot.services.conversation import InboundMessage
from foodiebot.services.geo_pricing import GeoPoint
from foodiebot.services.orders import OrderStatus, OrderStore, PaymentStatus
from foodiebot.services.session_store import ConversationState, InMemorySessionStore, SessionData
from foodiebot.services.whatsapp import WhatsAppGateway

PHONE = "919800000002"
SEVEN_KM_NORTH = (12.9716 + 0.063, 77.5946)


def say(db, runtime, body="", **kwargs):
    return asyncio.run(process_message(InboundMessage(sender=PHONE, body=body, **kwargs), db, runtime))


def onboard(db, runtime):
    say(db, runtime, "hi")
    say(db, runtime, "menu")
    say(db, runtime, "Asha")
    say(db, runtime, "12 MG Road")


def test_first_message_creates_customer(db, runtime, gateway):
    say(db, runtime, "hello")
    customer = db.query(Customer).filter_by(phone_number=PHONE).one()
    assert customer.last_seen is not None
    assert not customer.is_profile_complete
    assert len(gateway.texts_to(PHONE)) == 1


def test_profile_collection(db, runtime, seed_menu):
    onboard(db, runtime)
    customer = db.query(Customer).filter_by(phone_number=PHONE).one()
    assert customer.name == "Asha"
    assert customer.delivery_address == "12 MG Road"
    assert customer.is_profile_complete
    assert runtime.sessions.get(PHONE).state == ConversationState.DEFAULT


def test_inbound_and_outbound_are_logged(db, runtime):
    say(db, runtime, "hi")
    directions = [m.direction for m in db.query(Message).order_by(Message.id).all()]
    assert directions == ["inbound", "outbound"]


def test_seven_km_order_end_to_end(db, runtime, gateway, seed_menu, seed_shop):
    onboard(db, runtime)
    say(db, runtime, location=GeoPoint(*SEVEN_KM_NORTH))
    say(db, runtime, "Pizza x1, Burger x1")

    order = db.query(Order).one()
    assert order.status == OrderStatus.PENDING_CONFIRMATION
    assert order.subtotal == 300
    assert order.delivery_fee == 40
    assert order.total == 340
    assert order.customer_name == "Asha"
    assert "₹340.00" in gateway.texts_to(PHONE)[-1]
    assert runtime.broadcaster.names() == ["new_order"]

    say(db, runtime, "confirm order")
    say(db, runtime, "cod")
    db.expire_all()
    order = db.query(Order).one()
    assert order.status == OrderStatus.PENDING
    assert order.total == 340
    assert order.payment_method == "cod"
    assert runtime.sessions.get(PHONE).cart == []
    assert runtime.broadcaster.names() == ["new_order", "new_order"]


def test_confirm_with_no_pending_order_creates_nothing(db, runtime, seed_menu):
    onboard(db, runtime)
    say(db, runtime, "confirm")
    assert db.query(Order).count() == 0


def test_upi_then_utr_records_proof(db, runtime, seed_menu):
    onboard(db, runtime)
    say(db, runtime, "Burger x2")
    say(db, runtime, "confirm order")
    say(db, runtime, "upi")
    assert runtime.sessions.get(PHONE).state == ConversationState.AWAITING_PAYMENT_PROOF

    say(db, runtime, "123456789012")
    db.expire_all()
    order = db.query(Order).one()
    assert order.payment_method == "upi"
    assert order.payment_status == PaymentStatus.VERIFICATION_PENDING
    proof = db.query(PaymentProof).one()
    assert proof.kind == "utr"
    assert proof.order_id == order.order_id
    assert "payment_proof" in runtime.broadcaster.names()


def test_address_falls_back_to_coordinates(db, runtime, seed_menu):
    onboard(db, runtime)
    customer = db.query(Customer).filter_by(phone_number=PHONE).one()
    customer.delivery_address = None
    customer.latitude, customer.longitude = 12.98, 77.6
    db.commit()

    say(db, runtime, "Burger x1")
    say(db, runtime, "confirm")
    say(db, runtime, "cod")
    db.expire_all()
    assert db.query(Order).one().delivery_address == "Delivery near Lat: 12.9800, Lon: 77.6000"


def test_cancel_pending_order(db, runtime, seed_menu):
    onboard(db, runtime)
    say(db, runtime, "Burger x1")
    say(db, runtime, "cancel order")
    db.expire_all()
    assert db.query(Order).one().status == OrderStatus.CANCELLED
    assert "order_updated" in runtime.broadcaster.names()


def test_my_orders_lists_recent(db, runtime, gateway, seed_menu):
    onboard(db, runtime)
    say(db, runtime, "Burger x1")
    say(db, runtime, "my orders")
    order_id = db.query(Order).one().order_id
    assert order_id in gateway.texts_to(PHONE)[-1]


def test_failure_sends_apology_and_keeps_session(db, runtime, gateway, seed_menu, monkeypatch):
    onboard(db, runtime)

    def boom(*args, **kwargs):
        raise RuntimeError("db down")

    monkeypatch.setattr("foodiebot.services.orders.OrderStore.create_pending", boom)
    before = runtime.sessions.get(PHONE)
    result = say(db, runtime, "Burger x1")

    assert result is None
    assert gateway.texts_to(PHONE)[-1] == replies.error_text()
    assert runtime.sessions.get(PHONE) == before


class FakeResponse:
    def raise_for_status(self):
        pass


def test_store_outage_still_sends_apology(db, monkeypatch):
    posted = []

    def fake_post(url, json, headers, timeout):
        posted.append(json["text"]["body"])
        return FakeResponse()

    def dead_commit():
        raise OperationalError("COMMIT", {}, Exception("database is unreachable"))

    monkeypatch.setattr("foodiebot.services.whatsapp.requests.post", fake_post)
    monkeypatch.setattr(db, "commit", dead_commit)
    runtime = BotRuntime(gateway=WhatsAppGateway(token="t", phone_id="p"), sessions=InMemorySessionStore())

    result = say(db, runtime, "hi")

    assert result is None
    assert posted == [replies.error_text()]


def test_proof_for_deleted_order_releases_customer(db, runtime, gateway, seed_menu):
    onboard(db, runtime)
    runtime.sessions.set(PHONE, SessionData(state=ConversationState.AWAITING_PAYMENT_PROOF, pending_order_id="ORDGONE"))

    say(db, runtime, "123456789012")

    assert runtime.sessions.get(PHONE) == SessionData()
    assert db.query(PaymentProof).count() == 0
    assert gateway.texts_to(PHONE)[-1] == replies.proof_order_closed_text("ORDGONE")

    say(db, runtime, "menu")
    assert "Burger" in gateway.texts_to(PHONE)[-1]


def test_proof_for_cancelled_order_releases_customer(db, runtime, gateway, seed_menu):
    onboard(db, runtime)
    say(db, runtime, "Burger x1")
    say(db, runtime, "confirm")
    say(db, runtime, "upi")
    order = db.query(Order).one()
    OrderStore(db).set_status(order.order_id, OrderStatus.CANCELLED)

    say(db, runtime, "123456789012")

    assert runtime.sessions.get(PHONE).state == ConversationState.DEFAULT
    assert db.query(PaymentProof).count() == 0
