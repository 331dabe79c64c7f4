import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from foodiebot.core.database import Base, get_db
from foodiebot.core.runtime import BotRuntime, get_runtime
from foodiebot.models.sql_models import DeliveryRate, MenuItem, ShopSettings
from foodiebot.services.broadcast import AdminBroadcaster
from foodiebot.services.conversation import BotFlags
from foodiebot.services.session_store import InMemorySessionStore
from foodiebot.services.whatsapp import WhatsAppGateway, log_message
from main import app

SHOP_LAT, SHOP_LON = 12.9716, 77.5946


class RecordingGateway(WhatsAppGateway):
    """Gateway that keeps outbound messages in memory instead of calling Meta."""

    def __init__(self):
        super().__init__(token="", phone_id="")
        self.sent = []

    def send(self, to_id, message_text, db):
        log_message(db, to_id, "outbound", message_text, self.platform)
        self.sent.append((to_id, message_text))
        return True

    def texts_to(self, phone):
        return [text for to_id, text in self.sent if to_id == phone]


class RecordingBroadcaster(AdminBroadcaster):
    def __init__(self):
        super().__init__()
        self.events = []

    async def broadcast(self, event, data):
        self.events.append((event, data))
        await super().broadcast(event, data)

    def names(self):
        return [event for event, _ in self.events]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def runtime(gateway):
    return BotRuntime(
        gateway=gateway,
        sessions=InMemorySessionStore(),
        broadcaster=RecordingBroadcaster(),
        flags=BotFlags(payment_proof_flow=True, admin_approval_gate=True),
    )


@pytest.fixture
def seed_menu(db):
    items = [
        MenuItem(name="Burger", price=100.0, category="Main Course"),
        MenuItem(name="Pizza", price=200.0, category="Main Course"),
        MenuItem(name="Lassi", price=50.0, category="Drinks"),
        MenuItem(name="Samosa", price=20.0, category="Snacks", is_available=False),
    ]
    db.add_all(items)
    db.commit()
    return {item.name: item.id for item in items}


@pytest.fixture
def seed_shop(db):
    db.add(ShopSettings(shop_name="Test Kitchen", latitude=SHOP_LAT, longitude=SHOP_LON, upi_id="test@upi"))
    db.add_all([DeliveryRate(max_km=5, fee=20), DeliveryRate(max_km=10, fee=40)])
    db.commit()


@pytest.fixture
def client(session_factory, runtime):
    """TestClient on the real app with the DB and runtime swapped for test doubles."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_runtime] = lambda: runtime
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()
