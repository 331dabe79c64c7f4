# foodiebot/core/runtime.py
"""Process-wide collaborators shared by the webhook, the admin API and the socket."""
from dataclasses import dataclass, field

from foodiebot.core.config import settings
from foodiebot.core.database import SessionLocal
from foodiebot.services.broadcast import AdminBroadcaster
from foodiebot.services.conversation import BotFlags
from foodiebot.services.session_store import DatabaseSessionStore, InMemorySessionStore, SessionStore
from foodiebot.services.whatsapp import WhatsAppGateway


@dataclass
class BotRuntime:
    gateway: WhatsAppGateway
    sessions: SessionStore
    broadcaster: AdminBroadcaster = field(default_factory=AdminBroadcaster)
    flags: BotFlags = field(default_factory=BotFlags)
    recent_orders_limit: int = 5


def build_session_store(backend: str) -> SessionStore:
    if backend == "database":
        return DatabaseSessionStore(SessionLocal)
    return InMemorySessionStore()


def build_runtime() -> BotRuntime:
    return BotRuntime(
        gateway=WhatsAppGateway(),
        sessions=build_session_store(settings.SESSION_BACKEND),
        flags=BotFlags(
            payment_proof_flow=settings.PAYMENT_PROOF_FLOW,
            admin_approval_gate=settings.ADMIN_APPROVAL_GATE,
        ),
        recent_orders_limit=settings.RECENT_ORDERS_LIMIT,
    )


runtime = build_runtime()


def get_runtime() -> BotRuntime:
    return runtime
