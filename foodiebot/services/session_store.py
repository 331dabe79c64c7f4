# foodiebot/services/session_store.py
"""
Per-customer conversation sessions.

A session is a cache: losing it sends the customer back to the default
state. InMemorySessionStore is enough for a single process and for tests;
DatabaseSessionStore keeps sessions in the conversation_sessions table so a
restart or a second instance picks up where the last one stopped.
"""
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from foodiebot.models.sql_models import ConversationRecord

logger = logging.getLogger(__name__)


class ConversationState(str, Enum):
    DEFAULT = "default"
    COLLECTING_NAME = "collecting_name"
    COLLECTING_ADDRESS = "collecting_address"
    EDITING_NAME = "editing_name"
    EDITING_ADDRESS = "editing_address"
    AWAITING_PAYMENT_PROOF = "awaiting_payment_proof"


@dataclass(frozen=True)
class SessionData:
    state: ConversationState = ConversationState.DEFAULT
    pending_order_id: Optional[str] = None
    cart: List[dict] = field(default_factory=list)

    def evolve(self, **changes) -> "SessionData":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "pending_order_id": self.pending_order_id,
            "cart": [dict(line) for line in self.cart],
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "SessionData":
        if not data:
            return cls()
        try:
            state = ConversationState(data.get("state", ConversationState.DEFAULT.value))
        except ValueError:
            logger.warning("Unknown session state %r, resetting", data.get("state"))
            state = ConversationState.DEFAULT
        return cls(
            state=state,
            pending_order_id=data.get("pending_order_id"),
            cart=list(data.get("cart") or []),
        )


class SessionStore:
    """get/set/delete keyed by customer phone."""

    def get(self, phone: str) -> SessionData:
        raise NotImplementedError

    def set(self, phone: str, session: SessionData) -> None:
        raise NotImplementedError

    def delete(self, phone: str) -> None:
        raise NotImplementedError

    def clear_cart(self, phone: str) -> None:
        session = self.get(phone)
        if session.cart:
            self.set(phone, session.evolve(cart=[]))


class InMemorySessionStore(SessionStore):
    def __init__(self):
        self._sessions: Dict[str, dict] = {}

    def get(self, phone: str) -> SessionData:
        return SessionData.from_dict(self._sessions.get(str(phone)))

    def set(self, phone: str, session: SessionData) -> None:
        self._sessions[str(phone)] = session.to_dict()

    def delete(self, phone: str) -> None:
        self._sessions.pop(str(phone), None)

    def clear(self) -> None:
        self._sessions.clear()

    def __len__(self):
        return len(self._sessions)


class DatabaseSessionStore(SessionStore):
    """Sessions persisted as JSON rows; opens a short-lived DB session per call."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get(self, phone: str) -> SessionData:
        db = self.session_factory()
        try:
            record = db.query(ConversationRecord).filter(ConversationRecord.phone_number == str(phone)).first()
            return SessionData.from_dict(record.payload if record else None)
        finally:
            db.close()

    def set(self, phone: str, session: SessionData) -> None:
        db = self.session_factory()
        try:
            record = db.query(ConversationRecord).filter(ConversationRecord.phone_number == str(phone)).first()
            payload = session.to_dict()
            if record:
                record.state = payload["state"]
                record.payload = payload
            else:
                db.add(ConversationRecord(phone_number=str(phone), state=payload["state"], payload=payload))
            db.commit()
        finally:
            db.close()

    def delete(self, phone: str) -> None:
        db = self.session_factory()
        try:
            db.query(ConversationRecord).filter(ConversationRecord.phone_number == str(phone)).delete()
            db.commit()
        finally:
            db.close()
