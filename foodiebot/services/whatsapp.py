# foodiebot/services/whatsapp.py
import logging
import time

import requests
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from foodiebot.core.config import settings
from foodiebot.models.sql_models import Message

logger = logging.getLogger(__name__)


def get_current_time_ms():
    return int(time.time() * 1000)


def log_message(db: Session, contact_id: str, direction: str, body: str, platform: str = "whatsapp") -> Message:
    msg = Message(
        platform=platform,
        contact_id=str(contact_id),
        direction=direction,
        body=body,
        timestamp=get_current_time_ms(),
    )
    db.add(msg)
    db.commit()
    return msg


class WhatsAppGateway:
    """Outbound messages through the WhatsApp Cloud API.

    Every message is written to the chat log first, then posted. Neither a
    chat-log failure nor an API failure is raised: both are logged, and a
    failed post is reported as False.
    """

    platform = "whatsapp"

    def __init__(
        self,
        token: str = None,
        phone_id: str = None,
        api_version: str = None,
        timeout: float = None,
    ):
        self.token = token if token is not None else settings.META_API_TOKEN
        self.phone_id = phone_id if phone_id is not None else settings.WHATSAPP_PHONE_ID
        self.api_version = api_version or settings.GRAPH_API_VERSION
        self.timeout = timeout or settings.SEND_TIMEOUT_SECONDS

    @property
    def is_configured(self) -> bool:
        return bool(self.token and self.phone_id)

    @property
    def status(self) -> str:
        return "ready" if self.is_configured else "disabled"

    @property
    def url(self) -> str:
        return f"https://graph.facebook.com/{self.api_version}/{self.phone_id}/messages"

    def send(self, to_id: str, message_text: str, db: Session) -> bool:
        logger.info("SENDING (%s) TO %s: %s", self.platform, to_id, message_text)
        try:
            log_message(db, to_id, "outbound", message_text, self.platform)
        except SQLAlchemyError:
            # Delivery does not depend on the chat log
            logger.exception("Could not log outbound message to %s", to_id)
            db.rollback()

        if not self.is_configured:
            logger.warning("WhatsApp credentials missing, message to %s not delivered", to_id)
            return False

        headers = {"Authorization": f"Bearer {self.token}", "Content-Type": "application/json"}
        payload = {"messaging_product": "whatsapp", "to": to_id, "type": "text", "text": {"body": message_text}}
        try:
            response = requests.post(self.url, json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning("WhatsApp send to %s failed: %s", to_id, e)
            return False
        return True
