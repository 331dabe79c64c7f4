# foodiebot/api/endpoints/whatsapp.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from foodiebot.core.config import settings
from foodiebot.core.database import get_db
from foodiebot.core.runtime import BotRuntime, get_runtime
from foodiebot.models.schemas import MessageObject, WhatsAppWebhookSchema
from foodiebot.services.chat_manager import process_message
from foodiebot.services.conversation import InboundMessage
from foodiebot.services.geo_pricing import GeoPoint

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/webhook")
async def verify_webhook(
    mode: str = Query(alias="hub.mode"),
    token: str = Query(alias="hub.verify_token"),
    challenge: str = Query(alias="hub.challenge"),
):
    if mode == "subscribe" and token == settings.WHATSAPP_VERIFY_TOKEN:
        # Meta expects the challenge echoed back as plain text
        return PlainTextResponse(content=challenge, status_code=200)

    raise HTTPException(status_code=403, detail="Invalid Token")


def to_inbound(msg: MessageObject, sender_name: Optional[str] = None) -> InboundMessage:
    body = ""
    media = None
    location = None

    if msg.type == "text" and msg.text:
        body = msg.text.body
    elif msg.type == "image" and msg.image:
        media = msg.image
    elif msg.type == "document" and msg.document:
        media = msg.document
    elif msg.type == "location" and msg.location:
        location = GeoPoint(msg.location.latitude, msg.location.longitude)

    if media is not None and media.caption:
        body = media.caption

    return InboundMessage(
        sender=msg.from_,
        body=body,
        has_media=media is not None,
        media_type=msg.type if media is not None else None,
        media_id=media.id if media is not None else None,
        location=location,
        sender_name=sender_name,
    )


@router.post("/webhook")
async def whatsapp_webhook(
    payload: WhatsAppWebhookSchema,
    db: Session = Depends(get_db),
    runtime: BotRuntime = Depends(get_runtime),
):
    try:
        for entry in payload.entry:
            for change in entry.changes:
                value = change.value
                # Delivery/read receipts carry no messages
                if not value.messages:
                    continue
                sender_name = value.contacts[0].profile.name if value.contacts else None
                for msg in value.messages:
                    await process_message(to_inbound(msg, sender_name), db, runtime)
    except Exception:
        logger.exception("WhatsApp webhook handling failed")

    # Always return 200 OK to Meta, otherwise they will keep retrying
    return {"status": "received"}
