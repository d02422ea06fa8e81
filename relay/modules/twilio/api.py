from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import parse_qs

from fastapi import APIRouter, Request
from fastapi.responses import Response

from relay.core.utils.request_id import get_request_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/twilio", tags=["twilio"])

EMPTY_TWIML = "<Response></Response>"


@dataclass(frozen=True, slots=True)
class InboundSms:
    from_number: str
    to_number: str
    body: str


def parse_inbound_sms(raw: bytes) -> InboundSms:
    # Twilio posts application/x-www-form-urlencoded; missing fields come through as "".
    fields = parse_qs(raw.decode("utf-8", errors="replace"), keep_blank_values=True)

    def first(name: str) -> str:
        values = fields.get(name)
        return values[0] if values else ""

    return InboundSms(from_number=first("From"), to_number=first("To"), body=first("Body"))


@router.post("/sms-inbound")
async def sms_inbound(request: Request) -> Response:
    message = parse_inbound_sms(await request.body())
    logger.info(
        "Inbound SMS from=%s to=%s body_len=%d request_id=%s",
        message.from_number,
        message.to_number,
        len(message.body),
        get_request_id(),
    )
    logger.debug("Inbound SMS body=%r", message.body)
    return Response(content=EMPTY_TWIML, media_type="text/xml")
