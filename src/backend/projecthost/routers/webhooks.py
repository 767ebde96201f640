"""Identity-provider webhook endpoint.

POST /webhooks/identity -- user lifecycle events, Svix-signed

The signature covers the raw request body, so the body is read as bytes and
only parsed after verification succeeds.
"""

import logging

import pydantic
from fastapi import APIRouter, Depends, Request

from projecthost.config import settings
from projecthost.database import get_db
from projecthost.errors import ValidationError
from projecthost.schemas.webhook import IdentityEvent, WebhookAck
from projecthost.services.user_service import UserService
from projecthost.webhooks.signature import verify_signature

log = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


def _service(session=Depends(get_db)) -> UserService:
    return UserService(session)


def _webhook_secret() -> str:
    return settings.IDENTITY_WEBHOOK_SECRET


@router.post("/identity", response_model=WebhookAck)
async def identity_webhook(
    request: Request,
    secret: str = Depends(_webhook_secret),
    svc: UserService = Depends(_service),
) -> WebhookAck:
    body = await request.body()
    if secret:
        verify_signature(
            secret,
            request.headers.get("svix-id"),
            request.headers.get("svix-timestamp"),
            body,
            request.headers.get("svix-signature"),
        )

    try:
        event = IdentityEvent.model_validate_json(body)
    except pydantic.ValidationError as exc:
        raise ValidationError("Invalid webhook payload") from exc

    log.info("Identity webhook %s received", event.type)
    await svc.handle_event(event.type, event.data)
    return WebhookAck()
