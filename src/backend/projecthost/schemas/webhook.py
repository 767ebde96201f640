"""Identity-provider webhook payload."""

from typing import Any

from pydantic import BaseModel


class IdentityEvent(BaseModel):
    type: str
    data: dict[str, Any]


class WebhookAck(BaseModel):
    success: bool = True
