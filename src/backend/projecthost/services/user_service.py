"""User lifecycle events from the identity provider.

Events (payload shape follows the provider's user object):
  user.created  -> insert if absent (redeliveries are no-ops)
  user.updated  -> update email / name / image
  user.deleted  -> delete
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from projecthost.errors import ValidationError
from projecthost.repositories.user_repo import UserRepository

log = logging.getLogger(__name__)


def _primary_email(data: dict) -> str:
    addresses = data.get("email_addresses") or []
    if not addresses or not addresses[0].get("email_address"):
        raise ValidationError("User event has no email address")
    return str(addresses[0]["email_address"]).strip().lower()


class UserService:
    def __init__(self, session: AsyncSession) -> None:
        self.repo = UserRepository(session)
        self.session = session

    async def handle_event(self, event_type: str, data: dict) -> None:
        user_id = data.get("id")
        if not user_id:
            raise ValidationError("User event has no user id")

        if event_type == "user.created":
            inserted = await self.repo.create_if_absent(
                user_id=user_id,
                email=_primary_email(data),
                name=data.get("first_name") or "",
                image=data.get("image_url") or "",
            )
            if not inserted:
                log.info("User %s already exists; ignoring duplicate user.created", user_id)
        elif event_type == "user.updated":
            user = await self.repo.update(
                user_id,
                email=_primary_email(data),
                name=data.get("first_name") or "",
                image=data.get("image_url") or "",
            )
            if user is None:
                log.warning("user.updated for unknown user %s", user_id)
        elif event_type == "user.deleted":
            if not await self.repo.delete(user_id):
                log.info("user.deleted for unknown user %s", user_id)
        else:
            raise ValidationError("Unknown event type")

        await self.session.commit()
        log.info("Processed %s for user %s", event_type, user_id)
