"""FastAPI dependencies for the long-lived objects created in the lifespan.

The registrar client and the verification poller live on app.state; tests
override these functions (or the routers' _service factories) instead.
"""

from fastapi import Request

from projecthost.registrar.client import RegistrarClient
from projecthost.services.verification_poller import VerificationPoller


def get_registrar(request: Request) -> RegistrarClient:
    return request.app.state.registrar


def get_poller(request: Request) -> VerificationPoller | None:
    return getattr(request.app.state, "verification_poller", None)
