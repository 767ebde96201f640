"""ProjectHost domain error hierarchy.

All service-layer errors inherit from ProjectHostError. The global exception
handler in main.py converts these to the JSON error envelope
{"success": false, "error": code, "message": ..., "requestId": ...}
with the correct HTTP status code.
"""


class ProjectHostError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(ProjectHostError):
    status_code = 404
    code = "NOT_FOUND"


class ValidationError(ProjectHostError):
    status_code = 400
    code = "VALIDATION_ERROR"


class ConflictError(ProjectHostError):
    status_code = 409
    code = "CONFLICT"


# ── custom-domain workflow ─────────────────────────────────────────────────


class InvalidDomainError(ValidationError):
    code = "INVALID_DOMAIN"


class DomainMismatchError(ValidationError):
    code = "DOMAIN_MISMATCH"


class DomainNotReadyError(ValidationError):
    code = "DOMAIN_NOT_READY"


class DomainInUseError(ConflictError):
    code = "DOMAIN_IN_USE"


class DomainNotAvailableError(ConflictError):
    code = "DOMAIN_NOT_AVAILABLE"


class DomainAlreadyAttachedError(ConflictError):
    code = "DOMAIN_ALREADY_ATTACHED"


class SubdomainTakenError(ConflictError):
    code = "SUBDOMAIN_TAKEN"


# ── upstream / infrastructure ──────────────────────────────────────────────


class RegistrarError(ProjectHostError):
    """Upstream registrar failure. upstream_status is the provider's HTTP
    status when a response was received, None on transport errors."""

    status_code = 500
    code = "REGISTRAR_ERROR"

    def __init__(self, message: str = "", upstream_status: int | None = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status


class RegistrarDomainNotFoundError(RegistrarError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, message: str = "", upstream_status: int | None = 404) -> None:
        super().__init__(message, upstream_status)


class PersistenceError(ProjectHostError):
    status_code = 500
    code = "PERSISTENCE_ERROR"


class WebhookVerificationError(ValidationError):
    code = "INVALID_SIGNATURE"
