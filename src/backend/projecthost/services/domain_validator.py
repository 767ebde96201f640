"""Custom-domain validation -- pure function, no I/O.

Checks, in order:
  EMPTY     domain is empty or whitespace
  FORMAT    not dot-separated DNS labels (1-63 alphanumerics/hyphens,
            no leading/trailing hyphen per label)
  TOO_LONG  more than 253 characters
  RESERVED  full domain or its top-level label is on the denylist
            (exact, case-insensitive)
"""

import re
from dataclasses import dataclass
from enum import Enum

_MAX_DOMAIN_LENGTH = 253

_DOMAIN_RE = re.compile(
    r"[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(\.[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*"
)

# PaaS / hosting / database vendor domains that must never be attached.
RESERVED_DOMAINS: frozenset[str] = frozenset(
    {
        "localhost",
        "vercel.app",
        "vercel.com",
        "now.sh",
        "amazonaws.com",
        "cloudfront.net",
        "herokuapp.com",
        "heroku.com",
        "netlify.app",
        "github.io",
        "gitlab.io",
        "firebaseapp.com",
        "appspot.com",
        "azurewebsites.net",
        "railway.app",
        "render.com",
        "supabase.co",
        "supabase.in",
        "supabase.io",
        "supabase.com",
        "planetscale.com",
        "neon.tech",
        "cockroachlabs.cloud",
        "mongodb.com",
        "mongodb.net",
        "redis.com",
        "redis.io",
        "redis.net",
        "redis.org",
        "redis.dev",
        "redis.tech",
        "redis.cloud",
        "redis.labs",
        "redis.enterprise",
        "redis.inc",
    }
)


class DomainValidationError(str, Enum):
    EMPTY = "EMPTY"
    FORMAT = "FORMAT"
    TOO_LONG = "TOO_LONG"
    RESERVED = "RESERVED"


_MESSAGES = {
    DomainValidationError.EMPTY: "Domain is required",
    DomainValidationError.FORMAT: "Invalid domain format",
    DomainValidationError.TOO_LONG: "Domain is too long",
}


@dataclass(frozen=True)
class DomainValidation:
    valid: bool
    error: DomainValidationError | None = None
    message: str | None = None


def _invalid(error: DomainValidationError, message: str | None = None) -> DomainValidation:
    return DomainValidation(valid=False, error=error, message=message or _MESSAGES[error])


def validate_domain(domain: str, extra_reserved: tuple[str, ...] = ()) -> DomainValidation:
    if not domain or not domain.strip():
        return _invalid(DomainValidationError.EMPTY)

    if not _DOMAIN_RE.fullmatch(domain):
        return _invalid(DomainValidationError.FORMAT)

    if len(domain) > _MAX_DOMAIN_LENGTH:
        return _invalid(DomainValidationError.TOO_LONG)

    reserved = RESERVED_DOMAINS | {d.lower() for d in extra_reserved}
    lowered = domain.lower()
    if lowered in reserved:
        return _invalid(
            DomainValidationError.RESERVED, "This domain is reserved and cannot be used"
        )
    tld = lowered.rsplit(".", 1)[-1]
    if tld in reserved:
        return _invalid(
            DomainValidationError.RESERVED, "This TLD is reserved and cannot be used"
        )

    return DomainValidation(valid=True)


def normalize_domain(domain: str) -> str:
    return domain.strip().lower()
