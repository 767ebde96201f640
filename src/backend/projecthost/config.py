"""AppSettings -- ProjectHost application configuration.

All environment variables are read via pydantic-settings.
DB_URL and REGISTRAR_API_TOKEN are required and will cause a startup failure
if missing.

Registrar credentials are not read from module globals by the client: they are
packed into an explicit RegistrarConfig by build_registrar_config() and passed
to the RegistrarClient constructor.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from projecthost.registrar.client import RegistrarConfig
from projecthost.services.verification_policy import VerificationPolicy


class AppSettings(BaseSettings):
    """ProjectHost application settings, loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Database - Required, application fails to start if missing
    DB_URL: str

    # Registrar (hosting provider domain API) - token is required
    REGISTRAR_API_TOKEN: str
    REGISTRAR_API_URL: str = "https://api.vercel.com"
    REGISTRAR_PROJECT_ID: str = "projecthost-frontend"
    REGISTRAR_TEAM_ID: str = ""
    REGISTRAR_NAMESERVERS: list[str] = ["ns1.vercel-dns.com", "ns2.vercel-dns.com"]
    REGISTRAR_TIMEOUT_SECONDS: int = 30

    # The service's own base domain; never attachable as a custom domain
    BASE_DOMAIN: str = "projecthost.io"

    # Verification polling
    VERIFY_SETTLE_SECONDS: float = 2.0
    VERIFY_MAX_ATTEMPTS: int = 3
    VERIFY_BACKOFF_FACTOR: float = 2.0
    BACKGROUND_VERIFY_MAX_ATTEMPTS: int = 6
    VERIFICATION_SWEEP_INTERVAL_MINUTES: int = 15

    # Identity provider webhook (Svix-style signing secret, "whsec_...")
    IDENTITY_WEBHOOK_SECRET: str = ""

    LOG_LEVEL: str = "INFO"


settings = AppSettings()


def build_registrar_config(app_settings: AppSettings = settings) -> RegistrarConfig:
    return RegistrarConfig(
        api_url=app_settings.REGISTRAR_API_URL,
        api_token=app_settings.REGISTRAR_API_TOKEN,
        project_id=app_settings.REGISTRAR_PROJECT_ID,
        team_id=app_settings.REGISTRAR_TEAM_ID or None,
        nameservers=tuple(ns.lower() for ns in app_settings.REGISTRAR_NAMESERVERS),
    )


def build_verification_policy(
    app_settings: AppSettings = settings, *, background: bool = False
) -> VerificationPolicy:
    """Inline policy for the verify endpoint; background=True gives the longer
    policy used by the post-attach poller."""
    max_attempts = (
        app_settings.BACKGROUND_VERIFY_MAX_ATTEMPTS
        if background
        else app_settings.VERIFY_MAX_ATTEMPTS
    )
    return VerificationPolicy(
        settle_seconds=app_settings.VERIFY_SETTLE_SECONDS,
        max_attempts=max_attempts,
        backoff_factor=app_settings.VERIFY_BACKOFF_FACTOR,
    )
