"""Custom-domain workflow -- the domain_status state machine.

  (no domain) --attach--> added --verify--> verified
                            |                  |
  pending (project created with a domain) -> added | failed
                            |
  added | verified | failed --remove--> (no domain)

Attach
  validate -> local uniqueness -> registrar availability -> registrar add ->
  one local update (custom_domain + status=added). If the local update fails
  after the registrar add succeeded, the registrar domain is removed again as
  a best-effort compensation: a failed compensation is logged, never raised,
  and the caller sees the original local error.

Verify
  Only legal from `added`. Triggers the registrar re-check, then polls with
  bounded backoff. Ends in `verified` iff the registrar says verified AND the
  authoritative nameservers are the provider's; otherwise stays `added` (it
  can be retried) and the background poller keeps watching it.

Remove
  Domain must match exactly. Registrar removal failures abort (except an
  upstream not-found, which already is the desired end state). Clears both
  custom_domain and domain_status.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from projecthost.errors import (
    DomainAlreadyAttachedError,
    DomainInUseError,
    DomainMismatchError,
    DomainNotAvailableError,
    DomainNotReadyError,
    InvalidDomainError,
    RegistrarDomainNotFoundError,
    RegistrarError,
)
from projecthost.models.project import DomainStatus, Project
from projecthost.registrar.client import (
    DnsRecord,
    RegisteredDomain,
    RegistrarClient,
    VerificationStatus,
)
from projecthost.repositories.project_repo import ProjectRepository
from projecthost.services.domain_validator import normalize_domain, validate_domain
from projecthost.services.verification_policy import VerificationPolicy, poll_verification
from projecthost.services.verification_poller import VerificationPoller

log = logging.getLogger(__name__)

_NOT_READY_MESSAGES = {
    DomainStatus.PENDING.value: "Domain is still being added. Please wait a moment and try again.",
    DomainStatus.VERIFIED.value: "Domain is already verified.",
    DomainStatus.FAILED.value: "Domain addition failed. Please contact support.",
}

MSG_VERIFIED = "Domain verified successfully! Your project is now live with your custom domain."
MSG_VERIFIED_FOREIGN_DNS = (
    "Domain is verified but not using provider DNS. "
    "Please update your nameservers to the provider's nameservers."
)
MSG_NOT_VERIFIED = (
    "DNS verification failed. Please update your nameservers to the "
    "provider's nameservers and try again."
)

SETUP_STEPS = [
    "1. Log in to your domain registrar's control panel",
    "2. Navigate to nameserver or DNS settings",
    "3. Replace your current nameservers with the nameservers shown below",
    "4. Save the changes and wait for DNS propagation (this can take up to 24 hours)",
    "5. Click 'Verify Domain' once nameservers are updated",
    "6. Your custom domain will be live once verification is complete",
]
SETUP_NOTE = (
    "DNS changes can take up to 24 hours to propagate. "
    "You can check the verification status anytime."
)


@dataclass
class AttachResult:
    project: Project
    registrar_domain: RegisteredDomain
    message: str = "Custom domain added successfully. Please configure your DNS settings."


@dataclass
class VerifyResult:
    project: Project
    status: VerificationStatus
    verification_response: RegisteredDomain
    dns_records: list[DnsRecord]
    message: str


@dataclass
class DomainAvailability:
    domain: str
    available: bool
    message: str


@dataclass
class DomainInstructions:
    domain: str
    dns_records: list[DnsRecord]
    verification: list[DnsRecord]
    verified: bool
    using_provider_dns: bool
    misconfigured: bool | None
    message: str
    setup_steps: list[str] = field(default_factory=lambda: list(SETUP_STEPS))
    note: str = SETUP_NOTE
    registrar_domain: RegisteredDomain | None = None


def verification_message(status: VerificationStatus) -> str:
    if status.fully_verified:
        return MSG_VERIFIED
    if status.verified:
        return MSG_VERIFIED_FOREIGN_DNS
    return MSG_NOT_VERIFIED


class DomainService:
    def __init__(
        self,
        session: AsyncSession,
        registrar: RegistrarClient,
        policy: VerificationPolicy,
        poller: VerificationPoller | None = None,
        reserved_domains: tuple[str, ...] = (),
    ) -> None:
        self.repo = ProjectRepository(session)
        self.session = session
        self._registrar = registrar
        self._policy = policy
        self._poller = poller
        self._reserved = reserved_domains

    # ── helpers ────────────────────────────────────────────────────────────

    def _validate(self, domain: str) -> None:
        validation = validate_domain(domain, self._reserved)
        if not validation.valid:
            raise InvalidDomainError(validation.message or "Invalid domain")

    @staticmethod
    def _require_match(project: Project, domain: str) -> None:
        if project.custom_domain != domain:
            raise DomainMismatchError(
                "The provided domain does not match the project's custom domain"
            )

    async def _compensate_add(self, domain: str) -> None:
        try:
            await self._registrar.remove_domain(domain)
            log.info("Rolled back registrar domain %s after local update failure", domain)
        except RegistrarError:
            log.exception(
                "Compensating removal of %s failed; registrar domain left dangling", domain
            )

    # ── transitions ────────────────────────────────────────────────────────

    async def attach_domain(self, project_id: str, domain: str) -> AttachResult:
        domain = normalize_domain(domain)
        self._validate(domain)

        project = await self.repo.get_by_id(project_id)
        if project.custom_domain and project.custom_domain != domain:
            raise DomainAlreadyAttachedError(
                f"Project already has custom domain '{project.custom_domain}'; remove it first"
            )

        if await self.repo.find_by_custom_domain(domain) is not None:
            raise DomainInUseError("This domain is already being used by another project")

        if not await self._registrar.is_domain_available(domain):
            raise DomainNotAvailableError("This domain is already configured on the registrar")

        registered = await self._registrar.add_domain(domain)

        try:
            project = await self.repo.update_fields(
                project_id, custom_domain=domain, domain_status=DomainStatus.ADDED
            )
            await self.session.commit()
        except Exception:
            await self._compensate_add(domain)
            raise

        log.info("Project %s: attached %s (status=added)", project_id, domain)
        if self._poller is not None:
            self._poller.schedule(project_id, domain)
        return AttachResult(project=project, registrar_domain=registered)

    async def verify_domain(self, project_id: str, domain: str) -> VerifyResult:
        domain = normalize_domain(domain)
        project = await self.repo.get_by_id(project_id)
        self._require_match(project, domain)

        if project.domain_status != DomainStatus.ADDED.value:
            raise DomainNotReadyError(
                _NOT_READY_MESSAGES.get(
                    project.domain_status,
                    "Domain is not in the correct state for verification.",
                )
            )

        triggered = await self._registrar.verify_domain(domain)
        status = await poll_verification(
            lambda: self._registrar.check_verification_status(domain), self._policy
        )

        final = DomainStatus.VERIFIED if status.fully_verified else DomainStatus.ADDED
        project = await self.repo.update_status(project_id, final)
        await self.session.commit()
        log.info(
            "Project %s: verification of %s -> %s (verified=%s using_provider_dns=%s)",
            project_id,
            domain,
            final.value,
            status.verified,
            status.using_provider_dns,
        )

        if self._poller is not None:
            if final is DomainStatus.VERIFIED:
                self._poller.cancel(project_id)
            else:
                self._poller.schedule(project_id, domain)

        return VerifyResult(
            project=project,
            status=status,
            verification_response=triggered,
            dns_records=self._registrar.nameserver_records(),
            message=verification_message(status),
        )

    async def remove_domain(self, project_id: str, domain: str) -> Project:
        domain = normalize_domain(domain)
        project = await self.repo.get_by_id(project_id)
        self._require_match(project, domain)

        try:
            await self._registrar.remove_domain(domain)
        except RegistrarDomainNotFoundError:
            log.warning("Domain %s already absent on registrar; clearing locally", domain)

        # Only once the registrar has let go; a failed remove keeps polling
        if self._poller is not None:
            self._poller.cancel(project_id)

        project = await self.repo.update_fields(
            project_id, custom_domain=None, domain_status=None
        )
        await self.session.commit()
        log.info("Project %s: removed custom domain %s", project_id, domain)
        return project

    # ── read-only lookups ─────────────────────────────────────────────────

    async def check_availability(self, domain: str) -> DomainAvailability:
        domain = normalize_domain(domain)
        validation = validate_domain(domain, self._reserved)
        if not validation.valid:
            return DomainAvailability(domain, False, validation.message or "Invalid domain")

        if await self.repo.find_by_custom_domain(domain) is not None:
            return DomainAvailability(
                domain, False, "Domain is already in use by another project"
            )

        available = await self._registrar.is_domain_available(domain)
        return DomainAvailability(
            domain,
            available,
            "Domain is available"
            if available
            else "Domain is already configured on the registrar",
        )

    async def get_instructions(self, domain: str) -> DomainInstructions:
        domain = normalize_domain(domain)
        self._validate(domain)

        setup = await self._registrar.get_setup_instructions(domain)
        status = await self._registrar.check_verification_status(domain)
        return DomainInstructions(
            domain=domain,
            dns_records=setup.dns_records,
            verification=status.verification or setup.verification,
            verified=status.verified,
            using_provider_dns=status.using_provider_dns,
            misconfigured=status.misconfigured,
            message=(
                "Domain is verified and ready to use"
                if status.fully_verified
                else "Please point your domain at the nameservers below to verify ownership"
            ),
            registrar_domain=status.domain,
        )
