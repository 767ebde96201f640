"""Project service -- project creation and subdomain lookup.

The subdomain is derived from the project name:
  lowercase -> drop everything outside [a-z0-9-] -> strip hyphens ->
  truncate to 50 -> strip hyphens again

A project may be created with a custom domain in one go. It is inserted as
`pending`, then registered with the registrar: `added` on success, `failed`
(and REGISTRAR_ERROR to the caller) otherwise.
"""

import logging
import re
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from projecthost.errors import (
    DomainInUseError,
    InvalidDomainError,
    NotFoundError,
    RegistrarError,
    SubdomainTakenError,
    ValidationError,
)
from projecthost.models.project import DomainStatus, Project
from projecthost.registrar.client import RegistrarClient, SetupInstructions
from projecthost.repositories.project_repo import ProjectRepository
from projecthost.services.domain_validator import normalize_domain, validate_domain
from projecthost.services.verification_poller import VerificationPoller

log = logging.getLogger(__name__)

MAX_SUBDOMAIN_LENGTH = 50


def sanitize_subdomain(name: str) -> str:
    sanitized = re.sub(r"[^a-z0-9-]", "", name.lower()).strip("-")
    return sanitized[:MAX_SUBDOMAIN_LENGTH].strip("-")


@dataclass
class CreateProjectResult:
    project: Project
    message: str
    domain_setup: SetupInstructions | None = None


class ProjectService:
    def __init__(
        self,
        session: AsyncSession,
        registrar: RegistrarClient,
        poller: VerificationPoller | None = None,
        reserved_domains: tuple[str, ...] = (),
    ) -> None:
        self.repo = ProjectRepository(session)
        self.session = session
        self._registrar = registrar
        self._poller = poller
        self._reserved = reserved_domains

    async def create_project(
        self,
        project_name: str,
        emoji: str | None = None,
        custom_domain: str | None = None,
    ) -> CreateProjectResult:
        subdomain = sanitize_subdomain(project_name)
        if not subdomain:
            raise ValidationError(
                "Invalid project name. Please use only letters, numbers, and hyphens."
            )
        if await self.repo.find_by_subdomain(subdomain) is not None:
            raise SubdomainTakenError(
                "Project name is already taken. Please choose a different name."
            )

        domain = normalize_domain(custom_domain) if custom_domain else None
        if domain is not None:
            validation = validate_domain(domain, self._reserved)
            if not validation.valid:
                raise InvalidDomainError(validation.message or "Invalid domain")
            if await self.repo.find_by_custom_domain(domain) is not None:
                raise DomainInUseError("Custom domain is already in use.")

        project = await self.repo.create(
            project_name=project_name.strip(),
            subdomain=subdomain,
            emoji=emoji,
            custom_domain=domain,
            domain_status=DomainStatus.PENDING if domain else None,
        )
        await self.session.commit()

        if domain is None:
            return CreateProjectResult(project=project, message="Project created successfully")

        try:
            await self._registrar.add_domain(domain)
        except RegistrarError as exc:
            log.warning("Project %s: registrar add of %s failed: %s", project.id, domain, exc)
            await self.repo.update_status(project.id, DomainStatus.FAILED)
            await self.session.commit()
            raise RegistrarError(
                "Failed to add domain to registrar. Please try again.",
                upstream_status=exc.upstream_status,
            ) from exc

        project = await self.repo.update_status(project.id, DomainStatus.ADDED)
        await self.session.commit()
        if self._poller is not None:
            self._poller.schedule(project.id, domain)

        setup = await self._registrar.get_setup_instructions(domain)
        return CreateProjectResult(
            project=project,
            message=(
                "Project created successfully! "
                "Please follow the domain setup instructions below."
            ),
            domain_setup=setup,
        )

    async def get_by_subdomain(self, subdomain: str) -> Project:
        project = await self.repo.find_by_subdomain(sanitize_subdomain(subdomain))
        if project is None:
            raise NotFoundError(f"No project found with subdomain: {subdomain}")
        return project

    async def is_subdomain_available(self, name: str) -> bool:
        subdomain = sanitize_subdomain(name)
        if not subdomain:
            return False
        return await self.repo.find_by_subdomain(subdomain) is None
