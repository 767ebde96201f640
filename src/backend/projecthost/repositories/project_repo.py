"""Repository for project records and their custom-domain fields.

Uniqueness is decided by the database, not by a prior lookup: create() is an
INSERT ... ON CONFLICT (subdomain) DO NOTHING, and a flush that violates
uq_projects_custom_domain surfaces as DomainInUseError. The find_* lookups are
only a fast path for friendlier errors.
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from projecthost.errors import (
    DomainInUseError,
    NotFoundError,
    PersistenceError,
    ProjectHostError,
    SubdomainTakenError,
)
from projecthost.models.project import DomainStatus, Project


def _integrity_error(exc: IntegrityError) -> ProjectHostError:
    detail = str(exc.orig)
    if "uq_projects_custom_domain" in detail:
        return DomainInUseError("This domain is already being used by another project")
    if "uq_projects_subdomain" in detail:
        return SubdomainTakenError(
            "Project name is already taken. Please choose a different name."
        )
    return PersistenceError("Could not update project")


def _parse_id(project_id: str) -> str | None:
    """Canonical UUID text, or None when project_id is not a UUID."""
    try:
        return str(uuid.UUID(str(project_id)))
    except ValueError:
        return None


class ProjectRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _flush(self) -> None:
        try:
            await self.session.flush()
        except IntegrityError as exc:
            await self.session.rollback()
            raise _integrity_error(exc) from exc
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise PersistenceError("Could not update project") from exc

    async def get_by_id(self, project_id: str) -> Project:
        # A malformed id cannot name a project; asyncpg would reject it outright
        parsed = _parse_id(project_id)
        if parsed is None:
            raise NotFoundError(f"Project '{project_id}' not found")
        result = await self.session.execute(select(Project).where(Project.id == parsed))
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError(f"Project '{project_id}' not found")
        return row

    async def find_by_subdomain(self, subdomain: str) -> Project | None:
        result = await self.session.execute(
            select(Project).where(Project.subdomain == subdomain)
        )
        return result.scalar_one_or_none()

    async def find_by_custom_domain(self, domain: str) -> Project | None:
        result = await self.session.execute(
            select(Project).where(Project.custom_domain == domain)
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        project_name: str,
        subdomain: str,
        emoji: str | None = None,
        custom_domain: str | None = None,
        domain_status: DomainStatus | None = None,
    ) -> Project:
        values: dict = {
            "project_name": project_name,
            "subdomain": subdomain,
            "custom_domain": custom_domain,
            "domain_status": domain_status.value if domain_status else None,
        }
        if emoji:
            values["emoji"] = emoji
        stmt = (
            pg_insert(Project)
            .values(**values)
            .on_conflict_do_nothing(index_elements=["subdomain"])
            .returning(Project)
        )
        try:
            result = await self.session.execute(stmt)
        except IntegrityError as exc:
            await self.session.rollback()
            raise _integrity_error(exc) from exc
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise PersistenceError("Could not create project") from exc

        row = result.scalar_one_or_none()
        if row is None:
            raise SubdomainTakenError(
                "Project name is already taken. Please choose a different name."
            )
        await self._flush()
        return row

    async def update_fields(self, project_id: str, **fields) -> Project:
        project = await self.get_by_id(project_id)
        for name, value in fields.items():
            if isinstance(value, DomainStatus):
                value = value.value
            setattr(project, name, value)
        project.updated_at = datetime.now(UTC)
        await self._flush()
        return project

    async def update_status(self, project_id: str, status: DomainStatus) -> Project:
        return await self.update_fields(project_id, domain_status=status)

    async def list_by_status(self, status: DomainStatus) -> list[Project]:
        result = await self.session.execute(
            select(Project)
            .where(Project.domain_status == status.value)
            .order_by(Project.updated_at)
        )
        return list(result.scalars().all())

    async def promote_if_current(self, project_id: str, domain: str) -> bool:
        """Set `verified` only if the project still holds `domain` in `added`.

        A single conditional UPDATE, so a concurrent remove or replace wins
        over a promotion decided on an older read. Returns True if promoted.
        """
        stmt = (
            update(Project)
            .where(
                Project.id == project_id,
                Project.custom_domain == domain,
                Project.domain_status == DomainStatus.ADDED.value,
            )
            .values(domain_status=DomainStatus.VERIFIED.value, updated_at=datetime.now(UTC))
            .returning(Project.id)
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise PersistenceError("Could not update project") from exc
        return result.scalar_one_or_none() is not None
