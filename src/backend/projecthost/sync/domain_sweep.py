"""Periodic verification sweep: re-check every project still in `added`.

sweep_added_domains() is called by APScheduler (see main.py). It never raises
on individual project failures -- DNS can take a day to propagate, so a domain
that is not verified yet is simply checked again on the next run.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from projecthost.errors import ProjectHostError, RegistrarError
from projecthost.models.project import DomainStatus
from projecthost.registrar.client import RegistrarClient
from projecthost.repositories.project_repo import ProjectRepository

logger = logging.getLogger(__name__)


async def sweep_added_domains(
    session: AsyncSession,
    registrar: RegistrarClient,
) -> dict[str, int]:
    """Promote fully verified domains to `verified`.

    Returns {"checked": int, "verified": int, "failed_checks": int}.
    """
    repo = ProjectRepository(session)
    projects = await repo.list_by_status(DomainStatus.ADDED)

    checked = verified = failed_checks = 0
    for project in projects:
        domain = project.custom_domain
        if not domain:
            continue
        try:
            status = await registrar.check_verification_status(domain)
        except RegistrarError as exc:
            logger.warning("Sweep: could not check %s (project %s): %s", domain, project.id, exc)
            failed_checks += 1
            continue

        checked += 1
        if not status.fully_verified:
            continue
        try:
            promoted = await repo.promote_if_current(project.id, domain)
            if promoted:
                await session.commit()
        except ProjectHostError as exc:
            logger.warning("Sweep: could not promote %s (project %s): %s", domain, project.id, exc)
            failed_checks += 1
            continue

        if promoted:
            verified += 1
            logger.info("Sweep: project %s domain %s verified", project.id, domain)
        else:
            logger.info("Sweep: project %s no longer holds %s in added, skipped", project.id, domain)

    await session.commit()
    return {"checked": checked, "verified": verified, "failed_checks": failed_checks}
