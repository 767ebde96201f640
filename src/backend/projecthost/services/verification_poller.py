"""Background verification after a custom domain is attached.

Each attach schedules one asyncio task per project that polls the registrar
with bounded exponential backoff and promotes the project to `verified` once
the domain is provider-verified and delegated to the provider's nameservers.
Tasks are tracked so that remove (or shutdown) can cancel them; a task never
raises, failures are logged.

Tasks open their own short-lived sessions via session_factory -- the request
session that scheduled them is long gone by the time they run.
"""

import asyncio
import logging

from projecthost.models.project import DomainStatus
from projecthost.registrar.client import RegistrarClient
from projecthost.repositories.project_repo import ProjectRepository
from projecthost.services.verification_policy import VerificationPolicy, poll_verification

log = logging.getLogger(__name__)


class VerificationPoller:
    def __init__(
        self,
        session_factory,
        registrar: RegistrarClient,
        policy: VerificationPolicy,
    ) -> None:
        self._session_factory = session_factory
        self._registrar = registrar
        self._policy = policy
        self._tasks: dict[str, asyncio.Task] = {}

    def schedule(self, project_id: str, domain: str) -> asyncio.Task:
        self.cancel(project_id)
        task = asyncio.create_task(
            self._run(project_id, domain), name=f"verify-domain-{project_id}"
        )
        self._tasks[project_id] = task
        task.add_done_callback(lambda t, pid=project_id: self._forget(pid, t))
        return task

    def _forget(self, project_id: str, task: asyncio.Task) -> None:
        if self._tasks.get(project_id) is task:
            del self._tasks[project_id]

    def cancel(self, project_id: str) -> bool:
        task = self._tasks.pop(project_id, None)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    def pending(self) -> set[str]:
        return {pid for pid, task in self._tasks.items() if not task.done()}

    async def shutdown(self) -> None:
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _run(self, project_id: str, domain: str) -> None:
        try:
            status = await poll_verification(
                lambda: self._registrar.check_verification_status(domain), self._policy
            )
            if not status.fully_verified:
                log.info(
                    "Domain %s for project %s not verified after %d checks; left as added",
                    domain,
                    project_id,
                    self._policy.max_attempts,
                )
                return
            await self._promote(project_id, domain)
        except asyncio.CancelledError:
            log.info("Background verification of %s cancelled", domain)
            raise
        except Exception:
            log.exception("Background verification failed for project %s", project_id)

    async def _promote(self, project_id: str, domain: str) -> None:
        async with self._session_factory() as session:
            repo = ProjectRepository(session)
            project = await repo.get_by_id(project_id)
            # The project may have been verified, or the domain removed or
            # replaced, while we were polling.
            if (
                project.custom_domain != domain
                or project.domain_status != DomainStatus.ADDED.value
            ):
                log.info("Project %s changed during verification; not promoting", project_id)
                return
            await repo.update_status(project_id, DomainStatus.VERIFIED)
            await session.commit()
        log.info("Project %s: %s verified in background", project_id, domain)
