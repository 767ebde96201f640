"""Bounded exponential-backoff polling of a domain's verification status.

Shared by the verify endpoint (short policy, runs inline) and the post-attach
background poller (longer policy). With max_attempts=1 the loop degenerates to
"wait once, check once".
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from projecthost.registrar.client import VerificationStatus

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerificationPolicy:
    settle_seconds: float = 2.0
    max_attempts: int = 3
    backoff_factor: float = 2.0

    def delays(self) -> list[float]:
        """Sleep before each check: settle, settle*f, settle*f^2, ..."""
        return [
            self.settle_seconds * (self.backoff_factor**attempt)
            for attempt in range(max(1, self.max_attempts))
        ]


async def poll_verification(
    check: Callable[[], Awaitable[VerificationStatus]],
    policy: VerificationPolicy,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> VerificationStatus:
    """Call check() after each backoff delay until it reports fully verified
    or attempts run out. Returns the last status observed."""
    delays = policy.delays()
    for attempt, delay in enumerate(delays, start=1):
        await sleep(delay)
        status = await check()
        log.debug(
            "Verification check %d/%d: verified=%s using_provider_dns=%s",
            attempt,
            len(delays),
            status.verified,
            status.using_provider_dns,
        )
        if status.fully_verified or attempt == len(delays):
            return status
