"""Authoritative nameserver lookup for registered domains.

Used by RegistrarClient.check_verification_status to confirm that a domain the
registrar reports as verified is actually delegated to the provider's DNS.
"""

import asyncio
import sys

import aiodns


class NameserverLookupError(Exception):
    """NS resolution failed (NXDOMAIN, timeout, no answer...)."""


class NameserverResolver:
    def __init__(self) -> None:
        self._resolver: aiodns.DNSResolver | None = None

    def _get_resolver(self) -> aiodns.DNSResolver:
        if self._resolver is None:
            if sys.platform == "win32":
                try:
                    loop = asyncio.get_running_loop()
                except RuntimeError:
                    loop = asyncio.new_event_loop()
                self._resolver = aiodns.DNSResolver(loop=loop)
            else:
                self._resolver = aiodns.DNSResolver()
        return self._resolver

    async def resolve_ns(self, domain: str) -> list[str]:
        """Return the domain's NS hostnames, lowercased, without trailing dot."""
        resolver = self._get_resolver()
        try:
            result = await resolver.query(domain, "NS")
        except aiodns.error.DNSError as exc:
            raise NameserverLookupError(f"NS lookup failed for {domain}: {exc}") from exc
        return [record.host.rstrip(".").lower() for record in result or []]
