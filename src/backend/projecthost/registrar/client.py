"""Registrar client -- the hosting provider's project-scoped domain API.

Endpoints (Vercel-compatible):
  POST   /v9/projects/{projectId}/domains                 add
  GET    /v9/projects/{projectId}/domains                 list
  GET    /v9/projects/{projectId}/domains/{name}          fetch
  POST   /v9/projects/{projectId}/domains/{name}/verify   trigger re-check
  DELETE /v9/projects/{projectId}/domains/{name}          remove
  GET    /v6/domains/{name}/config                        DNS misconfiguration

Every non-2xx response becomes a RegistrarError carrying the upstream
error.message (when present) and status. A 404 on a per-domain call becomes
RegistrarDomainNotFoundError so callers can tell "not attached" apart from a
real failure.

The provider's own verified flag is not trusted alone: a domain is fully
verified only when its authoritative nameservers also point at the provider.
"""

import logging
from dataclasses import dataclass, field

import httpx

from projecthost.errors import RegistrarDomainNotFoundError, RegistrarError
from projecthost.registrar.nameservers import NameserverLookupError, NameserverResolver
from projecthost.schemas.common import CamelModel

log = logging.getLogger(__name__)

_DEFAULT_NAMESERVERS = ("ns1.vercel-dns.com", "ns2.vercel-dns.com")


@dataclass(frozen=True)
class RegistrarConfig:
    api_url: str
    api_token: str
    project_id: str
    team_id: str | None = None
    nameservers: tuple[str, ...] = _DEFAULT_NAMESERVERS


class DnsRecord(CamelModel):
    type: str
    domain: str
    value: str
    reason: str = ""


class RegisteredDomain(CamelModel):
    name: str
    apex_name: str | None = None
    project_id: str | None = None
    verified: bool = False
    verification: list[DnsRecord] = []
    redirect: str | None = None
    git_branch: str | None = None
    created_at: int | None = None
    updated_at: int | None = None


@dataclass
class VerificationStatus:
    verified: bool
    verification: list[DnsRecord] = field(default_factory=list)
    using_provider_dns: bool = False
    misconfigured: bool | None = False
    domain: RegisteredDomain | None = None

    @property
    def fully_verified(self) -> bool:
        return self.verified and self.using_provider_dns


@dataclass
class SetupInstructions:
    dns_records: list[DnsRecord]
    verification: list[DnsRecord] = field(default_factory=list)


def _error_message(resp: httpx.Response, fallback: str) -> str:
    try:
        body = resp.json()
    except ValueError:
        return fallback
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return fallback


class RegistrarClient:
    def __init__(
        self,
        config: RegistrarConfig,
        http_client: httpx.AsyncClient,
        resolver: NameserverResolver,
    ) -> None:
        self._config = config
        self._client = http_client
        self._resolver = resolver

    # ── internal helpers ───────────────────────────────────────────────────

    def _domains_url(self, name: str | None = None, suffix: str = "") -> str:
        url = f"{self._config.api_url.rstrip('/')}/v9/projects/{self._config.project_id}/domains"
        if name is not None:
            url = f"{url}/{name}"
        return url + suffix

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.api_token}",
            "Content-Type": "application/json",
        }

    def _params(self) -> dict[str, str]:
        return {"teamId": self._config.team_id} if self._config.team_id else {}

    async def _request(
        self,
        method: str,
        url: str,
        fallback: str,
        *,
        json: dict | None = None,
        domain_scoped: bool = True,
    ) -> httpx.Response:
        try:
            resp = await self._client.request(
                method, url, headers=self._headers(), params=self._params(), json=json
            )
        except httpx.HTTPError as exc:
            log.warning("Registrar %s %s failed: %s", method, url, exc)
            raise RegistrarError(fallback) from exc

        if resp.is_success:
            return resp

        message = _error_message(resp, fallback)
        log.warning(
            "Registrar %s %s returned %s: %s", method, url, resp.status_code, message
        )
        if resp.status_code == 404 and domain_scoped:
            raise RegistrarDomainNotFoundError(message)
        raise RegistrarError(message, upstream_status=resp.status_code)

    def nameserver_records(self) -> list[DnsRecord]:
        return [
            DnsRecord(type="NS", domain="@", value=ns, reason="Provider nameserver")
            for ns in self._config.nameservers
        ]

    async def _uses_provider_dns(self, domain: str) -> bool:
        try:
            nameservers = await self._resolver.resolve_ns(domain)
        except NameserverLookupError as exc:
            # Fail closed: an unresolvable delegation is not provider DNS
            log.warning("%s", exc)
            return False
        except Exception:
            log.exception("Unexpected error resolving nameservers for %s", domain)
            return False
        provider = set(self._config.nameservers)
        using = any(ns in provider for ns in nameservers)
        log.info(
            "DNS check for %s: nameservers=%s using_provider_dns=%s",
            domain,
            nameservers,
            using,
        )
        return using

    async def _misconfigured(self, name: str) -> bool | None:
        """None when the provider will not tell us (e.g. token lacks scope)."""
        url = f"{self._config.api_url.rstrip('/')}/v6/domains/{name}/config"
        try:
            resp = await self._request("GET", url, "Failed to get domain configuration")
        except RegistrarError:
            return None
        try:
            body = resp.json()
        except ValueError:
            return None
        value = body.get("misconfigured") if isinstance(body, dict) else None
        return value if isinstance(value, bool) else None

    # ── public interface ───────────────────────────────────────────────────

    async def add_domain(self, name: str) -> RegisteredDomain:
        resp = await self._request(
            "POST",
            self._domains_url(),
            "Failed to add domain to registrar",
            json={"name": name},
            domain_scoped=False,
        )
        return RegisteredDomain.model_validate(resp.json())

    async def get_domain(self, name: str) -> RegisteredDomain:
        resp = await self._request(
            "GET", self._domains_url(name), "Failed to get domain information"
        )
        return RegisteredDomain.model_validate(resp.json())

    async def verify_domain(self, name: str) -> RegisteredDomain:
        resp = await self._request(
            "POST", self._domains_url(name, "/verify"), "Failed to verify domain", json={}
        )
        return RegisteredDomain.model_validate(resp.json())

    async def check_verification_status(self, name: str) -> VerificationStatus:
        try:
            domain = await self.get_domain(name)
        except RegistrarDomainNotFoundError:
            # Not attached yet is a valid state, not an error
            return VerificationStatus(verified=False)

        using_provider_dns = await self._uses_provider_dns(domain.apex_name or name)
        status = VerificationStatus(
            verified=domain.verified,
            verification=list(domain.verification),
            using_provider_dns=using_provider_dns,
            misconfigured=await self._misconfigured(name),
            domain=domain,
        )
        log.info(
            "Domain %s verification status: verified=%s using_provider_dns=%s",
            name,
            status.verified,
            status.using_provider_dns,
        )
        return status

    async def remove_domain(self, name: str) -> None:
        await self._request("DELETE", self._domains_url(name), "Failed to remove domain")

    async def list_domains(self) -> list[RegisteredDomain]:
        resp = await self._request(
            "GET", self._domains_url(), "Failed to list domains", domain_scoped=False
        )
        return [RegisteredDomain.model_validate(d) for d in resp.json().get("domains", [])]

    async def is_domain_available(self, name: str) -> bool:
        try:
            await self.get_domain(name)
        except RegistrarDomainNotFoundError:
            return True
        return False

    async def get_setup_instructions(self, name: str) -> SetupInstructions:
        # Nameserver records are provider-constant, so they are returned even
        # when the domain does not exist on the provider yet.
        try:
            domain = await self.get_domain(name)
        except RegistrarError:
            return SetupInstructions(dns_records=self.nameserver_records())
        return SetupInstructions(
            dns_records=self.nameserver_records(),
            verification=list(domain.verification),
        )
