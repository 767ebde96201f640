"""Pydantic request/response schemas for the custom-domain API."""

from __future__ import annotations

from pydantic import Field

from projecthost.registrar.client import DnsRecord, RegisteredDomain
from projecthost.schemas.common import CamelModel
from projecthost.schemas.project import ProjectResponse


class AttachDomainRequest(CamelModel):
    project_id: str = Field(min_length=1)
    domain: str = Field(min_length=1)


class DomainRequest(CamelModel):
    domain: str = Field(min_length=1)


class AttachDomainResponse(CamelModel):
    success: bool = True
    project: ProjectResponse
    registrar_domain: RegisteredDomain
    message: str


class RegistrarVerification(CamelModel):
    verified: bool
    verification: list[DnsRecord]
    using_provider_dns: bool = Field(alias="usingProviderDNS")
    misconfigured: bool | None
    dns_records: list[DnsRecord]
    verification_response: RegisteredDomain | None = None


class VerifyDomainResponse(CamelModel):
    success: bool = True
    project: ProjectResponse
    registrar_domain: RegistrarVerification
    message: str


class RemoveDomainResponse(CamelModel):
    success: bool = True
    project: ProjectResponse
    message: str = "Custom domain removed successfully"


class DomainAvailabilityResponse(CamelModel):
    success: bool = True
    domain: str
    available: bool
    message: str


class DomainInstructionsBody(CamelModel):
    dns_records: list[DnsRecord]
    verification: list[DnsRecord]
    verified: bool
    using_provider_dns: bool = Field(alias="usingProviderDNS")
    misconfigured: bool | None
    message: str
    setup_steps: list[str]
    note: str


class DomainInstructionsResponse(CamelModel):
    success: bool = True
    domain: str
    instructions: DomainInstructionsBody
    registrar_domain: RegisteredDomain | None = None
