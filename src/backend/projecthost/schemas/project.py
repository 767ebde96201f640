"""Pydantic request/response schemas for the projects API."""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import Field, field_validator

from projecthost.registrar.client import DnsRecord
from projecthost.schemas.common import CamelModel

_PROJECT_NAME_RE = re.compile(r"^[a-zA-Z0-9\s-]+$")


class CreateProjectRequest(CamelModel):
    project_name: str = Field(min_length=1, max_length=50)
    emoji: str | None = None
    custom_domain: str | None = None

    @field_validator("project_name")
    @classmethod
    def validate_project_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = "Project name must be a non-empty string"
            raise ValueError(msg)
        if not _PROJECT_NAME_RE.match(v):
            msg = "Project name can only contain letters, numbers, spaces, and hyphens"
            raise ValueError(msg)
        return v

    @field_validator("emoji", "custom_domain")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


class ProjectResponse(CamelModel):
    id: str
    project_name: str
    emoji: str
    subdomain: str
    custom_domain: str | None
    has_custom_domain: bool
    domain_status: str | None
    created_at: datetime | None
    updated_at: datetime | None


class DomainSetupSteps(CamelModel):
    title: str = "Domain Setup Instructions"
    steps: list[str]
    note: str


class DomainSetup(CamelModel):
    domain: str
    verified: bool = False
    dns_records: list[DnsRecord]
    instructions: DomainSetupSteps


class CreateProjectResponse(CamelModel):
    success: bool = True
    project: ProjectResponse
    message: str
    domain_setup: DomainSetup | None = None


class GetProjectResponse(CamelModel):
    success: bool = True
    project: ProjectResponse


class SubdomainAvailabilityResponse(CamelModel):
    success: bool = True
    subdomain: str
    available: bool
