"""Project endpoints.

POST /api/projects                   -- create a project (optionally with a custom domain)
GET  /api/projects/check/{subdomain} -- subdomain availability
GET  /api/projects/{subdomain}       -- project by subdomain
"""

from fastapi import APIRouter, Depends, status

from projecthost.config import settings
from projecthost.database import get_db
from projecthost.dependencies import get_poller, get_registrar
from projecthost.schemas.project import (
    CreateProjectRequest,
    CreateProjectResponse,
    DomainSetup,
    DomainSetupSteps,
    GetProjectResponse,
    ProjectResponse,
    SubdomainAvailabilityResponse,
)
from projecthost.services.domain_service import SETUP_NOTE, SETUP_STEPS
from projecthost.services.project_service import ProjectService, sanitize_subdomain

router = APIRouter(prefix="/api/projects", tags=["projects"])


def _service(
    session=Depends(get_db),
    registrar=Depends(get_registrar),
    poller=Depends(get_poller),
) -> ProjectService:
    return ProjectService(
        session=session,
        registrar=registrar,
        poller=poller,
        reserved_domains=(settings.BASE_DOMAIN,),
    )


@router.post("", response_model=CreateProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    body: CreateProjectRequest,
    svc: ProjectService = Depends(_service),
) -> CreateProjectResponse:
    result = await svc.create_project(
        project_name=body.project_name,
        emoji=body.emoji,
        custom_domain=body.custom_domain,
    )
    domain_setup = None
    if result.domain_setup is not None:
        domain_setup = DomainSetup(
            domain=result.project.custom_domain,
            verified=False,
            dns_records=result.domain_setup.dns_records,
            instructions=DomainSetupSteps(steps=list(SETUP_STEPS), note=SETUP_NOTE),
        )
    return CreateProjectResponse(
        project=ProjectResponse.model_validate(result.project),
        message=result.message,
        domain_setup=domain_setup,
    )


@router.get("/check/{subdomain}", response_model=SubdomainAvailabilityResponse)
async def check_subdomain(
    subdomain: str,
    svc: ProjectService = Depends(_service),
) -> SubdomainAvailabilityResponse:
    available = await svc.is_subdomain_available(subdomain)
    return SubdomainAvailabilityResponse(
        subdomain=sanitize_subdomain(subdomain), available=available
    )


@router.get("/{subdomain}", response_model=GetProjectResponse)
async def get_project(
    subdomain: str,
    svc: ProjectService = Depends(_service),
) -> GetProjectResponse:
    project = await svc.get_by_subdomain(subdomain)
    return GetProjectResponse(project=ProjectResponse.model_validate(project))
