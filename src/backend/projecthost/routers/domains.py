"""Custom-domain endpoints.

POST   /api/domains                       -- attach a domain to a project
GET    /api/domains/check/{domain}        -- availability check
GET    /api/domains/instructions/{domain} -- DNS setup instructions
POST   /api/domains/{project_id}/verify   -- verify an attached domain
DELETE /api/domains/{project_id}          -- detach a domain

The static /check and /instructions routes are declared before the
/{project_id} routes.
"""

from fastapi import APIRouter, Depends

from projecthost.config import build_verification_policy, settings
from projecthost.database import get_db
from projecthost.dependencies import get_poller, get_registrar
from projecthost.schemas.domain import (
    AttachDomainRequest,
    AttachDomainResponse,
    DomainAvailabilityResponse,
    DomainInstructionsBody,
    DomainInstructionsResponse,
    DomainRequest,
    RegistrarVerification,
    RemoveDomainResponse,
    VerifyDomainResponse,
)
from projecthost.schemas.project import ProjectResponse
from projecthost.services.domain_service import DomainService

router = APIRouter(prefix="/api/domains", tags=["domains"])


def _service(
    session=Depends(get_db),
    registrar=Depends(get_registrar),
    poller=Depends(get_poller),
) -> DomainService:
    return DomainService(
        session=session,
        registrar=registrar,
        policy=build_verification_policy(),
        poller=poller,
        reserved_domains=(settings.BASE_DOMAIN,),
    )


@router.post("", response_model=AttachDomainResponse)
async def attach_domain(
    body: AttachDomainRequest,
    svc: DomainService = Depends(_service),
) -> AttachDomainResponse:
    result = await svc.attach_domain(body.project_id, body.domain)
    return AttachDomainResponse(
        project=ProjectResponse.model_validate(result.project),
        registrar_domain=result.registrar_domain,
        message=result.message,
    )


@router.get("/check/{domain}", response_model=DomainAvailabilityResponse)
async def check_domain(
    domain: str,
    svc: DomainService = Depends(_service),
) -> DomainAvailabilityResponse:
    result = await svc.check_availability(domain)
    return DomainAvailabilityResponse(
        domain=result.domain, available=result.available, message=result.message
    )


@router.get("/instructions/{domain}", response_model=DomainInstructionsResponse)
async def domain_instructions(
    domain: str,
    svc: DomainService = Depends(_service),
) -> DomainInstructionsResponse:
    result = await svc.get_instructions(domain)
    return DomainInstructionsResponse(
        domain=result.domain,
        instructions=DomainInstructionsBody(
            dns_records=result.dns_records,
            verification=result.verification,
            verified=result.verified,
            using_provider_dns=result.using_provider_dns,
            misconfigured=result.misconfigured,
            message=result.message,
            setup_steps=result.setup_steps,
            note=result.note,
        ),
        registrar_domain=result.registrar_domain,
    )


@router.post("/{project_id}/verify", response_model=VerifyDomainResponse)
async def verify_domain(
    project_id: str,
    body: DomainRequest,
    svc: DomainService = Depends(_service),
) -> VerifyDomainResponse:
    result = await svc.verify_domain(project_id, body.domain)
    return VerifyDomainResponse(
        project=ProjectResponse.model_validate(result.project),
        registrar_domain=RegistrarVerification(
            verified=result.status.verified,
            verification=result.status.verification,
            using_provider_dns=result.status.using_provider_dns,
            misconfigured=result.status.misconfigured,
            dns_records=result.dns_records,
            verification_response=result.verification_response,
        ),
        message=result.message,
    )


@router.delete("/{project_id}", response_model=RemoveDomainResponse)
async def remove_domain(
    project_id: str,
    body: DomainRequest,
    svc: DomainService = Depends(_service),
) -> RemoveDomainResponse:
    project = await svc.remove_domain(project_id, body.domain)
    return RemoveDomainResponse(project=ProjectResponse.model_validate(project))
