"""Tests for project creation, subdomain derivation and lookup.

All tests mock the repository and the registrar. No real DB or network
required.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from projecthost.errors import (
    DomainInUseError,
    InvalidDomainError,
    NotFoundError,
    RegistrarError,
    SubdomainTakenError,
    ValidationError,
)
from projecthost.models.project import DomainStatus, Project
from projecthost.registrar.client import DnsRecord, RegisteredDomain, SetupInstructions
from projecthost.services.project_service import ProjectService, sanitize_subdomain

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_project(
    id="proj-1",
    project_name="My Project",
    subdomain="myproject",
    emoji="🚀",
    custom_domain=None,
    domain_status=None,
) -> Project:
    obj = MagicMock(spec=Project)
    obj.id = id
    obj.project_name = project_name
    obj.subdomain = subdomain
    obj.emoji = emoji
    obj.custom_domain = custom_domain
    obj.domain_status = domain_status
    obj.has_custom_domain = custom_domain is not None
    return obj


def _make_service() -> tuple[ProjectService, AsyncMock, MagicMock, MagicMock]:
    session = MagicMock()
    session.commit = AsyncMock()

    registrar = MagicMock()
    registrar.add_domain = AsyncMock(
        side_effect=lambda name: RegisteredDomain(name=name, apex_name=name)
    )
    registrar.get_setup_instructions = AsyncMock(
        return_value=SetupInstructions(
            dns_records=[DnsRecord(type="NS", domain="@", value="ns1.vercel-dns.com")]
        )
    )
    poller = MagicMock()

    svc = ProjectService(
        session=session,
        registrar=registrar,
        poller=poller,
        reserved_domains=("projecthost.io",),
    )
    mock_repo = AsyncMock()
    mock_repo.find_by_subdomain.return_value = None
    mock_repo.find_by_custom_domain.return_value = None

    created = {}

    async def _create(**kwargs):
        status = kwargs.get("domain_status")
        created["project"] = _make_project(
            project_name=kwargs["project_name"],
            subdomain=kwargs["subdomain"],
            custom_domain=kwargs.get("custom_domain"),
            domain_status=status.value if status else None,
        )
        return created["project"]

    async def _update_status(project_id, status):
        created["project"].domain_status = status.value
        return created["project"]

    mock_repo.create.side_effect = _create
    mock_repo.update_status.side_effect = _update_status
    svc.repo = mock_repo
    return svc, mock_repo, registrar, poller


# ---------------------------------------------------------------------------
# Subdomain derivation
# ---------------------------------------------------------------------------


class TestSanitizeSubdomain:
    def test_lowercases_and_drops_spaces(self):
        assert sanitize_subdomain("My Project") == "myproject"

    def test_keeps_hyphens_and_digits(self):
        assert sanitize_subdomain("web-app-2") == "web-app-2"

    def test_strips_leading_and_trailing_hyphens(self):
        assert sanitize_subdomain("--cool-site--") == "cool-site"

    def test_drops_non_ascii(self):
        assert sanitize_subdomain("Café Ünïcode!") == "cafncode"

    def test_truncates_to_50_then_strips_hyphen(self):
        name = "a" * 49 + "-" + "b" * 10
        result = sanitize_subdomain(name)
        assert result == "a" * 49
        assert len(result) <= 50

    def test_only_symbols_gives_empty(self):
        assert sanitize_subdomain("!!! ???") == ""


# ---------------------------------------------------------------------------
# create_project
# ---------------------------------------------------------------------------


class TestCreateProject:
    async def test_without_custom_domain(self):
        svc, repo, registrar, poller = _make_service()

        result = await svc.create_project("My Project", emoji="🎉")

        assert result.project.subdomain == "myproject"
        assert result.project.custom_domain is None
        assert result.project.domain_status is None
        assert result.domain_setup is None
        assert result.message == "Project created successfully"
        repo.create.assert_awaited_once_with(
            project_name="My Project",
            subdomain="myproject",
            emoji="🎉",
            custom_domain=None,
            domain_status=None,
        )
        registrar.add_domain.assert_not_awaited()
        poller.schedule.assert_not_called()

    async def test_with_custom_domain_goes_pending_then_added(self):
        svc, repo, registrar, poller = _make_service()

        result = await svc.create_project("My Project", custom_domain="Example.com")

        create_kwargs = repo.create.await_args.kwargs
        assert create_kwargs["custom_domain"] == "example.com"
        assert create_kwargs["domain_status"] is DomainStatus.PENDING
        registrar.add_domain.assert_awaited_once_with("example.com")
        assert result.project.domain_status == "added"
        assert result.domain_setup.dns_records[0].value == "ns1.vercel-dns.com"
        poller.schedule.assert_called_once_with("proj-1", "example.com")
        assert svc.session.commit.await_count == 2

    async def test_registrar_failure_marks_failed(self):
        svc, repo, registrar, poller = _make_service()
        registrar.add_domain.side_effect = RegistrarError("nope", upstream_status=400)

        with pytest.raises(RegistrarError) as exc_info:
            await svc.create_project("My Project", custom_domain="example.com")

        assert exc_info.value.code == "REGISTRAR_ERROR"
        assert exc_info.value.upstream_status == 400
        repo.update_status.assert_awaited_once_with("proj-1", DomainStatus.FAILED)
        poller.schedule.assert_not_called()

    async def test_empty_subdomain(self):
        svc, repo, _, _ = _make_service()

        with pytest.raises(ValidationError):
            await svc.create_project("!!!")

        repo.create.assert_not_awaited()

    async def test_subdomain_taken(self):
        svc, repo, _, _ = _make_service()
        repo.find_by_subdomain.return_value = _make_project()

        with pytest.raises(SubdomainTakenError):
            await svc.create_project("My Project")

        repo.create.assert_not_awaited()

    async def test_insert_race_surfaces_as_subdomain_taken(self):
        svc, repo, _, _ = _make_service()
        repo.create.side_effect = SubdomainTakenError("taken")

        with pytest.raises(SubdomainTakenError):
            await svc.create_project("My Project")

    async def test_invalid_custom_domain(self):
        svc, repo, _, _ = _make_service()

        with pytest.raises(InvalidDomainError):
            await svc.create_project("My Project", custom_domain="projecthost.io")

        repo.create.assert_not_awaited()

    async def test_custom_domain_in_use(self):
        svc, repo, registrar, _ = _make_service()
        repo.find_by_custom_domain.return_value = _make_project(
            id="proj-2", custom_domain="example.com", domain_status="verified"
        )

        with pytest.raises(DomainInUseError):
            await svc.create_project("My Project", custom_domain="example.com")

        repo.create.assert_not_awaited()
        registrar.add_domain.assert_not_awaited()


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


class TestLookup:
    async def test_get_by_subdomain(self):
        svc, repo, _, _ = _make_service()
        project = _make_project()
        repo.find_by_subdomain.return_value = project

        assert await svc.get_by_subdomain("MyProject") is project
        repo.find_by_subdomain.assert_awaited_once_with("myproject")

    async def test_get_by_subdomain_not_found(self):
        svc, _, _, _ = _make_service()

        with pytest.raises(NotFoundError):
            await svc.get_by_subdomain("missing")

    async def test_subdomain_available(self):
        svc, _, _, _ = _make_service()
        assert await svc.is_subdomain_available("Fresh Name") is True

    async def test_subdomain_unavailable(self):
        svc, repo, _, _ = _make_service()
        repo.find_by_subdomain.return_value = _make_project()
        assert await svc.is_subdomain_available("My Project") is False

    async def test_empty_subdomain_is_unavailable(self):
        svc, repo, _, _ = _make_service()
        assert await svc.is_subdomain_available("???") is False
        repo.find_by_subdomain.assert_not_awaited()
