"""Tests for custom-domain validation."""

import pytest

from projecthost.services.domain_validator import (
    RESERVED_DOMAINS,
    DomainValidationError,
    normalize_domain,
    validate_domain,
)


class TestValidDomains:
    @pytest.mark.parametrize(
        "domain",
        ["example.com", "www.example.com", "my-site.co.uk", "a.io", "xn--bcher-kva.example"],
    )
    def test_accepts_well_formed_domains(self, domain):
        result = validate_domain(domain)
        assert result.valid
        assert result.error is None
        assert result.message is None

    def test_single_label_is_accepted(self):
        assert validate_domain("intranet").valid


class TestInvalidDomains:
    @pytest.mark.parametrize("domain", ["", "   "])
    def test_empty(self, domain):
        result = validate_domain(domain)
        assert not result.valid
        assert result.error is DomainValidationError.EMPTY
        assert result.message == "Domain is required"

    @pytest.mark.parametrize(
        "domain",
        [
            "-example.com",
            "example-.com",
            "exa mple.com",
            "example..com",
            ".example.com",
            "example.com.",
            "example.com\n",
            "ex_ample.com",
            "a" * 64 + ".com",
        ],
    )
    def test_bad_format(self, domain):
        result = validate_domain(domain)
        assert not result.valid
        assert result.error is DomainValidationError.FORMAT
        assert result.message == "Invalid domain format"

    def test_too_long(self):
        domain = ".".join(["a" * 63] * 4)
        assert len(domain) == 255
        result = validate_domain(domain)
        assert not result.valid
        assert result.error is DomainValidationError.TOO_LONG

    def test_exactly_253_chars_is_allowed(self):
        domain = ".".join(["a" * 63, "b" * 63, "c" * 63, "d" * 61])
        assert len(domain) == 253
        assert validate_domain(domain).valid


class TestReservedDomains:
    def test_reserved_full_domain(self):
        result = validate_domain("vercel.app")
        assert not result.valid
        assert result.error is DomainValidationError.RESERVED
        assert result.message == "This domain is reserved and cannot be used"

    def test_reserved_match_is_case_insensitive(self):
        result = validate_domain("HerokuApp.com")
        assert result.error is DomainValidationError.RESERVED

    def test_reserved_tld(self):
        result = validate_domain("myapp.localhost")
        assert not result.valid
        assert result.error is DomainValidationError.RESERVED
        assert result.message == "This TLD is reserved and cannot be used"

    def test_subdomain_of_reserved_vendor_is_not_blocked(self):
        # Only exact domains and TLD labels are on the denylist
        assert validate_domain("foo.vercel.app").valid

    def test_extra_reserved_domains(self):
        assert validate_domain("projecthost.io").valid
        result = validate_domain("projecthost.io", extra_reserved=("ProjectHost.io",))
        assert result.error is DomainValidationError.RESERVED

    def test_every_reserved_entry_is_rejected(self):
        for domain in RESERVED_DOMAINS:
            assert validate_domain(domain).error is DomainValidationError.RESERVED, domain


class TestNormalizeDomain:
    def test_strips_and_lowercases(self):
        assert normalize_domain("  Example.COM ") == "example.com"
