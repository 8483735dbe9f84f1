"""Property-based tests for domain and slug validators using hypothesis."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from src.statuspage.core.security import (
    is_valid_domain_host,
    make_slug,
    normalize_domain,
    normalize_domain_list,
    sanitize_disabled_tabs,
    validate_project_slug_format,
)

pytestmark = pytest.mark.unit

label = st.from_regex(r"^[a-z0-9](?:[a-z0-9-]{0,10}[a-z0-9])?$", fullmatch=True)
hostname = st.lists(label, min_size=2, max_size=4).map(".".join)


@given(host=hostname)
@settings(max_examples=100)
def test_normalize_domain_is_idempotent(host: str):
    """Normalizing an already normalized host changes nothing."""
    once = normalize_domain(host)
    assert normalize_domain(once) == once


@given(host=hostname, scheme=st.sampled_from(["", "http://", "https://"]), port=st.integers(1, 65535))
def test_normalize_domain_strips_scheme_port_and_path(host: str, scheme: str, port: int):
    """Scheme, port, path and letter case never survive normalization."""
    raw = f"{scheme}{host.upper()}:{port}/some/path?q=1"
    assert normalize_domain(raw) == host


@given(host=hostname)
def test_generated_hostnames_are_valid(host: str):
    assert is_valid_domain_host(host)


@given(hosts=st.lists(hostname, max_size=8))
def test_normalize_domain_list_has_no_duplicates(hosts: list[str]):
    result = normalize_domain_list(hosts + hosts)
    assert len(result) == len(set(result))
    assert set(result) == set(hosts)


@given(name=st.text(max_size=40))
def test_make_slug_output_passes_slug_format_when_non_empty(name: str):
    slug = make_slug(name)
    if slug and len(slug) <= 64:
        assert validate_project_slug_format(slug) == slug


class TestNormalizeDomain:
    """Edge cases of hostname normalization."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Status.Example.com", "status.example.com"),
            ("https://status.example.com/", "status.example.com"),
            ("status.example.com.", "status.example.com"),
            ("  status.example.com:8443 ", "status.example.com"),
            ("localhost:3000", "localhost"),
            ("", ""),
            ("   ", ""),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_domain(raw) == expected

    def test_non_string_is_empty(self):
        assert normalize_domain(None) == ""
        assert normalize_domain(42) == ""

    def test_list_accepts_comma_and_whitespace_separated_string(self):
        assert normalize_domain_list("a.example.com, B.example.com\nA.example.com") == [
            "a.example.com",
            "b.example.com",
        ]


class TestIsValidDomainHost:
    @pytest.mark.parametrize("host", ["status.example.com", "localhost", "127.0.0.1", "::1"])
    def test_valid(self, host):
        assert is_valid_domain_host(host)

    @pytest.mark.parametrize(
        "host",
        ["", "intranet", "-bad.example.com", "bad-.example.com", "a..example.com", "a_b.example.com"],
    )
    def test_invalid(self, host):
        assert not is_valid_domain_host(host)

    def test_too_long(self):
        host = ".".join(["a" * 60] * 5)
        assert len(host) > 253
        assert not is_valid_domain_host(host)


def test_sanitize_disabled_tabs_drops_unknown_keys():
    assert sanitize_disabled_tabs({"incidents": 1, "billing": True}) == {"incidents": True}
    assert sanitize_disabled_tabs(["incidents"]) == {}
