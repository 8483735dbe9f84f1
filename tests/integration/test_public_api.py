"""Tests for public snapshots and host-based tenant resolution."""

import pytest

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]


class TestProjectSnapshot:
    async def test_get_project_by_slug(self, client):
        response = await client.get("/api/v1/public/projects/payments")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == 3
        assert data["slug"] == "payments"
        assert data["overallStatus"] == "operational"
        assert "supportEmail" not in data["settings"]
        assert "subscribers" not in data

    async def test_unknown_slug_is_404_with_request_id(self, client):
        response = await client.get("/api/v1/public/projects/nope")

        assert response.status_code == 404
        data = response.json()
        assert data["detail"] == "Project 'nope' not found"
        assert data["request_id"]


class TestHostResolution:
    async def test_current_project_from_primary_domain(self, client, runtime):
        project = runtime.store.get_project_by_slug("payments")
        runtime.domain_settings.update_domains(project, custom_domain="status.payments.example")

        response = await client.get(
            "/api/v1/public/current", headers={"Host": "Status.Payments.Example"}
        )

        assert response.status_code == 200
        assert response.json()["slug"] == "payments"

    async def test_current_project_unknown_host(self, client):
        response = await client.get("/api/v1/public/current", headers={"Host": "unknown.example"})

        assert response.status_code == 404
        assert "request_id" in response.json()

    async def test_redirect_domain_preserves_path_and_query(self, client, runtime):
        project = runtime.store.get_project_by_id(2)
        runtime.domain_settings.update_domains(
            project, custom_domain="primary.example", redirect_domains=["old.example"]
        )

        response = await client.get(
            "/p/widgets?x=1",
            headers={"Host": "old.example", "X-Forwarded-Proto": "https"},
        )

        assert response.status_code == 308
        assert response.headers["location"] == "https://primary.example/p/widgets?x=1"

    async def test_redirect_keeps_percent_encoded_path(self, client, runtime):
        project = runtime.store.get_project_by_id(2)
        runtime.domain_settings.update_domains(
            project, custom_domain="primary.example", redirect_domains=["old.example"]
        )

        response = await client.get(
            "/p/a%20b%2Fc?x=1",
            headers={"Host": "old.example", "X-Forwarded-Proto": "https"},
        )

        assert response.status_code == 308
        assert response.headers["location"] == "https://primary.example/p/a%20b%2Fc?x=1"

    async def test_redirect_uses_request_scheme_without_proxy_header(self, client, runtime):
        project = runtime.store.get_project_by_id(2)
        runtime.domain_settings.update_domains(
            project, custom_domain="primary.example", redirect_domains=["old.example"]
        )

        response = await client.get("/api/v1/public/current", headers={"Host": "old.example"})

        assert response.status_code == 308
        assert response.headers["location"] == "http://primary.example/api/v1/public/current"

    async def test_options_is_never_redirected(self, client, runtime):
        project = runtime.store.get_project_by_id(2)
        runtime.domain_settings.update_domains(
            project, custom_domain="primary.example", redirect_domains=["old.example"]
        )

        response = await client.options("/api/v1/public/current", headers={"Host": "old.example"})

        assert response.status_code != 308

    async def test_redirect_domain_without_primary_serves_project(self, client, runtime):
        project = runtime.store.get_project_by_id(2)
        runtime.domain_settings.update_domains(project, redirect_domains=["alias.example"])

        response = await client.get("/api/v1/public/current", headers={"Host": "alias.example"})

        assert response.status_code == 200
        assert response.json()["id"] == 2
