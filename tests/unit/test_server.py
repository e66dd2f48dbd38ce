"""Unit tests for the HTTP server."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from fastapi import BackgroundTasks, HTTPException
from fastapi.testclient import TestClient

from repolens.analysis.aggregation import build_report, summarize_issues
from repolens.analysis.models import IssueAnalysis
from repolens.server.api import AnalyzeRequest, get_registry, submit_analysis
from repolens.server.app import create_app
from repolens.server.validation import is_github_url, validate_repo_url


@pytest.fixture
def registry():
    get_registry.cache_clear()
    yield get_registry()
    get_registry.cache_clear()


@pytest.fixture
def pipeline():
    pipeline = MagicMock()
    pipeline.run = AsyncMock(return_value=None)
    with patch("repolens.server.api.get_pipeline", return_value=pipeline):
        yield pipeline


@pytest.fixture
def client(registry, pipeline):
    return TestClient(create_app())


@pytest.fixture
def completed_job(registry, make_issue):
    issues = [make_issue(1, "Crash on save"), make_issue(2, "Add export")]
    analyses = [
        IssueAnalysis(issue=issues[0], category="bug", priority="critical",
                      estimated_effort="medium"),
        IssueAnalysis(issue=issues[1], category="feature", priority="medium",
                      estimated_effort="low"),
    ]
    report = build_report([], "repo", 0, 0, github_issues=summarize_issues(issues, analyses))

    job = registry.create("https://github.com/owner/repo", include_github_issues=True)
    registry.start(job.id)
    registry.set_repository_name(job.id, "repo")
    registry.complete(job.id, report)
    return job


class TestValidation:
    """Tests for repository URL validation."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://github.com/owner/repo",
            "https://github.com/owner/repo/",
            "https://github.com/my-org/my.repo.git",
            "https://gitlab.com/group/project",
            "  https://github.com/owner/repo  ",
        ],
    )
    def test_valid_urls(self, url):
        assert validate_repo_url(url)

    @pytest.mark.parametrize(
        "url",
        [
            None,
            "",
            "http://github.com/owner/repo",
            "https://github.com/owner",
            "https://bitbucket.org/owner/repo",
            "https://github.com/owner/repo/tree/main",
        ],
    )
    def test_invalid_urls(self, url):
        assert not validate_repo_url(url)

    def test_is_github_url(self):
        assert is_github_url("https://github.com/o/r")
        assert not is_github_url("https://gitlab.com/o/r")


class TestFastAPIApp:
    """Tests for app-level endpoints."""

    def test_root_endpoint(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["name"] == "RepoLens"
        assert response.json()["status"] == "running"

    def test_health_endpoint(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "OK"
        assert "timestamp" in response.json()

    def test_shutdown_cancels_running_jobs(self, registry, pipeline):
        token = registry.start(registry.create("https://github.com/o/r").id)

        with TestClient(create_app()):
            assert not token.cancelled

        assert token.cancelled


class TestSubmitAnalysis:
    """Tests for POST /api/analyze."""

    def test_missing_url(self, client):
        response = client.post("/api/analyze", json={})

        assert response.status_code == 400
        assert response.json()["detail"] == "Repository URL is required"

    def test_invalid_url(self, client):
        response = client.post("/api/analyze", json={"repositoryUrl": "ftp://example.com/x"})

        assert response.status_code == 400
        assert "Invalid repository URL" in response.json()["detail"]

    def test_issues_require_github(self, client):
        response = client.post(
            "/api/analyze", json={"repositoryUrl": "https://gitlab.com/group/project"}
        )

        assert response.status_code == 400
        assert "only available for GitHub" in response.json()["detail"]

    def test_gitlab_without_issues_accepted(self, client, registry):
        response = client.post(
            "/api/analyze",
            json={"repositoryUrl": "https://gitlab.com/group/project", "includeGitHubIssues": False},
        )

        assert response.status_code == 200
        assert response.json()["estimatedTime"] == "2-5 minutes"
        job = registry.get(response.json()["analysisId"])
        assert job.include_github_issues is False

    def test_submit_starts_background_run(self, client, registry, pipeline):
        response = client.post(
            "/api/analyze",
            json={"repositoryUrl": "https://github.com/owner/repo", "githubToken": "ghp_x"},
        )

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "processing"
        assert body["estimatedTime"] == "3-7 minutes"
        assert body["message"] == "Analysis started. Check back for results."
        assert registry.get(body["analysisId"]) is not None
        pipeline.run.assert_awaited_once_with(
            body["analysisId"], "https://github.com/owner/repo", True, "ghp_x"
        )

    def test_pipeline_configuration_error(self, registry):
        with patch("repolens.server.api.get_pipeline", side_effect=RuntimeError("no key")):
            client = TestClient(create_app())
            response = client.post(
                "/api/analyze", json={"repositoryUrl": "https://github.com/owner/repo"}
            )

        assert response.status_code == 500
        assert "no key" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_pipeline_configuration_error_keeps_cause(self, registry):
        cause = RuntimeError("no key")
        request = AnalyzeRequest(repository_url="https://github.com/owner/repo")

        with patch("repolens.server.api.get_pipeline", side_effect=cause):
            with pytest.raises(HTTPException) as excinfo:
                await submit_analysis(request, BackgroundTasks(), registry)

        assert excinfo.value.status_code == 500
        assert excinfo.value.__cause__ is cause


class TestAnalysisRecords:
    """Tests for the read and cancel endpoints."""

    def test_unknown_analysis(self, client):
        assert client.get("/api/analyze/nope").status_code == 404
        assert client.get("/api/analyze/nope/issues").status_code == 404
        assert client.delete("/api/analyze/nope").status_code == 404

    def test_get_pending_analysis(self, client, registry):
        job = registry.create("https://github.com/owner/repo")

        body = client.get(f"/api/analyze/{job.id}").json()

        assert body["id"] == job.id
        assert body["status"] == "pending"
        assert body["progress"] == 0

    def test_get_completed_analysis(self, client, completed_job):
        body = client.get(f"/api/analyze/{completed_job.id}").json()

        assert body["status"] == "completed"
        assert body["progress"] == 100
        assert body["repositoryName"] == "repo"
        assert body["results"]["githubIssues"]["prioritySummary"]["critical"] == 1

    def test_issues_endpoint(self, client, completed_job):
        body = client.get(f"/api/analyze/{completed_job.id}/issues").json()

        assert body["analysisId"] == completed_job.id
        assert body["repositoryName"] == "repo"
        assert body["githubIssues"]["totalIssues"] == 2

    def test_single_issue_endpoint(self, client, completed_job):
        response = client.get(f"/api/analyze/{completed_job.id}/issues/2")

        assert response.status_code == 200
        assert response.json()["issueAnalysis"]["issue"]["title"] == "Add export"

    def test_single_issue_not_found(self, client, completed_job):
        response = client.get(f"/api/analyze/{completed_job.id}/issues/99")

        assert response.status_code == 404
        assert response.json()["detail"] == "Issue #99 not found in analysis"

    def test_issues_unavailable_without_issue_track(self, client, registry):
        job = registry.create("https://github.com/owner/repo")
        registry.start(job.id)
        registry.complete(job.id, build_report([], "repo", 0, 0))

        response = client.get(f"/api/analyze/{job.id}/issues")

        assert response.status_code == 404
        assert "not available" in response.json()["detail"]

    def test_cancel_running_analysis(self, client, registry):
        job = registry.create("https://github.com/owner/repo")
        token = registry.start(job.id)

        response = client.delete(f"/api/analyze/{job.id}")

        assert response.json() == {"analysisId": job.id, "cancelled": True}
        assert token.cancelled

    def test_cancel_pending_analysis(self, client, registry):
        job = registry.create("https://github.com/owner/repo")

        response = client.delete(f"/api/analyze/{job.id}")

        assert response.json() == {"analysisId": job.id, "cancelled": True}
        assert registry.start(job.id).cancelled

    def test_cancel_finished_analysis(self, client, completed_job):
        response = client.delete(f"/api/analyze/{completed_job.id}")

        assert response.status_code == 200
        assert response.json()["cancelled"] is False
