"""Tests for opening pull requests on approval, and the retry/status endpoints."""

import base64
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from autoheal.main import app
from autoheal.services.github import GitHubClient, get_github_client
from autoheal.services.pull_request_service import branch_name, page_name

REPO = "/repos/acme/shop"
MAP_PATH = "shared/selectors/selectors.map.json"


class FakeGitHub:
    """In-memory stand-in for the GitHub REST API, served through httpx.MockTransport."""

    def __init__(self):
        self.files: dict[str, str] = {}
        self.written: dict[str, dict] = {}
        self.calls: list[tuple[str, str]] = []
        self.existing_branches: set[str] = set()
        self.fail_pulls = False
        self.next_number = 7

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix(REPO)
        self.calls.append((request.method, path))
        body = json.loads(request.content) if request.content else {}

        if request.method == "GET" and path.startswith("/git/ref/heads/"):
            return httpx.Response(200, json={"object": {"sha": "base-sha"}})
        if request.method == "POST" and path == "/git/refs":
            branch = body["ref"].removeprefix("refs/heads/")
            if branch in self.existing_branches:
                return httpx.Response(422, json={"message": "Reference already exists"})
            self.existing_branches.add(branch)
            return httpx.Response(201, json={"ref": body["ref"]})
        if request.method == "PATCH" and path.startswith("/git/refs/heads/"):
            return httpx.Response(200, json={"object": {"sha": body["sha"]}})
        if path.startswith("/contents/"):
            file_path = path.removeprefix("/contents/")
            if request.method == "GET":
                if file_path not in self.files:
                    return httpx.Response(404, json={"message": "Not Found"})
                encoded = base64.b64encode(self.files[file_path].encode()).decode()
                return httpx.Response(200, json={"content": encoded, "sha": f"sha-{file_path}"})
            self.written[file_path] = {**body, "text": base64.b64decode(body["content"]).decode()}
            return httpx.Response(200, json={"content": {"path": file_path}})
        if request.method == "POST" and path == "/pulls":
            if self.fail_pulls:
                return httpx.Response(422, json={"message": "Validation Failed"})
            self.last_pull = body
            number = self.next_number
            return httpx.Response(
                201, json={"number": number, "html_url": f"https://github.com/acme/shop/pull/{number}"}
            )
        if request.method == "POST" and "/labels" in path:
            return httpx.Response(200, json=[])
        return httpx.Response(404, json={"message": "Not Found"})


@pytest.fixture
def github() -> FakeGitHub:
    fake = FakeGitHub()
    app.dependency_overrides[get_github_client] = lambda: GitHubClient(
        "test-token", "acme/shop", transport=httpx.MockTransport(fake.handle)
    )
    return fake


@pytest.fixture
def suggested_failure(create_failure, create_suggestion):
    """A failure in suggested state and its suggestion."""
    failure = create_failure()
    return failure, create_suggestion(failure["id"])


def approve(client: TestClient, suggestion_id: str, **extra):
    response = client.post(
        "/api/approvals", json={"suggestionId": suggestion_id, "decision": "approve", **extra}
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestOpenOnApproval:
    def test_approval_opens_pull_request(self, auth_client: TestClient, github: FakeGitHub, suggested_failure) -> None:
        failure, suggestion = suggested_failure
        github.files[MAP_PATH] = json.dumps({"login.submit": failure["currentSelector"], "login.user": "#user"})

        approve(auth_client, suggestion["id"], notes="class is stable")

        pr = auth_client.get(f"/api/git/pr/{suggestion['id']}/status").json()
        assert pr["status"] == "open"
        assert pr["prNumber"] == 7
        assert pr["prUrl"] == "https://github.com/acme/shop/pull/7"
        assert pr["branchName"] == branch_name("abc123def", "user login flow")
        assert pr["branchName"].startswith("autoheal/update-abc123d-")

        updated_map = json.loads(github.written[MAP_PATH]["text"])
        assert updated_map == {"login.submit": "[data-testid=submit-btn]", "login.user": "#user"}
        assert github.written[MAP_PATH]["sha"] == f"sha-{MAP_PATH}"
        assert "class is stable" in github.last_pull["body"]
        assert github.last_pull["base"] == "main"
        assert ("POST", "/issues/7/labels") in github.calls

    def test_missing_map_is_created_with_catalog_key(
        self, auth_client: TestClient, github: FakeGitHub, suggested_failure
    ) -> None:
        _, suggestion = suggested_failure

        approve(auth_client, suggestion["id"], selectorPage="login", selectorName="submit")

        written = github.written[MAP_PATH]
        assert json.loads(written["text"]) == {"login.submit": "[data-testid=submit-btn]"}
        assert "sha" not in written

    def test_page_object_is_updated(self, auth_client: TestClient, github: FakeGitHub, suggested_failure) -> None:
        failure, suggestion = suggested_failure
        po_path = f"shared/selectors/pageObjects/{page_name(failure['specPath'])}.po.ts"
        github.files[po_path] = f"export const submit = '{failure['currentSelector']}';\n"

        approve(auth_client, suggestion["id"])

        assert github.written[po_path]["text"] == "export const submit = '[data-testid=submit-btn]';\n"

    def test_existing_branch_is_reset(self, auth_client: TestClient, github: FakeGitHub, suggested_failure) -> None:
        _, suggestion = suggested_failure
        github.existing_branches.add(branch_name("abc123def", "user login flow"))

        approve(auth_client, suggestion["id"])

        assert any(method == "PATCH" for method, _ in github.calls)
        assert auth_client.get(f"/api/git/pr/{suggestion['id']}/status").json()["status"] == "open"

    def test_rejection_opens_nothing(self, auth_client: TestClient, github: FakeGitHub, suggested_failure) -> None:
        _, suggestion = suggested_failure

        auth_client.post("/api/approvals", json={"suggestionId": suggestion["id"], "decision": "reject"})

        assert github.calls == []
        assert auth_client.get(f"/api/git/pr/{suggestion['id']}/status").status_code == 404


class TestFailureIsNotFatal:
    def test_github_error_keeps_approval(self, auth_client: TestClient, github: FakeGitHub, suggested_failure) -> None:
        failure, suggestion = suggested_failure
        github.fail_pulls = True

        approve(auth_client, suggestion["id"])

        assert auth_client.get(f"/api/failures/{failure['id']}").json()["status"] == "approved"
        pr = auth_client.get(f"/api/git/pr/{suggestion['id']}/status").json()
        assert pr["status"] == "failed"
        assert "422" in pr["error"]

        github.fail_pulls = False
        retried = auth_client.post(f"/api/git/pr/{suggestion['id']}/retry")

        assert retried.status_code == 200
        assert retried.json()["status"] == "open"
        assert retried.json()["error"] is None

    def test_unconfigured_github_is_recorded(self, auth_client: TestClient, suggested_failure) -> None:
        failure, suggestion = suggested_failure

        approve(auth_client, suggestion["id"])

        assert auth_client.get(f"/api/failures/{failure['id']}").json()["status"] == "approved"
        pr = auth_client.get(f"/api/git/pr/{suggestion['id']}/status").json()
        assert pr["status"] == "failed"
        assert "not configured" in pr["error"]

    def test_unreachable_github_is_recorded(self, auth_client: TestClient, suggested_failure) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        app.dependency_overrides[get_github_client] = lambda: GitHubClient(
            "test-token", "acme/shop", transport=httpx.MockTransport(refuse)
        )
        _, suggestion = suggested_failure

        approve(auth_client, suggestion["id"])

        pr = auth_client.get(f"/api/git/pr/{suggestion['id']}/status").json()
        assert pr["status"] == "failed"
        assert "connection refused" in pr["error"]


class TestRetryAndStatus:
    def test_retry_open_pull_request_conflicts(
        self, auth_client: TestClient, github: FakeGitHub, suggested_failure
    ) -> None:
        _, suggestion = suggested_failure
        approve(auth_client, suggestion["id"])

        assert auth_client.post(f"/api/git/pr/{suggestion['id']}/retry").status_code == 409

    def test_retry_keeps_catalog_key(self, auth_client: TestClient, github: FakeGitHub, suggested_failure) -> None:
        _, suggestion = suggested_failure
        github.fail_pulls = True
        approve(auth_client, suggestion["id"], selectorPage="login", selectorName="submit")
        github.written.clear()
        github.fail_pulls = False

        retried = auth_client.post(f"/api/git/pr/{suggestion['id']}/retry").json()

        assert retried["selectorKey"] == "login.submit"
        assert "login.submit" in json.loads(github.written[MAP_PATH]["text"])

    def test_retry_needs_an_approval(self, auth_client: TestClient, github: FakeGitHub, suggested_failure) -> None:
        _, suggestion = suggested_failure

        assert auth_client.post(f"/api/git/pr/{suggestion['id']}/retry").status_code == 400

        auth_client.post("/api/approvals", json={"suggestionId": suggestion["id"], "decision": "reject"})
        assert auth_client.post(f"/api/git/pr/{suggestion['id']}/retry").status_code == 400

    def test_retry_unknown_suggestion(self, auth_client: TestClient) -> None:
        assert auth_client.post("/api/git/pr/00000000-0000-0000-0000-000000000000/retry").status_code == 404

    def test_retry_requires_session(self, test_client: TestClient, suggested_failure) -> None:
        _, suggestion = suggested_failure

        assert test_client.post(f"/api/git/pr/{suggestion['id']}/retry").status_code == 401

    def test_status_unknown(self, test_client: TestClient) -> None:
        assert test_client.get("/api/git/pr/not-a-uuid/status").status_code == 404

    def test_list_by_status(self, auth_client: TestClient, github: FakeGitHub, create_failure, create_suggestion) -> None:
        opened = create_suggestion(create_failure()["id"])
        approve(auth_client, opened["id"])
        github.fail_pulls = True
        failed = create_suggestion(create_failure(test="checkout flow")["id"])
        approve(auth_client, failed["id"])

        assert len(auth_client.get("/api/git/prs").json()) == 2
        failed_prs = auth_client.get("/api/git/prs", params={"status": "failed"}).json()
        assert [p["suggestionId"] for p in failed_prs] == [failed["id"]]
        assert auth_client.get("/api/git/prs", params={"status": "merged"}).status_code == 400
