"""Thin async client for the parts of the GitHub REST API used to open selector PRs."""

import base64
import logging
from typing import Any

import httpx

from autoheal.config import Settings, get_settings
from autoheal.exceptions import GitHubError

logger = logging.getLogger(__name__)


class GitHubClient:
    """Async GitHub client bound to one repository."""

    def __init__(
        self,
        token: str,
        repo: str,
        api_url: str = "https://api.github.com",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token = token
        self.repo = repo
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "GitHubClient":
        return cls(
            settings.github_token,
            settings.github_repo,
            api_url=settings.github_api_url,
            timeout=settings.github_timeout,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.api_url,
                timeout=httpx.Timeout(self.timeout),
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Accept": "application/vnd.github+json",
                    "X-GitHub-Api-Version": "2022-11-28",
                },
                transport=self.transport,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        client = await self._get_client()
        try:
            response = await client.request(method, f"/repos/{self.repo}{path}", **kwargs)
        except httpx.HTTPError as e:
            raise GitHubError(f"GitHub request failed: {e}", original_error=e) from e

        if response.status_code >= 400:
            try:
                message = response.json().get("message", response.text)
            except ValueError:
                message = response.text
            raise GitHubError(
                f"GitHub {method} {path} returned {response.status_code}: {message}",
                upstream_status=response.status_code,
            )
        return response.json() if response.content else None

    # Branches

    async def get_branch_sha(self, branch: str) -> str:
        data = await self._request("GET", f"/git/ref/heads/{branch}")
        return data["object"]["sha"]

    async def create_or_reset_branch(self, branch: str, sha: str) -> None:
        try:
            await self._request("POST", "/git/refs", json={"ref": f"refs/heads/{branch}", "sha": sha})
        except GitHubError as e:
            if e.upstream_status != 422:
                raise
            # Branch left over from an earlier attempt; point it back at the base
            await self._request("PATCH", f"/git/refs/heads/{branch}", json={"sha": sha, "force": True})

    # Files

    async def get_file(self, path: str, ref: str) -> tuple[str, str] | None:
        """Return (text, blob sha), or None if the file does not exist on ref."""
        try:
            data = await self._request("GET", f"/contents/{path}", params={"ref": ref})
        except GitHubError as e:
            if e.upstream_status == 404:
                return None
            raise
        return base64.b64decode(data["content"]).decode("utf-8"), data["sha"]

    async def put_file(self, path: str, branch: str, text: str, message: str, sha: str | None = None) -> None:
        body = {
            "message": message,
            "content": base64.b64encode(text.encode("utf-8")).decode("ascii"),
            "branch": branch,
        }
        if sha:
            body["sha"] = sha
        await self._request("PUT", f"/contents/{path}", json=body)

    # Pull requests

    async def create_pull(self, title: str, body: str, head: str, base: str) -> dict:
        return await self._request(
            "POST", "/pulls", json={"title": title, "body": body, "head": head, "base": base}
        )

    async def add_labels(self, number: int, labels: list[str]) -> None:
        await self._request("POST", f"/issues/{number}/labels", json={"labels": labels})

    async def request_reviewers(self, number: int, reviewers: list[str]) -> None:
        await self._request("POST", f"/pulls/{number}/requested_reviewers", json={"reviewers": reviewers})


async def get_github_client():
    """GitHub client for the configured repository, or None when the integration is off."""
    settings = get_settings()
    if not settings.github_token or not settings.github_repo:
        yield None
        return

    client = GitHubClient.from_settings(settings)
    try:
        yield client
    finally:
        await client.close()
