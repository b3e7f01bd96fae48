import logging
from typing import Any

import httpx

from ..config import settings

logger = logging.getLogger(__name__)


class GitHubApiError(Exception):
    def __init__(self, status_code: int | None, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class GitHubClient:
    def __init__(
        self,
        access_token: str,
        base_url: str = "https://api.github.com",
        timeout: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        if not self.access_token:
            raise GitHubApiError(None, "GitHub is not configured")

        headers = {
            "Authorization": f"token {self.access_token}",
            "Accept": "application/vnd.github+json",
        }
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=self.timeout,
            transport=self.transport,
        )

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            async with self._client() as client:
                r = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise GitHubApiError(None, f"GitHub request failed: {e}") from e
        if r.status_code >= 300:
            logger.warning("event=github_error method=%s path=%s status=%s", method, path, r.status_code)
            raise GitHubApiError(r.status_code, f"GitHub error {r.status_code}: {r.text[:300]}")
        if not r.content:
            return None
        return r.json()

    # https://docs.github.com/en/rest/deployments/deployments#create-a-deployment
    async def create_deployment(self, repo: str, ref: str, options: dict[str, Any]) -> dict:
        body = {"ref": ref} | options
        return await self._request("POST", f"/repos/{repo}/deployments", json=body)

    async def list_deployments(self, repo: str, environment: str, per_page: int = 1) -> list[dict]:
        params = {"environment": environment, "per_page": per_page}
        return await self._request("GET", f"/repos/{repo}/deployments", params=params)

    async def list_deployment_statuses(self, repo: str, deployment_id: int) -> list[dict]:
        return await self._request("GET", f"/repos/{repo}/deployments/{deployment_id}/statuses")


def get_github_client() -> GitHubClient:
    return GitHubClient(
        access_token=settings.github_access_token,
        base_url=settings.github_api_url,
        timeout=settings.github_timeout_sec,
    )
