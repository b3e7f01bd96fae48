"""
Pytest configuration for heaven-deploy-bot tests.

Provides configured apps and a GitHub API backed by httpx.MockTransport.
"""

import json

import httpx
import pytest

from deploybot import command_handler
from deploybot.config import settings
from deploybot.models import AppConfig
from deploybot.tools.github_tool import GitHubClient


class FakeGitHub:
    """Records requests and answers with canned responses per (method, path)."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.responses: dict[tuple[str, str], httpx.Response] = {}

    def respond(self, method: str, path: str, status_code: int = 200, json_body=None):
        self.responses[(method, path)] = httpx.Response(status_code, json=json_body if json_body is not None else {})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.get((request.method, request.url.path), httpx.Response(201, json={"id": 1}))

    def client(self, access_token: str = "myaccesstoken") -> GitHubClient:
        return GitHubClient(access_token=access_token, transport=httpx.MockTransport(self.handler))

    def bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.method == "POST"]


@pytest.fixture
def fake_github(monkeypatch):
    fake = FakeGitHub()
    monkeypatch.setattr(command_handler, "get_github_client", fake.client)
    return fake


@pytest.fixture
def apps(monkeypatch):
    configured = {"myapp": AppConfig(repo="testuser/myapp")}
    monkeypatch.setattr(settings, "apps", configured)
    return configured
