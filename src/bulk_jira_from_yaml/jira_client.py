"""Jira Cloud REST API client implementation."""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import quote

import httpx

from .base_client import IssueTrackerClient, JsonDict
from .settings import JiraConfig

logger = logging.getLogger(__name__)


class JiraAPIError(RuntimeError):
    """Domain-specific error for Jira REST failures."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        response_text: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.response_text = response_text


class JiraClient(IssueTrackerClient):
    """Thin async wrapper over the Jira REST API v3 using basic auth."""

    def __init__(
        self,
        config: JiraConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "JiraClient":
        self._client = httpx.AsyncClient(
            base_url=self.config.api_url,
            auth=httpx.BasicAuth(*self.config.as_auth()),
            timeout=httpx.Timeout(self.config.http_timeout),
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
            transport=self._transport,
        )
        logger.info("Connecting to: %s", self.config.host)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def whoami(self) -> JsonDict:
        return await self._request("GET", "/myself")

    async def get_project(self, project_key: str) -> JsonDict:
        return await self._request("GET", f"/project/{quote(project_key, safe='')}")

    async def get_issue(self, issue_id: str) -> JsonDict:
        return await self._request("GET", f"/issue/{quote(issue_id, safe='')}")

    async def create_issue(self, payload: JsonDict) -> JsonDict:
        """Create an issue. Requires Browse projects and Create issues permissions."""
        return await self._request("POST", "/issue", json_body=payload)

    async def _request(self, method: str, path: str, *, json_body: Any | None = None) -> JsonDict:
        """Send a request and return the decoded JSON body."""
        if self._client is None:
            raise JiraAPIError("Client not initialized - use async context manager")

        try:
            response = await self._client.request(method, path, json=json_body)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            body = exc.response.text
            logger.debug("%s %s failed with HTTP %s", method, path, exc.response.status_code)
            raise JiraAPIError(
                f"HTTP {exc.response.status_code}: {body}",
                status=exc.response.status_code,
                response_text=body,
            ) from exc
        except httpx.TimeoutException as exc:
            raise JiraAPIError(f"{method} {path} timed out") from exc
        except httpx.HTTPError as exc:
            raise JiraAPIError(f"{method} {path} failed: {exc}") from exc

        if not response.content:
            return {}

        try:
            data = response.json()
        except json.JSONDecodeError as exc:
            raise JiraAPIError(
                f"Invalid JSON response: {response.text}",
                status=response.status_code,
                response_text=response.text,
            ) from exc

        if not isinstance(data, dict):
            raise JiraAPIError(f"Unexpected response payload: {data!r}", status=response.status_code)

        return data
