"""Abstract base interface for issue tracker clients."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

JsonDict = dict[str, Any]


class IssueTrackerClient(ABC):
    """Abstract base class for the remote calls a submission run needs."""

    @abstractmethod
    async def __aenter__(self) -> "IssueTrackerClient":
        """Enter async context manager."""
        ...

    @abstractmethod
    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        """Exit async context manager."""
        ...

    @abstractmethod
    async def whoami(self) -> JsonDict:
        """Return the user record for the authenticated credentials."""
        ...

    @abstractmethod
    async def get_project(self, project_key: str) -> JsonDict:
        """Return the project record for ``project_key``.

        Raises:
            Exception: If the project does not exist or is not visible
        """
        ...

    @abstractmethod
    async def get_issue(self, issue_id: str) -> JsonDict:
        """Return the issue identified by id or key."""
        ...

    @abstractmethod
    async def create_issue(self, payload: JsonDict) -> JsonDict:
        """Create an issue from a fully built request payload.

        Args:
            payload: Request body with a ``fields`` mapping

        Returns:
            Created issue reference (``id``, ``key``, ``self``)

        Raises:
            Exception: If issue creation fails
        """
        ...
