"""Build create-issue requests and submit them to Jira in file order."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from enum import Enum
from typing import Any

from .base_client import IssueTrackerClient, JsonDict
from .jira_client import JiraAPIError
from .links import LinkResolutionError, SpecIndex
from .parser import IssueSpec, ParseError, missing_required_fields

DEFAULT_ISSUE_TYPE = "Story"

logger = logging.getLogger(__name__)


class IssueState(str, Enum):
    """Lifecycle of a single issue within a submission run."""

    PENDING = "pending"
    BUILT = "built"
    SUBMITTED = "submitted"
    FAILED = "failed"


def adf_from_text(text: str) -> JsonDict:
    """Wrap plain text in an Atlassian Document Format document."""
    paragraphs = [
        {"type": "paragraph", "content": [{"type": "text", "text": line.strip()}]}
        for line in text.splitlines()
        if line.strip()
    ]
    return {"type": "doc", "version": 1, "content": paragraphs}


def _issue_ref(spec: IssueSpec, created_keys: Mapping[int, str]) -> JsonDict:
    """Reference to another issue of the run, keyed once Jira assigned one."""
    fields: JsonDict = {
        "summary": spec.summary,
        "issuetype": {"name": spec.type.name if spec.type else DEFAULT_ISSUE_TYPE},
    }
    if spec.project:
        fields["project"] = {"key": spec.project.key}

    ref: JsonDict = {"fields": fields}
    if spec.spec_id in created_keys:
        ref["key"] = created_keys[spec.spec_id]
    return ref


def _merge_labels(label: str, extra: Sequence[str]) -> list[str]:
    labels: list[str] = []
    for value in (label, *extra):
        if value and value not in labels:
            labels.append(value)
    return labels


def build_issue_payload(
    spec: IssueSpec,
    index: SpecIndex,
    *,
    label: str,
    created_keys: Mapping[int, str] | None = None,
) -> JsonDict:
    """Return the ``POST /issue`` body for ``spec``.

    Every link is resolved through ``index`` first, so a dangling ``linksTo``
    raises :class:`~bulk_jira_from_yaml.links.LinkResolutionError` before
    anything is sent. A spec without a summary or project key raises
    :class:`~bulk_jira_from_yaml.parser.ParseError` the same way.
    """
    missing = missing_required_fields(spec)
    if missing:
        raise ParseError(f"spec_id {spec.spec_id}: missing required " + ", ".join(missing))
    assert spec.project is not None
    created_keys = created_keys or {}

    fields: JsonDict = {
        "summary": spec.summary,
        "project": {"key": spec.project.key},
        "issuetype": {"name": spec.type.name if spec.type else DEFAULT_ISSUE_TYPE},
        "labels": _merge_labels(label, spec.labels),
    }
    if spec.description and spec.description.strip():
        fields["description"] = adf_from_text(spec.description)
    if spec.assignee:
        fields["assignee"] = {"accountId": spec.assignee.account_id}

    issue_links: list[JsonDict] = []
    for link in spec.links:
        target = index.require(link.links_to, source_id=spec.spec_id)
        issue_links.append(
            {
                "type": {"name": link.type},
                "outwardIssue": _issue_ref(target, created_keys),
                "inwardIssue": _issue_ref(spec, created_keys),
            }
        )
    if issue_links:
        # Sent in fields.issuelinks of the create call, not update.issuelinks.
        fields["issuelinks"] = issue_links

    return {"fields": fields}


class IssueSubmitter:
    """Create every spec in order and stop at the first failure.

    There is no rollback: issues created before a failure stay in Jira and
    are listed in :attr:`created_keys`.
    """

    def __init__(
        self,
        client: IssueTrackerClient,
        specs: Sequence[IssueSpec],
        *,
        label: str,
        on_created: Callable[[IssueSpec, JsonDict], Awaitable[Any]] | None = None,
    ) -> None:
        self.client = client
        self.specs = list(specs)
        self.label = label
        self.on_created = on_created
        self.index = SpecIndex(self.specs)
        self.states: dict[int, IssueState] = {spec.spec_id: IssueState.PENDING for spec in self.specs}
        self.payloads: dict[int, JsonDict] = {}
        self.created_keys: dict[int, str] = {}

    def build(self, spec: IssueSpec) -> JsonDict:
        try:
            payload = build_issue_payload(spec, self.index, label=self.label, created_keys=self.created_keys)
        except (LinkResolutionError, ParseError):
            self.states[spec.spec_id] = IssueState.FAILED
            raise
        self.payloads[spec.spec_id] = payload
        self.states[spec.spec_id] = IssueState.BUILT
        return payload

    def build_all(self) -> list[JsonDict]:
        """Build every payload without contacting Jira."""
        return [self.build(spec) for spec in self.specs]

    async def run(self) -> dict[int, str]:
        """Submit all specs sequentially and return ``spec_id -> issue key``."""
        for position, spec in enumerate(self.specs, 1):
            logger.info("[%d/%d] Creating spec_id %s: %s", position, len(self.specs), spec.spec_id, spec.summary)
            payload = self.build(spec)

            try:
                issue = await self.client.create_issue(payload)
            except JiraAPIError as exc:
                self.states[spec.spec_id] = IssueState.FAILED
                if exc.response_text:
                    logger.error("Response body for spec_id %s: %s", spec.spec_id, exc.response_text)
                logger.debug("Rejected payload for spec_id %s: %s", spec.spec_id, payload)
                raise

            self.states[spec.spec_id] = IssueState.SUBMITTED
            key = str(issue.get("key") or issue.get("id") or "")
            if key:
                self.created_keys[spec.spec_id] = key
            logger.info("Created %s for spec_id %s", key or "<unknown>", spec.spec_id)

            if self.on_created is not None:
                await self.on_created(spec, issue)

        return dict(self.created_keys)


async def verify_projects(client: IssueTrackerClient, specs: Sequence[IssueSpec]) -> list[JsonDict]:
    """Fetch each distinct project referenced by ``specs`` so a bad key fails early."""
    projects: list[JsonDict] = []
    seen: set[str] = set()
    for spec in specs:
        if spec.project is None or spec.project.key in seen:
            continue
        seen.add(spec.project.key)
        project = await client.get_project(spec.project.key)
        logger.debug("Project %s resolved to id %s", spec.project.key, project.get("id"))
        projects.append(project)
    return projects
