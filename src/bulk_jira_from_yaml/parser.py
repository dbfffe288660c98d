"""Utilities for turning YAML files into structured Jira issue specifications."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class ParseError(ValueError):
    """Raised when an input file is missing, malformed, or violates the schema."""


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)


class ProjectRef(_StrictModel):
    key: str


class IssueTypeRef(_StrictModel):
    name: str


class AssigneeRef(_StrictModel):
    account_id: str = Field(alias="accountId")


class Link(_StrictModel):
    """Directed link from the owning issue to another issue in the same file."""

    links_to: int = Field(alias="linksTo")
    type: str

    @field_validator("type")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Link type cannot be empty")
        return value.strip()


class IssueSpec(_StrictModel):
    """One issue to create, keyed by a file-local ``spec_id``."""

    spec_id: int
    summary: str | None = None
    description: str | None = None
    project: ProjectRef | None = None
    type: IssueTypeRef | None = None
    assignee: AssigneeRef | None = None
    labels: list[str] = Field(default_factory=list)
    links: list[Link] = Field(default_factory=list)


def missing_required_fields(spec: IssueSpec) -> list[str]:
    """Return the create-request fields ``spec`` leaves empty (summary, project.key)."""
    missing = []
    if not (spec.summary and spec.summary.strip()):
        missing.append("summary")
    if spec.project is None or not spec.project.key.strip():
        missing.append("project.key")
    return missing


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"]) or "<entry>"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def parse_yaml_specs(yaml_text: str) -> list[IssueSpec]:
    """Parse YAML text and return a list of :class:`IssueSpec` objects.

    The document must be a sequence of mappings. Each mapping carries a
    ``spec_id``, the issue fields and an optional ``links`` list. Unknown keys
    are rejected so that typos surface before anything reaches Jira.

    Raises:
        ParseError: If the YAML is malformed or an entry violates the schema
    """
    if not yaml_text.strip():
        raise ParseError("YAML input is empty")

    try:
        document: Any = yaml.safe_load(yaml_text)
    except yaml.YAMLError as exc:
        raise ParseError(f"Invalid YAML: {exc}") from exc

    if not isinstance(document, list):
        raise ParseError(
            f"Top level of the issue file must be a sequence, got {type(document).__name__}"
        )

    specs: list[IssueSpec] = []
    errors: list[str] = []
    seen: dict[int, int] = {}

    for position, entry in enumerate(document, start=1):
        if not isinstance(entry, dict):
            errors.append(f"Entry {position}: expected a mapping, got {type(entry).__name__}")
            continue
        try:
            spec = IssueSpec.model_validate(entry)
        except ValidationError as exc:
            errors.append(f"Entry {position}: {_describe_validation_error(exc)}")
            continue

        if spec.spec_id in seen:
            errors.append(
                f"Entry {position}: duplicate spec_id {spec.spec_id} "
                f"(first used by entry {seen[spec.spec_id]})"
            )
            continue
        seen[spec.spec_id] = position

        missing = missing_required_fields(spec)
        if missing:
            errors.append(f"Entry {position} (spec_id {spec.spec_id}): missing required " + ", ".join(missing))
            continue

        specs.append(spec)

    if errors:
        raise ParseError("Issue file errors:\n  " + "\n  ".join(errors))

    if not specs:
        raise ParseError("No issues found in YAML input")

    return specs


def load_issue_specs(path: Path) -> list[IssueSpec]:
    """Read ``path`` and parse it with :func:`parse_yaml_specs`."""
    try:
        yaml_text = Path(path).expanduser().read_text(encoding="utf-8")
    except OSError as exc:
        raise ParseError(f"Cannot read issue file '{path}': {exc}") from exc
    return parse_yaml_specs(yaml_text)
