"""Bulk Jira issue creation from YAML files."""

from .links import LinkResolutionError, SpecIndex, resolve_spec
from .parser import IssueSpec, Link, ParseError, load_issue_specs, parse_yaml_specs
from .settings import ConfigError, JiraConfig, load_config

__all__ = [
    "ConfigError",
    "IssueSpec",
    "JiraConfig",
    "Link",
    "LinkResolutionError",
    "ParseError",
    "SpecIndex",
    "load_config",
    "load_issue_specs",
    "parse_yaml_specs",
    "resolve_spec",
]
