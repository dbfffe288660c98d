from pathlib import Path

import pytest
from pydantic import ValidationError

from bulk_jira_from_yaml.parser import IssueSpec, ParseError, load_issue_specs, parse_yaml_specs

SAMPLE = """\
- spec_id: 1
  summary: Revoke VPN access
  description: |
    Remove the departing user from the VPN group.
    Confirm with security.
  project:
    key: OPS
  type:
    name: Task
  links:
    - linksTo: 2
      type: Blocks
- spec_id: 2
  summary: Archive mailbox
  project:
    key: OPS
- spec_id: 3
  summary: Collect laptop
  project:
    key: IT
  assignee:
    accountId: 5b10ac8d82e05b22cc7d4ef5
  labels: [hardware]
"""


def test_parse_preserves_order_and_length() -> None:
    specs = parse_yaml_specs(SAMPLE)

    assert [spec.spec_id for spec in specs] == [1, 2, 3]
    assert specs[0].summary == "Revoke VPN access"
    assert specs[0].project is not None and specs[0].project.key == "OPS"
    assert specs[0].type is not None and specs[0].type.name == "Task"
    assert specs[0].links[0].links_to == 2
    assert specs[0].links[0].type == "Blocks"


def test_optional_fields_default_to_empty() -> None:
    spec = parse_yaml_specs(SAMPLE)[1]

    assert spec.type is None
    assert spec.description is None
    assert spec.assignee is None
    assert spec.links == []
    assert spec.labels == []


def test_assignee_and_labels() -> None:
    spec = parse_yaml_specs(SAMPLE)[2]

    assert spec.assignee is not None
    assert spec.assignee.account_id == "5b10ac8d82e05b22cc7d4ef5"
    assert spec.labels == ["hardware"]


def test_unknown_field_is_rejected() -> None:
    text = "- spec_id: 1\n  sumary: typo\n"

    with pytest.raises(ParseError) as excinfo:
        parse_yaml_specs(text)

    assert "Entry 1" in str(excinfo.value)
    assert "sumary" in str(excinfo.value)


def test_unknown_link_field_is_rejected() -> None:
    text = "- spec_id: 1\n  links:\n    - linksTo: 2\n      type: Blocks\n      note: nope\n"

    with pytest.raises(ParseError, match="note"):
        parse_yaml_specs(text)


def test_missing_spec_id_is_rejected() -> None:
    with pytest.raises(ParseError, match="spec_id"):
        parse_yaml_specs("- summary: No identifier\n")


def test_duplicate_spec_id_is_rejected() -> None:
    text = "- spec_id: 4\n  summary: A\n  project: {key: OPS}\n- spec_id: 4\n  summary: B\n  project: {key: OPS}\n"

    with pytest.raises(ParseError, match="duplicate spec_id 4"):
        parse_yaml_specs(text)


@pytest.mark.parametrize(
    "text",
    [
        "",
        "summary: not a list\n",
        "- just a string\n",
        "[]\n",
        "- spec_id: [unclosed\n",
    ],
)
def test_malformed_documents_raise_parse_error(text: str) -> None:
    with pytest.raises(ParseError):
        parse_yaml_specs(text)


def test_specs_are_read_only() -> None:
    spec = parse_yaml_specs(SAMPLE)[0]

    with pytest.raises(ValidationError):
        spec.summary = "changed"  # type: ignore[misc]


def test_load_from_file(tmp_path: Path) -> None:
    issue_file = tmp_path / "issues.yaml"
    issue_file.write_text(SAMPLE, encoding="utf-8")

    specs = load_issue_specs(issue_file)

    assert len(specs) == 3
    assert all(isinstance(spec, IssueSpec) for spec in specs)


def test_load_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ParseError, match="Cannot read issue file"):
        load_issue_specs(tmp_path / "missing.yaml")


@pytest.mark.parametrize(
    ("text", "missing"),
    [
        ("- spec_id: 1\n  project: {key: OPS}\n", "summary"),
        ("- spec_id: 1\n  summary: ''\n  project: {key: OPS}\n", "summary"),
        ("- spec_id: 1\n  summary: No project\n", "project.key"),
        ("- spec_id: 1\n  summary: Blank key\n  project: {key: ''}\n", "project.key"),
    ],
)
def test_missing_required_create_fields_are_rejected(text: str, missing: str) -> None:
    with pytest.raises(ParseError) as excinfo:
        parse_yaml_specs(text)

    assert "Entry 1 (spec_id 1)" in str(excinfo.value)
    assert missing in str(excinfo.value)
