"""Command-line interface for bulk-jira-from-yaml."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import anyio
import typer
import yaml
from rich import print_json
from rich.console import Console
from rich.logging import RichHandler

from .base_client import JsonDict
from .jira_client import JiraAPIError, JiraClient
from .links import LinkResolutionError, SpecIndex
from .parser import IssueSpec, ParseError, load_issue_specs
from .settings import DEFAULT_LABEL, ConfigError, load_config
from .submitter import IssueSubmitter, build_issue_payload, verify_projects

app = typer.Typer(help="Create bulk Jira tickets from a YAML file.")

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    if not verbose:
        # httpx logs every request at INFO.
        logging.getLogger("httpx").setLevel(logging.WARNING)


def _print_yaml(document: Any) -> None:
    typer.echo("---")
    typer.echo(yaml.safe_dump(document, sort_keys=False, allow_unicode=True).rstrip())


@app.callback()
def main() -> None:
    """Create bulk Jira tickets from a YAML file."""


@app.command()
def create(
    input_file: Path = typer.Option(
        ...,
        "--input",
        "-i",
        help="YAML-formatted representation of Jira cards to be created in bulk.",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        dir_okay=False,
        help="Config file (default is ~/.config/bulk-jira-from-yaml/bulk-jira-from-yaml.yaml).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
    dry_run: bool = typer.Option(
        False,
        help="Build and print the create requests without contacting Jira.",
    ),
) -> None:
    """Create the issues described in a YAML file, in file order."""

    _configure_logging(verbose)

    try:
        specs = load_issue_specs(input_file)
    except ParseError as exc:
        typer.secho(f"Input error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(f"Loaded {len(specs)} issue(s) from {input_file}")

    if dry_run:
        index = SpecIndex(specs)
        try:
            payloads = [build_issue_payload(spec, index, label=DEFAULT_LABEL) for spec in specs]
        except (LinkResolutionError, ParseError) as exc:
            typer.secho(f"Build error: {exc}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1) from exc
        for payload in payloads:
            _print_yaml(payload)
        raise typer.Exit(code=0)

    try:
        config = load_config(config_file)
    except ConfigError as exc:
        typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    submitter: IssueSubmitter | None = None

    async def _run_batch() -> dict[int, str]:
        nonlocal submitter

        async with JiraClient(config) as client:
            user = await client.whoami()
            logger.info(
                "Authenticated as %s",
                user.get("displayName") or user.get("emailAddress") or user.get("accountId"),
            )
            if verbose:
                print_json(data=user)

            await verify_projects(client, specs)

            async def _show_created(spec: IssueSpec, issue: JsonDict) -> None:
                if issue.get("key"):
                    _print_yaml(await client.get_issue(issue["key"]))

            submitter = IssueSubmitter(
                client,
                specs,
                label=config.label,
                on_created=_show_created if verbose else None,
            )
            return await submitter.run()

    try:
        created = anyio.run(_run_batch)
    except (LinkResolutionError, ParseError, JiraAPIError) as exc:
        typer.secho(f"\nBatch creation stopped due to error: {exc}", fg=typer.colors.RED, err=True)
        if submitter is not None and submitter.created_keys:
            typer.echo("Issues created before the failure:", err=True)
            for spec_id, key in submitter.created_keys.items():
                typer.echo(f"  • spec_id {spec_id}: {key}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(f"\n{'=' * 60}")
    typer.echo("Batch creation complete!")
    typer.echo(f"  Successfully created: {len(created)}")
    for spec_id, key in created.items():
        typer.secho(f"  • spec_id {spec_id}: {key}", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
