"""Command line host for the quality gates build step.

``qualitygates check`` runs the pre-build and perform phases for one job
and exits 0 when the build may continue, 1 otherwise. Build-log lines go
to stdout; diagnostic JSON logs go to stderr.
"""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from src.quality_gates import __version__
from src.quality_gates.config import build_job_config, load_global_config, load_job_config
from src.quality_gates.constants import SERVICE_NAME
from src.quality_gates.controller import GateController
from src.quality_gates.evaluator import StatusEvaluator
from src.quality_gates.exceptions import ConfigurationError, InstanceNotFoundError
from src.quality_gates.listener import StreamListener
from src.quality_gates.models import BuildContext, BuildResult
from src.shared.config import GateSettings
from src.shared.logging import setup_logging

app = typer.Typer(
    name="qualitygates",
    help="Gate a build on its SonarQube quality gate status.",
    no_args_is_help=True,
)

_err_console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"qualitygates {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Quality Gates build step."""


@app.command()
def check(
    job_file: Optional[Path] = typer.Option(
        None, "--job", "-j", help="YAML file with the job's gate settings."
    ),
    project_key: Optional[str] = typer.Option(
        None, "--project-key", "-p", help="SonarQube project key ($VAR references allowed)."
    ),
    instance: str = typer.Option(
        "", "--instance", "-i", help="Registered instance name; empty uses the default."
    ),
    ignore_warnings: bool = typer.Option(
        False, "--ignore-warnings", help="Record WARN gates as success instead of unstable."
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Instance registry YAML (defaults to $QG_GLOBAL_CONFIG)."
    ),
    build_id: str = typer.Option("", "--build-id", help="Identifier of the running build."),
) -> None:
    """Check the quality gate of a project and fail the build on FAIL."""
    settings = GateSettings()
    setup_logging(SERVICE_NAME, settings.log_level)
    build = BuildContext(build_id=build_id or uuid.uuid4().hex[:12], env=dict(os.environ))

    try:
        if job_file is not None:
            job_config = load_job_config(job_file, build.env)
        else:
            job_config = build_job_config(
                {
                    "project_key": project_key or "",
                    "sonar_instance_name": instance,
                    "ignore_warnings": ignore_warnings,
                },
                build.env,
            )
        global_config = load_global_config(config or settings.global_config_path)
    except ConfigurationError as exc:
        _err_console.print(f"[bold red]Configuration error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    listener = StreamListener()
    controller = GateController(
        job_config, global_config, evaluator=StatusEvaluator(timeout=settings.http_timeout)
    )

    if not controller.prebuild(build, listener):
        raise typer.Exit(code=1)
    passed = controller.perform(build, listener)
    if controller.outcome is not None and controller.outcome.build_result == BuildResult.UNSTABLE:
        _err_console.print("[yellow]Quality gate is WARN: build marked unstable[/yellow]")
    if not passed:
        raise typer.Exit(code=1)


@app.command()
def instances(
    name: Optional[str] = typer.Argument(None, help="Show only this instance."),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Instance registry YAML (defaults to $QG_GLOBAL_CONFIG)."
    ),
) -> None:
    """List registered SonarQube instances, or show one by name."""
    settings = GateSettings()
    try:
        global_config = load_global_config(config or settings.global_config_path)
        if name is not None:
            shown = (global_config.require_instance(name),)
        else:
            shown = global_config.instances
    except ConfigurationError as exc:
        _err_console.print(f"[bold red]Configuration error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)
    except InstanceNotFoundError as exc:
        _err_console.print(f"[bold red]Configuration error:[/bold red] {escape(str(exc))}")
        registered = ", ".join(global_config.names()) or "none"
        _err_console.print(f"Registered instances: {escape(registered)}")
        raise typer.Exit(code=1)

    console = Console()
    if not shown:
        console.print("[dim]No SonarQube instances registered.[/dim]")
        return

    table = Table(title="SonarQube Instances")
    table.add_column("Name", style="cyan")
    table.add_column("URL")
    table.add_column("Auth")
    table.add_column("Max Wait (ms)", justify="right")
    table.add_column("Default", justify="center")
    default = global_config.default_instance
    for inst in shown:
        if inst.token:
            auth = "token"
        elif inst.username:
            auth = f"user {inst.username}"
        else:
            auth = "anonymous"
        table.add_row(
            inst.name,
            inst.url,
            auth,
            str(inst.max_wait_time),
            "*" if inst is default else "",
        )
    console.print(table)


if __name__ == "__main__":
    app()
