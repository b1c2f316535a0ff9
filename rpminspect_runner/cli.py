"""Thin CLI wrapper for rpminspect_runner.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.

The CI calls ``rpminspect-runner run TASK_ID PREVIOUS_TAG TEST_NAME`` once
per inspection. Exit codes are translated for the CI by main().
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from rpminspect_runner import __version__
from rpminspect_runner.config import Settings, get_settings, print_settings_json
from rpminspect_runner.exitcodes import exit_code_guard, install_signal_handlers

app = typer.Typer(
    name="rpminspect-runner",
    help="rpminspect runner - run rpminspect once per CI task, report per inspection",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    """Send log records to stderr, keeping stdout for the report."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"rpminspect-runner version {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """rpminspect runner - run rpminspect once per CI task, report per inspection."""


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        console.print(print_settings_json(settings))
        return

    console.print("[bold]Effective Configuration:[/bold]")
    console.print()
    console.print("[bold]rpminspect:[/bold]")
    console.print(f"  Binary:              {settings.rpminspect_bin}")
    console.print(f"  Config file:         {settings.config_path}")
    console.print(f"  Profile:             {settings.profile_name or '(none)'}")
    console.print(f"  Report splitter:     {settings.splitter_bin}")
    console.print(f"  Local config:        {settings.local_config_bin}")
    console.print()
    console.print("[bold]Task:[/bold]")
    console.print(f"  Working directory:   {settings.workdir}")
    console.print(f"  Architectures:       {settings.arches or '(all)'}")
    release_display = settings.default_release_string or "(none)"
    console.print(f"  Release override:    {release_display}")
    console.print(f"  Module build:        {settings.is_module}")
    console.print(f"  Inspections:         {settings.tests or '(all)'}")
    console.print()
    console.print("[bold]Build systems:[/bold]")
    console.print(f"  Koji binary:         {settings.koji_bin}")
    console.print(f"  MBS API URL:         {settings.mbs_api_url or '(unset)'}")
    console.print()
    console.print("[bold]Operational:[/bold]")
    console.print(f"  Log level:           {settings.log_level}")
    console.print(f"  Request timeout:     {settings.request_timeout}")
    console.print(f"  Request attempts:    {settings.max_retries}")
    console.print(f"  Engine timeout:      {settings.engine_timeout}")
    console.print(f"  Lock timeout:        {settings.lock_timeout}")


def _apply_overrides(settings: Settings, **overrides: object) -> Settings:
    update = {key: value for key, value in overrides.items() if value is not None}
    if not update:
        return settings
    return settings.model_copy(update=update)


@app.command()
def run(
    task_id: Annotated[str, typer.Argument(help="Koji task ID or MBS module build ID")],
    previous_tag: Annotated[
        str, typer.Argument(help="Koji tag with builds to compare against")
    ],
    test_name: Annotated[str, typer.Argument(help="Inspection to report")],
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="rpminspect config file"),
    ] = None,
    profile: Annotated[
        str | None,
        typer.Option("--profile", "-p", help="rpminspect profile"),
    ] = None,
    workdir: Annotated[
        Path | None,
        typer.Option("--workdir", "-w", help="Task working directory"),
    ] = None,
    arches: Annotated[
        str | None,
        typer.Option("--arches", help="Comma-separated architectures"),
    ] = None,
    release: Annotated[
        str | None,
        typer.Option("--release", help="Release string for builds without one"),
    ] = None,
    module: Annotated[
        bool | None,
        typer.Option("--module/--no-module", help="TASK_ID is an MBS module build"),
    ] = None,
    tests: Annotated[
        str | None,
        typer.Option("--tests", help="Comma-separated inspections to run"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log debug information"),
    ] = False,
) -> None:
    """Run inspections once per task and report TEST_NAME.

    Takes the same positional arguments as rpminspect_runner.sh, so a CI
    step calling `rpminspect_runner.sh TASK_ID PREVIOUS_TAG TEST_NAME`
    becomes `rpminspect-runner run TASK_ID PREVIOUS_TAG TEST_NAME`.
    """
    import httpx

    from rpminspect_runner.buildsys.koji import KojiClient
    from rpminspect_runner.buildsys.mbs import ModuleBuildService
    from rpminspect_runner.cache.store import TaskCacheStore
    from rpminspect_runner.errors import RunnerError
    from rpminspect_runner.inspections.engine import (
        RpminspectEngine,
        installed_version,
    )
    from rpminspect_runner.inspections.localconfig import LocalConfigFetcher
    from rpminspect_runner.inspections.report import ReportHeader, report_inspection
    from rpminspect_runner.inspections.service import build_context, ensure_results
    from rpminspect_runner.inspections.splitter import ReportSplitter

    settings = _apply_overrides(
        get_settings(),
        config_path=config_path,
        profile_name=profile,
        workdir=workdir,
        arches=arches,
        default_release_string=release,
        is_module=module,
        tests=tests,
    )
    configure_logging("DEBUG" if verbose else settings.log_level)

    context = build_context(task_id, previous_tag, settings)
    store = TaskCacheStore.from_settings(settings)
    koji = KojiClient.from_settings(settings)
    engine = RpminspectEngine.from_settings(settings)
    splitter = ReportSplitter(settings.splitter_bin)
    local_config = LocalConfigFetcher(settings.local_config_bin)

    try:
        with httpx.Client() as client:
            mbs = None
            if context.is_module and not store.is_complete():
                mbs = ModuleBuildService.from_settings(settings, client=client)
            ensure_results(
                context,
                settings,
                store,
                koji,
                engine,
                splitter,
                mbs=mbs,
                local_config=local_config,
            )

        after_build, before_build = store.read_lineage()
        header = ReportHeader(
            rpminspect_version=installed_version(settings.package_name),
            data_version=installed_version(settings.data_package_name),
            profile=context.profile,
            after_build=after_build,
            before_build=before_build,
            previous_tag=context.previous_tag,
            build_system=koji.name,
        )
        outcome = report_inspection(test_name, store, engine, settings, header, console)
    except RunnerError as e:
        err_console.print(f"[red]Error ({e.code}): {escape(str(e))}[/red]")
        raise typer.Exit(code=e.exit_code) from None

    raise typer.Exit(code=outcome.exit_code)


def main() -> None:
    """Console script entry point."""
    install_signal_handlers()
    with exit_code_guard():
        app()


if __name__ == "__main__":
    main()
