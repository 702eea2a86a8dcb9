"""CLI for mobilemaker."""

import json
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from . import __version__
from .builders import AndroidBuilder, BuildOptions
from .builders.android import DEFAULT_TIMEOUT, DEFAULT_WEB_BUILD_CMD
from .config import DEFAULT_APP_CONFIG, ProjectPaths, app_id_problem, load_app_config
from .logging_config import setup_logging


console = Console()
err_console = Console(stderr=True)


def _echo(line: str) -> None:
    console.print(line, markup=False, highlight=False)


def _paths(project_dir: str, config_path: str) -> ProjectPaths:
    paths = ProjectPaths.from_root(project_dir, config_path)
    # ANDROID_HOME and friends may live in the project's .env
    load_dotenv(paths.root / ".env", override=False)
    return paths


@click.group()
@click.version_option(version=__version__, prog_name="mobilemaker")
@click.option(
    "--log-level",
    default="WARNING",
    envvar="MOBILEMAKER_LOG_LEVEL",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Diagnostic log level (stderr)",
)
def cli(log_level: str):
    """mobilemaker – turn app-config.json into a Capacitor Android app."""
    setup_logging(level=log_level)


@cli.command()
@click.option("--project-dir", "-C", default=".", envvar="MOBILEMAKER_PROJECT_DIR",
              type=click.Path(file_okay=False), help="Capacitor project root")
@click.option("--config", "-c", "config_path", default=DEFAULT_APP_CONFIG, envvar="MOBILEMAKER_CONFIG",
              help="App config file (relative to the project root)")
@click.option("--web-build-cmd", default=DEFAULT_WEB_BUILD_CMD, show_default=True,
              help="Command that builds the web assets")
@click.option("--skip-web-build", is_flag=True, help="Don't build the web assets")
@click.option("--dry-run", "-n", is_flag=True, help="Show what would be done")
@click.option("--timeout", default=DEFAULT_TIMEOUT, type=int, envvar="MOBILEMAKER_TIMEOUT",
              show_default=True, help="Per-command timeout in seconds")
@click.option("--quiet", "-q", is_flag=True, help="Only print errors")
@click.option("--verbose", "-v", is_flag=True, help="Show diagnostic logs (DEBUG)")
def build(project_dir: str, config_path: str, web_build_cmd: str, skip_web_build: bool,
          dry_run: bool, timeout: int, quiet: bool, verbose: bool):
    """Regenerate the Android project and sync web assets."""
    if verbose:
        setup_logging(level="DEBUG")
    paths = _paths(project_dir, config_path)
    options = BuildOptions(
        web_build_cmd=web_build_cmd,
        skip_web_build=skip_web_build,
        dry_run=dry_run,
        timeout=timeout,
    )

    if not quiet:
        console.print(f"[bold]Starting mobile build in {paths.root}[/bold]")
    try:
        result = AndroidBuilder().build(paths, options, on_log=None if quiet else _echo)
    except Exception as e:
        err_console.print("[red]Build failed![/red]")
        err_console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if not quiet:
        console.print(f"[green]Done in {result.elapsed_seconds:.1f}s[/green]")


@cli.command()
@click.option("--project-dir", "-C", default=".", envvar="MOBILEMAKER_PROJECT_DIR",
              type=click.Path(file_okay=False), help="Capacitor project root")
@click.option("--config", "-c", "config_path", default=DEFAULT_APP_CONFIG, envvar="MOBILEMAKER_CONFIG",
              help="App config file (relative to the project root)")
def permissions(project_dir: str, config_path: str):
    """Inject configured permissions into an existing AndroidManifest.xml."""
    paths = _paths(project_dir, config_path)
    try:
        app = load_app_config(paths.app_config)
        AndroidBuilder().inject_permissions(paths, app, on_log=_echo)
    except Exception as e:
        err_console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@cli.command()
@click.argument("config_path", default=DEFAULT_APP_CONFIG, type=click.Path())
def validate(config_path: str):
    """Validate an app configuration file."""
    try:
        app = load_app_config(config_path)
    except Exception as e:
        err_console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    table = Table(title=app.app_name, show_header=False)
    table.add_row("appId", app.app_id)
    table.add_row("webUrl", app.web_url)
    table.add_row("backgroundColor", app.background_color or "-")
    table.add_row("plugins", ", ".join(app.enabled_plugins()) or "-")
    table.add_row("permissions", ", ".join(app.enabled_permissions()) or "-")
    console.print(table)

    problem = app_id_problem(app.app_id)
    if problem:
        console.print(f"[yellow]Warning: {problem}[/yellow]")
    console.print("[green]Config is valid[/green]")


@cli.command()
@click.option("--output", "-o", default=DEFAULT_APP_CONFIG, help="Output file")
@click.option("--app-id", default="com.example.app", help="Android application id")
@click.option("--app-name", default="My App", help="Display name")
@click.option("--web-url", default="https://example.com", help="URL loaded by the app")
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing file")
def init(output: str, app_id: str, app_name: str, web_url: str, force: bool):
    """Create a starter app-config.json."""
    out = Path(output)
    if out.exists() and not force:
        err_console.print(f"[red]Error: {out} already exists (use --force)[/red]")
        sys.exit(1)

    config = {
        "appId": app_id,
        "appName": app_name,
        "webUrl": web_url,
        "backgroundColor": "#ffffff",
        "plugins": {
            "@capacitor/splash-screen": True,
        },
        "permissions": {
            "android.permission.INTERNET": True,
            "android.permission.CAMERA": False,
        },
    }
    out.write_text(json.dumps(config, indent=2) + "\n", encoding="utf-8")
    console.print(f"[green]Created {out}[/green]")


def main():
    cli()


if __name__ == "__main__":
    main()
