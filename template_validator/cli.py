# template_validator/cli.py
from __future__ import annotations

"""Command-line interface
------------------------
`check` runs the full template gate (CI entry point), `list` shows what would
be checked, `config` prints the effective settings.
"""

import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import NoReturn, Optional

import click

from template_validator.core.report import render_report, write_json_summary
from template_validator.core.scanner import discover_workflows, scan_workflows
from template_validator.utils.config import (
    CheckerConfig,
    ConfigurationError,
    get_settings,
    load_checker_config,
    settings_file_or_default,
)
from template_validator.utils.logger import bind, get_logger, set_log_level, unbind


# -------- helpers --------


def _echo_json(obj) -> None:
    click.echo(json.dumps(obj, indent=2, ensure_ascii=False))


def _fail(message: str, *, github: bool, code: int) -> NoReturn:
    if github:
        click.echo(f"::error::{message}")
    else:
        click.echo(message, err=True)
    sys.exit(code)


def _warn_about_config(config: CheckerConfig) -> None:
    log = get_logger(__name__)
    for folder in config.unmapped_folders():
        log.warning(f"Folder {folder} has no directory_category_map entry")
    for category in config.unknown_categories():
        log.warning(f"Mapped category {category!r} is not in allowed_categories")


settings_file_option = click.option(
    "--settings-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Folder/category settings JSON (defaults to SETTINGS_FILE)",
)


# -------- CLI root --------


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Override LOG_LEVEL from settings",
)
@click.option("--color/--no-color", default=None, help="Force-enable/disable colorized log output")
@click.version_option(package_name="template-validator")
def cli(log_level: Optional[str], color: Optional[bool]):
    settings = get_settings()
    if color is not None:
        settings.COLORIZED_OUTPUT = color
    if log_level:
        set_log_level(log_level.upper())


# -------- commands --------


@cli.command("check")
@settings_file_option
@click.option("--icons-dir", type=click.Path(file_okay=False), default=None, help="Override ICONS_DIR")
@click.option("--parallel/--no-parallel", default=None, help="Override PARALLEL_EXECUTION from settings")
@click.option("--max-workers", type=click.IntRange(min=1), default=None, help="Override MAX_WORKERS from settings")
@click.option("--json-out", type=click.Path(dir_okay=False), default=None, help="Write a JSON summary to this file")
@click.option(
    "--github/--no-github",
    default=None,
    help="Emit GitHub Actions workflow commands (defaults to GITHUB_ACTIONS)",
)
def cmd_check(
    settings_file: Optional[str],
    icons_dir: Optional[str],
    parallel: Optional[bool],
    max_workers: Optional[int],
    json_out: Optional[str],
    github: Optional[bool],
):
    """Validate every workflow template and its properties; exit 1 if any are invalid."""
    settings = get_settings()
    log = get_logger(__name__)
    use_github = settings.GITHUB_ACTIONS if github is None else github

    bind(run_id=datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ"))
    started = datetime.now(timezone.utc)
    try:
        config = load_checker_config(settings_file_or_default(settings_file))
        _warn_about_config(config)
        results = scan_workflows(
            config.folders,
            config.allowed_categories,
            config.directory_category_map,
            icons_dir=Path(icons_dir) if icons_dir else settings.ICONS_DIR,
            exempt_suffix=settings.EXEMPT_FILE_SUFFIX,
            properties_subdir=settings.PROPERTIES_SUBDIR,
            parallel=settings.PARALLEL_EXECUTION if parallel is None else parallel,
            max_workers=settings.MAX_WORKERS if max_workers is None else max_workers,
        )
    except ConfigurationError as e:
        _fail(f"Configuration error: {e}", github=use_github, code=2)
    except Exception as e:
        log.exception("Unhandled error while checking workflows")
        _fail(f"Unhandled error while checking workflows: {e}", github=use_github, code=1)
    finally:
        unbind("run_id")

    elapsed = (datetime.now(timezone.utc) - started).total_seconds()
    log.info(f"Check finished in {elapsed:.2f}s; {len(results)} template(s) with errors")

    render_report(results, github=use_github)
    if json_out:
        outp = write_json_summary(results, json_out)
        click.echo(f"Wrote summary: {outp}")

    sys.exit(0 if not results else 1)


@cli.command("list")
@settings_file_option
def cmd_list(settings_file: Optional[str]):
    """List the definition files that `check` would validate."""
    settings = get_settings()
    try:
        config = load_checker_config(settings_file_or_default(settings_file))
        items = discover_workflows(config.folders, settings.PROPERTIES_SUBDIR)
    except ConfigurationError as e:
        _fail(f"Configuration error: {e}", github=False, code=2)

    if not items:
        click.echo("No workflow templates found.")
        return

    click.echo(f"Found {len(items)} workflow template(s):\n")
    for item in items:
        marker = "" if item.properties_path.exists() else "  [missing properties]"
        click.echo(f" - {item.id}  <- {item.properties_path}{marker}")


@cli.command("config")
@settings_file_option
def cmd_config(settings_file: Optional[str]):
    """Print effective settings (after .env & env vars) and the loaded settings file."""
    data = get_settings().model_dump(mode="json")
    try:
        data["checker"] = load_checker_config(settings_file_or_default(settings_file)).model_dump()
    except ConfigurationError as e:
        data["checker"] = {"error": str(e)}
    _echo_json(data)


def main() -> None:
    cli(prog_name="template-validator")


if __name__ == "__main__":
    main()
