# template_validator/core/report.py
from __future__ import annotations

"""Report output
----------------
Prints the invalid templates either as plain `ERR` lines or as GitHub Actions
workflow commands (grouped `::error::` annotations), and writes an optional
JSON summary.
"""

import json
from pathlib import Path
from typing import Sequence

import click

from template_validator.core.rules import WorkflowWithErrors


def _escape_command_data(text: str) -> str:
    # Workflow command values must not contain raw newlines or percent signs
    return text.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def failure_summary(results: Sequence[WorkflowWithErrors]) -> str:
    return f"Found {len(results)} workflows with errors"


def render_report(results: Sequence[WorkflowWithErrors], *, github: bool = False) -> None:
    if not results:
        click.echo("Found no workflows with errors!")
        return

    if github:
        click.echo(f"::group::{failure_summary(results)}:")
        for res in results:
            line = f"Errors in {res.id} - {', '.join(res.errors)}"
            click.echo(f"::error::{_escape_command_data(line)}")
        click.echo("::endgroup::")
        click.echo(f"::error::{failure_summary(results)}")
        return

    click.echo(f"{failure_summary(results)}:\n")
    for res in results:
        click.echo(f"ERR {res.id}  ->  {', '.join(res.errors)}")


def write_json_summary(results: Sequence[WorkflowWithErrors], path: Path | str) -> Path:
    outp = Path(path).resolve()
    outp.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "ok": not results,
        "count": len(results),
        "workflows": [res.to_dict() for res in results],
    }
    outp.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return outp


__all__ = ["render_report", "write_json_summary", "failure_summary"]
