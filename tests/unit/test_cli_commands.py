import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest
from click.testing import CliRunner
from rich.logging import RichHandler

from template_validator.cli import cli
from template_validator.utils import logger
from template_validator.utils.config import get_settings


@pytest.fixture
def corpus(tmp_path: Path, write_template, valid_properties):
    """Two mapped folders; returns (settings_file, folders)."""
    security = tmp_path / "security"
    automation = tmp_path / "automation"
    write_template(security, "scan", valid_properties)
    write_template(automation, "deploy", {**valid_properties, "name": "Deploy", "categories": ["automation"]})

    settings = tmp_path / "settings.json"
    settings.write_text(
        json.dumps(
            {
                "folders": [str(security), str(automation)],
                "allowed_categories": ["Security", "Automation"],
                "directory_category_map": [
                    {"name": str(security), "category": "Security"},
                    {"name": str(automation), "category": "Automation"},
                ],
            }
        ),
        encoding="utf-8",
    )
    return settings, (security, automation)


def invoke_check(settings: Path, icons_dir: Path, *extra: str):
    runner = CliRunner()
    return runner.invoke(
        cli,
        ["check", "--settings-file", str(settings), "--icons-dir", str(icons_dir), "--no-parallel", *extra],
    )


def test_check_passes_on_valid_corpus(corpus, icons_dir):
    settings, _ = corpus
    result = invoke_check(settings, icons_dir, "--no-github")
    assert result.exit_code == 0
    assert "Found no workflows with errors!" in result.stdout


def test_check_fails_and_lists_errors(corpus, icons_dir, write_template, valid_properties):
    settings, (security, automation) = corpus
    bad = write_template(security, "audit", {**valid_properties, "name": "Deploy", "iconName": "rocket"})

    result = invoke_check(settings, icons_dir, "--no-github")
    assert result.exit_code == 1
    assert "Found 2 workflows with errors:" in result.stdout
    icon_line = f"ERR {bad}  ->  No icon named rocket found"
    dup_line = f'ERR {automation / "deploy.yml"}  ->  Workflow template name "Deploy" already exists'
    # security/ is scanned first, so its "Deploy" is not flagged
    assert icon_line in result.stdout
    assert dup_line in result.stdout
    assert result.stdout.index(icon_line) < result.stdout.index(dup_line)


def test_check_github_annotations(corpus, icons_dir, write_template, valid_properties):
    settings, (security, _) = corpus
    write_template(security, "audit", {**valid_properties, "name": "Audit", "categories": None})

    result = invoke_check(settings, icons_dir, "--github")
    assert result.exit_code == 1
    lines = [line for line in result.stdout.splitlines() if line.startswith("::")]
    assert lines[0] == "::group::Found 1 workflows with errors:"
    assert lines[1].startswith("::error::Errors in ")
    assert lines[1].endswith(" - Workflow categories cannot be null or empty")
    assert lines[2] == "::endgroup::"
    assert lines[3] == "::error::Found 1 workflows with errors"


def test_check_writes_json_summary(corpus, icons_dir, write_template, valid_properties, tmp_path):
    settings, (security, _) = corpus
    write_template(security, "zz-dup", valid_properties)
    out = tmp_path / "out" / "summary.json"

    result = invoke_check(settings, icons_dir, "--no-github", "--json-out", str(out))
    assert result.exit_code == 1
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["ok"] is False
    assert data["count"] == 1
    assert data["workflows"][0]["name"] == "Scan"
    assert data["workflows"][0]["errors"] == ['Workflow template name "Scan" already exists']


def test_check_missing_folder_is_configuration_error(corpus, icons_dir, tmp_path):
    settings, _ = corpus
    cfg = json.loads(settings.read_text(encoding="utf-8"))
    cfg["folders"].append(str(tmp_path / "gone"))
    settings.write_text(json.dumps(cfg), encoding="utf-8")

    result = invoke_check(settings, icons_dir, "--no-github")
    assert result.exit_code == 2
    assert "Configuration error: Cannot list workflow folder" in result.output


def test_check_missing_settings_file(tmp_path, icons_dir):
    result = invoke_check(tmp_path / "missing.json", icons_dir, "--github")
    assert result.exit_code == 2
    assert "::error::Configuration error: Cannot read settings file" in result.stdout


def test_list_command(corpus, tmp_path):
    settings, (security, _) = corpus
    (security / "orphan.yml").write_text("on: push\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(cli, ["list", "--settings-file", str(settings)])
    assert result.exit_code == 0
    assert "Found 3 workflow template(s)" in result.stdout
    assert result.stdout.count("[missing properties]") == 1


def test_config_command(corpus):
    settings, (security, _) = corpus
    runner = CliRunner()
    result = runner.invoke(cli, ["config", "--settings-file", str(settings)])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["EXEMPT_FILE_SUFFIX"] == "blank.yml"
    assert data["checker"]["folders"][0] == str(security)


@pytest.fixture
def fresh_logging(monkeypatch):
    """Let the next get_logger() call configure logging from the current env."""
    ours = (RichHandler, RotatingFileHandler)
    root = logging.getLogger()
    previous = [h for h in root.handlers if isinstance(h, ours)]
    saved_level = root.level
    monkeypatch.setattr(logger, "_configured", False)
    get_settings.cache_clear()
    yield
    for h in [h for h in root.handlers if isinstance(h, ours)]:
        root.removeHandler(h)
        if h not in previous:
            h.close()
    for h in previous:
        root.addHandler(h)
    root.setLevel(saved_level)
    get_settings.cache_clear()


def test_check_writes_json_log_file(corpus, icons_dir, tmp_path, monkeypatch, fresh_logging):
    log_file = tmp_path / "logs" / "run.log"
    monkeypatch.setenv("LOG_TO_FILE", "true")
    monkeypatch.setenv("LOG_FILE", str(log_file))
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    settings, _ = corpus

    result = invoke_check(settings, icons_dir, "--no-github")
    assert result.exit_code == 0

    records = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    checking = [r for r in records if r["msg"].startswith("Checking 2 workflow template(s)")]
    assert len(checking) == 1
    assert checking[0]["level"] == "INFO"
    assert checking[0]["logger"] == "template_validator.core.scanner"
    assert "run_id" in checking[0]
