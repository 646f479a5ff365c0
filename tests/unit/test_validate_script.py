import json
import runpy
from pathlib import Path

import pytest

from template_validator.utils.config import get_settings


SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "validate_templates.py"


@pytest.fixture
def script_main(monkeypatch, tmp_path: Path):
    """Run the script from tmp_path so ICONS_DIR (./icons) resolves there."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("ICONS_DIR", raising=False)
    get_settings.cache_clear()
    yield runpy.run_path(str(SCRIPT))["main"]
    get_settings.cache_clear()


def write_settings(tmp_path: Path, folder: Path) -> Path:
    p = tmp_path / "settings.json"
    p.write_text(
        json.dumps(
            {
                "folders": [str(folder)],
                "allowed_categories": ["Security"],
                "directory_category_map": [{"name": str(folder), "category": "Security"}],
            }
        ),
        encoding="utf-8",
    )
    return p


def run_script(main, monkeypatch, *args: str) -> int:
    monkeypatch.setattr("sys.argv", ["validate_templates.py", *args])
    with pytest.raises(SystemExit) as exc:
        main()
    return exc.value.code


def test_script_runs_check(tmp_path, monkeypatch, write_template, icons_dir, valid_properties, script_main):
    folder = tmp_path / "security"
    write_template(folder, "scan", valid_properties)
    assert run_script(script_main, monkeypatch, str(write_settings(tmp_path, folder))) == 0

    write_template(folder, "audit", {**valid_properties, "iconName": "rocket"})
    assert run_script(script_main, monkeypatch, str(write_settings(tmp_path, folder))) == 1


def test_script_unhandled_error(tmp_path, monkeypatch, write_template, icons_dir, valid_properties, script_main, capsys):
    folder = tmp_path / "security"
    write_template(folder, "scan", valid_properties)

    def boom(*args, **kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr("template_validator.cli.scan_workflows", boom)
    monkeypatch.setenv("GITHUB_ACTIONS", "false")
    get_settings.cache_clear()

    assert run_script(script_main, monkeypatch, str(write_settings(tmp_path, folder))) == 1
    assert "Unhandled error while checking workflows: disk on fire" in capsys.readouterr().err


def test_script_configuration_error(tmp_path, monkeypatch, script_main):
    assert run_script(script_main, monkeypatch, str(tmp_path / "missing.json")) == 2
