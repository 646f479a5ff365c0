import json
import textwrap
from pathlib import Path

import pytest


DEFINITION = textwrap.dedent(
    """
    name: CI
    on:
      push:
        branches: [ $default-branch ]
    jobs:
      build:
        runs-on: ubuntu-latest
        steps:
          - uses: actions/checkout@v4
    """
)


def _write_template(folder: Path, stem: str, properties, *, suffix: str = ".yml", definition: str = DEFINITION) -> Path:
    folder.mkdir(parents=True, exist_ok=True)
    wf = folder / f"{stem}{suffix}"
    wf.write_text(definition, encoding="utf-8")
    props_dir = folder / "properties"
    props_dir.mkdir(exist_ok=True)
    body = properties if isinstance(properties, str) else json.dumps(properties)
    (props_dir / f"{stem}.properties.json").write_text(body, encoding="utf-8")
    return wf


@pytest.fixture
def write_template():
    """Factory: write_template(folder, stem, properties, suffix=".yml") -> definition path."""
    return _write_template


@pytest.fixture
def icons_dir(tmp_path: Path) -> Path:
    d = tmp_path / "icons"
    d.mkdir()
    (d / "shield.svg").write_text("<svg/>", encoding="utf-8")
    return d


@pytest.fixture
def valid_properties() -> dict:
    return {
        "name": "Scan",
        "description": "d",
        "iconName": "shield",
        "categories": ["Security"],
    }
