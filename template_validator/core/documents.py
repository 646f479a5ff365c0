# template_validator/core/documents.py
from __future__ import annotations

"""Document loading
-------------------
Reads a definition (YAML) or properties (JSON) file and returns a LoadResult
instead of raising, so one broken file becomes one reported error.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml


@dataclass(frozen=True)
class LoadResult:
    """Either the parsed `value` or an `error` description, never both."""
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _read(path: Path) -> tuple[Optional[str], Optional[str]]:
    try:
        return path.read_text(encoding="utf-8"), None
    except FileNotFoundError:
        return None, f"File not found: {path}"
    except (OSError, UnicodeDecodeError) as e:
        return None, f"Cannot read {path}: {e}"


def load_definition(path: Path | str) -> LoadResult:
    """Parse a workflow definition. Only parseability is checked, not content."""
    p = Path(path)
    raw, err = _read(p)
    if err:
        return LoadResult(error=err)
    try:
        return LoadResult(value=yaml.safe_load(raw))
    except (yaml.YAMLError, RecursionError) as ye:
        return LoadResult(error=f"YAML parse error in {p}: {ye}")


def load_properties(path: Path | str) -> LoadResult:
    p = Path(path)
    raw, err = _read(p)
    if err:
        return LoadResult(error=err)
    try:
        return LoadResult(value=json.loads(raw))
    except (json.JSONDecodeError, RecursionError) as je:
        return LoadResult(error=f"JSON parse error in {p}: {je}")


__all__ = ["LoadResult", "load_definition", "load_properties"]
