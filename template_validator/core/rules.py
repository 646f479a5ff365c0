# template_validator/core/rules.py
from __future__ import annotations

"""Per-template rules
--------------------
Checks one (definition, properties) pair: parseability, properties schema,
icon resolution and directory/category consistency. Every applicable error
is collected; only a parse failure stops evaluation early.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from template_validator.core.documents import load_definition, load_properties
from template_validator.core.properties import schema_errors
from template_validator.utils.config import DirectoryCategory


OCTICON_PATTERN = re.compile(r"^octicon\s+(.*)")
ICON_SUFFIX = ".svg"
DEFAULT_EXEMPT_SUFFIX = "blank.yml"

CategoryEntry = Union[DirectoryCategory, Mapping[str, Any]]


@dataclass
class WorkflowWithErrors:
    """Outcome for one definition file. `name` is None when no usable name was found."""
    id: str
    name: Optional[str] = None
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "errors": list(self.errors)}


# ---------- Individual rules ----------


def display_name(properties: Mapping[str, Any]) -> Optional[str]:
    name = properties.get("name")
    if isinstance(name, str) and name.strip():
        return name
    return None


def icon_errors(icon_name: Any, icons_dir: Path) -> list[str]:
    if not isinstance(icon_name, str) or not icon_name:
        return []
    m = OCTICON_PATTERN.match(icon_name)
    if m:
        # "octicon check.svg" -> "check"; "octicon " has no identifier
        if m.group(1).split(".")[0]:
            return []
    elif (icons_dir / f"{icon_name}{ICON_SUFFIX}").exists():
        return []
    return [f"No icon named {icon_name} found"]


def directory_category(directory: Path, mapping: Iterable[CategoryEntry]) -> Optional[str]:
    """Category assigned to `directory`, or None when the map has no entry for it."""
    for entry in mapping:
        entry = entry if isinstance(entry, DirectoryCategory) else DirectoryCategory.model_validate(entry)
        if entry.directory == directory:
            return entry.category
    return None


def category_errors(categories: Any, expected: str, directory: Path) -> list[str]:
    if not categories:
        return ["Workflow categories cannot be null or empty"]
    if not isinstance(categories, list):
        # wrong type is already a schema violation
        return []
    if str(categories[0]).casefold() != expected.casefold():
        return [
            f'The first category in properties.json categories must be "{expected}" '
            f"for {directory.name} directory workflow."
        ]
    return []


# ---------- Public API ----------


def evaluate(
    definition_path: Path | str,
    properties_path: Path | str,
    allowed_categories: Sequence[str],
    directory_category_map: Iterable[CategoryEntry],
    *,
    icons_dir: Path | str,
    exempt_suffix: str = DEFAULT_EXEMPT_SUFFIX,
) -> WorkflowWithErrors:
    """
    Validate a single template.

    `allowed_categories` is accepted for parity with the settings file; the
    category rule only compares against the directory's mapped category.
    """
    wf_path = Path(definition_path)
    result = WorkflowWithErrors(id=str(wf_path))

    definition = load_definition(wf_path)
    if not definition.ok:
        result.errors.append(definition.error)
        return result

    loaded = load_properties(properties_path)
    if not loaded.ok:
        result.errors.append(loaded.error)
        return result

    properties = loaded.value if isinstance(loaded.value, dict) else {}
    result.name = display_name(properties)
    result.errors.extend(schema_errors(loaded.value))
    result.errors.extend(icon_errors(properties.get("iconName"), Path(icons_dir)))

    exempt = bool(exempt_suffix) and str(wf_path).endswith(exempt_suffix)
    if not exempt:
        directory = wf_path.parent
        expected = directory_category(directory, directory_category_map)
        if expected is None:
            result.errors.append(f"Configuration error: no category mapped to directory {directory}")
        else:
            result.errors.extend(category_errors(properties.get("categories"), expected, directory))

    return result


__all__ = [
    "WorkflowWithErrors",
    "evaluate",
    "display_name",
    "icon_errors",
    "directory_category",
    "category_errors",
]
