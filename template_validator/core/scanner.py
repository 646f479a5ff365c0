# template_validator/core/scanner.py
from __future__ import annotations

"""Corpus scan
--------------
Finds every definition file in the configured folders, evaluates each one,
then runs the display-name uniqueness check over the ordered results.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence

from template_validator.core.rules import (
    DEFAULT_EXEMPT_SUFFIX,
    CategoryEntry,
    WorkflowWithErrors,
    evaluate,
)
from template_validator.utils.config import ConfigurationError
from template_validator.utils.logger import get_logger


DEFINITION_SUFFIXES = (".yml", ".yaml")
PROPERTIES_SUFFIX = ".properties.json"


@dataclass(frozen=True)
class WorkflowItem:
    """A definition file and the sidecar path derived from its name."""
    id: Path
    properties_path: Path


def properties_path_for(definition: Path, properties_subdir: str = "properties") -> Path:
    return definition.parent / properties_subdir / f"{definition.stem}{PROPERTIES_SUFFIX}"


def _list_folder(folder: Path) -> list[Path]:
    try:
        entries = sorted(folder.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise ConfigurationError(f"Cannot list workflow folder {folder}: {e}") from e
    return [p for p in entries if p.is_file() and p.suffix in DEFINITION_SUFFIXES]


def discover_workflows(folders: Iterable[str | Path], properties_subdir: str = "properties") -> list[WorkflowItem]:
    """Definition files directly inside each folder, in folder order then name order."""
    items: list[WorkflowItem] = []
    for folder in folders:
        for fp in _list_folder(Path(folder)):
            items.append(WorkflowItem(id=fp, properties_path=properties_path_for(fp, properties_subdir)))
    return items


def flag_duplicate_names(results: Sequence[WorkflowWithErrors]) -> None:
    """Append a duplicate-name error to every result whose name was already seen earlier."""
    seen: set[str] = set()
    for res in results:
        if not res.name:
            continue
        if res.name in seen:
            res.errors.append(f'Workflow template name "{res.name}" already exists')
        else:
            seen.add(res.name)


def scan_workflows(
    folders: Sequence[str | Path],
    allowed_categories: Sequence[str],
    directory_category_map: Sequence[CategoryEntry],
    *,
    icons_dir: Path | str,
    exempt_suffix: str = DEFAULT_EXEMPT_SUFFIX,
    properties_subdir: str = "properties",
    parallel: bool = False,
    max_workers: Optional[int] = None,
) -> list[WorkflowWithErrors]:
    """
    Evaluate every definition in `folders` and return only the ones with errors.

    Order follows `folders`, then file names within a folder. With `parallel`
    the per-file checks run on a thread pool; results are still collected
    positionally, so duplicate detection and report order do not change.

    Raises ConfigurationError when a folder cannot be listed.
    """
    log = get_logger(__name__)
    items = discover_workflows(folders, properties_subdir)
    log.info(f"Checking {len(items)} workflow template(s) in {len(folders)} folder(s)")

    def _check(item: WorkflowItem) -> WorkflowWithErrors:
        log.debug(f"Checking {item.id}")
        return evaluate(
            item.id,
            item.properties_path,
            allowed_categories,
            directory_category_map,
            icons_dir=icons_dir,
            exempt_suffix=exempt_suffix,
        )

    if parallel and len(items) > 1:
        with ThreadPoolExecutor(max_workers=max(1, max_workers or 4)) as ex:
            results = list(ex.map(_check, items))
    else:
        results = [_check(item) for item in items]

    flag_duplicate_names(results)
    return [res for res in results if res.errors]


__all__ = [
    "WorkflowItem",
    "DEFINITION_SUFFIXES",
    "properties_path_for",
    "discover_workflows",
    "flag_duplicate_names",
    "scan_workflows",
]
