"""
Core package for the template validator.
Lightweight package init to avoid import cycles.

Consumers should import submodules directly, e.g.:
  from template_validator.core.rules import evaluate, WorkflowWithErrors
  from template_validator.core.scanner import scan_workflows
"""

__all__: list[str] = []
