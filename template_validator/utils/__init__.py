"""
Utilities for the template validator: settings and logging.
Import submodules directly, e.g. `from template_validator.utils.config import get_settings`.
"""

__all__: list[str] = []
