# template_validator/core/properties.py
from __future__ import annotations

"""Properties sidecar schema
----------------------------
Pydantic model for `<folder>/properties/<name>.properties.json`. Only the
fields below are checked; anything else in the sidecar is left alone.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class WorkflowProperties(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1, description="Display name, unique across all templates")
    description: str = Field(...)
    # May be omitted, but an explicit null is not a string
    creator: str = Field(default=None)
    icon_name: str = Field(..., alias="iconName", description="Custom icon file stem or 'octicon <id>'")
    # Required key, but an explicit null is accepted
    categories: Optional[list[str]] = Field(...)


def schema_errors(data: Any) -> list[str]:
    """Validate `data` against WorkflowProperties and return every violation as `<loc>: <msg>`."""
    try:
        WorkflowProperties.model_validate(data)
    except ValidationError as ve:
        out: list[str] = []
        for e in ve.errors():
            loc = ".".join(str(p) for p in e.get("loc", ()))
            out.append(f"{loc or 'properties'}: {e.get('msg', 'invalid value')}")
        return out
    return []


__all__ = ["WorkflowProperties", "schema_errors"]
