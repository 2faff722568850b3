"""
API Models for the Resolver Service

Pydantic models used for request/response validation of the classification
and health endpoints.

Design Goals
------------
- Reject malformed input before any remote call (422)
- Wire names match the game client (`blockedCategories`, `blockedLinks`)
- Explicit, forbid-extra contracts
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config import settings
from ..core.categories import parse_category


# ---------------------------------------------------------------------
# Classification Models
# ---------------------------------------------------------------------

class ClassifyRequest(BaseModel):
    """
    Batch of link titles plus the categories blocked for this game.
    """
    titles: List[str] = Field(default_factory=list)
    blocked_categories: List[str] = Field(default_factory=list, alias="blockedCategories")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @field_validator("titles")
    @classmethod
    def validate_titles(cls, v: List[str]) -> List[str]:
        if len(v) > settings.max_titles_per_request:
            raise ValueError(
                f"At most {settings.max_titles_per_request} titles per request"
            )
        for title in v:
            if not title.strip():
                raise ValueError("Titles must be non-empty")
        return v

    @field_validator("blocked_categories")
    @classmethod
    def validate_blocked_categories(cls, v: List[str]) -> List[str]:
        for name in v:
            parse_category(name)
        return list(dict.fromkeys(v))


class ClassifyResponse(BaseModel):
    """
    Blocked category per requested title; null means the link is allowed.
    """
    blocked_links: Dict[str, Optional[str]] = Field(..., alias="blockedLinks")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


# ---------------------------------------------------------------------
# Health Models
# ---------------------------------------------------------------------

class HealthResponse(BaseModel):
    status: str = "ok"
    class_map_size: int = Field(..., ge=0)
    categories: Dict[str, int] = Field(default_factory=dict)
