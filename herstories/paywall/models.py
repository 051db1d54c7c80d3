"""
DTO paywall: AccessDecision (decide_access output) and the badge shown next to a chapter.
"""
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class AccessBadge(str, Enum):
    FREE = "free"
    PURCHASED = "purchased"
    LOCKED = "locked"


class AccessDecision(BaseModel):
    """Result of decide_access: whether the body may be shown and how the chapter is labelled."""

    can_read: bool = Field(..., description="True = chapter body may be rendered")
    badge: AccessBadge
    price_label: str | None = Field(
        None,
        description="Price shown on a locked chapter, e.g. '5 BDAG'; None when readable",
    )

    model_config = {"frozen": True}
