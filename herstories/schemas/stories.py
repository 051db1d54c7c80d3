from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from herstories.paywall.config import get_default_price


class StoryCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    category: str  # human-readable category name, resolved to categories.id
    price_per_chapter: Decimal = Field(default_factory=get_default_price, ge=0)
    impact_percentage: int = Field(10, ge=0, le=100)
    is_anonymous: bool = False
    cover_image_url: str | None = None

    @field_validator("category")
    @classmethod
    def strip_category(cls, v: str) -> str:
        return v.strip()


class ChapterCreate(BaseModel):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    # None or 0 = use the story's price_per_chapter
    price: Decimal | None = Field(None, ge=0)
    is_free: bool = False


class StoryHeader(BaseModel):
    """Story fields the reader needs to sell a chapter."""

    model_config = {"frozen": True}

    id: str
    title: str
    price_per_chapter: Decimal
    author_id: str


class ChapterRead(BaseModel):
    """Published chapter as held by the reader view, detached from the session."""

    model_config = {"frozen": True, "from_attributes": True}

    id: str
    story_id: str
    chapter_number: int
    title: str
    content: str
    is_free: bool
    price: Decimal | None = None
