"""Idea-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .comment import CommentPublic


class IdeaPublic(BaseModel):
    """Public projection of an idea.

    Like and comment counts are always derived from live ledger and comment
    state. The raw like map is never part of this schema.
    """

    id: str
    type: str
    title: str
    symbol: str = ""
    link: str = ""
    tf: str = ""
    level_text: str = ""
    take: str = ""
    summary: str = ""
    image_url: str = ""
    author_name: str = "Member"
    author_id: str = ""
    created_at: str
    updated_at: str
    like_count: int = Field(0, ge=0)
    comment_count: int = Field(0, ge=0)
    comments: list[CommentPublic] | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def public_dict(self) -> dict[str, object]:
        """Return the camelCase JSON form, omitting comments unless embedded."""
        return self.model_dump(by_alias=True, exclude_none=True)


class LikeState(BaseModel):
    """Result of a like operation or a like lookup."""

    id: str
    liked: bool
    like_count: int

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
