"""Comment-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CommentPublic(BaseModel):
    """Schema for comment information returned by the API."""

    id: str
    text: str
    author_name: str
    author_id: str = ""
    created_at: str
    updated_at: str

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
