# blog_posts/models/schemas.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

# Column widths of the posts table
NAME_MAX_LENGTH = 100
TITLE_MAX_LENGTH = 200


class PostAuthorIn(BaseModel):
    """Author as sent by clients; only the camelCase keys are accepted."""

    first_name: str = Field(..., alias="firstName", min_length=1, max_length=NAME_MAX_LENGTH)
    last_name: str = Field(..., alias="lastName", min_length=1, max_length=NAME_MAX_LENGTH)


class PostAuthor(PostAuthorIn):
    """Author as stored: first and last name kept apart."""

    model_config = ConfigDict(populate_by_name=True)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class PostDocument(BaseModel):
    """Storage shape of a blog post. ``id`` and ``created`` are filled in by the store."""

    id: Optional[str] = None
    author: PostAuthor
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    content: str = Field(..., min_length=1)
    created: Optional[datetime] = None


class PostCreate(BaseModel):
    author: PostAuthorIn
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    content: str = Field(..., min_length=1)
    created: Optional[datetime] = None


class PostUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=TITLE_MAX_LENGTH)
    content: Optional[str] = Field(None, min_length=1)


class PostView(BaseModel):
    id: str
    title: str
    content: str
    author: str
    created: datetime
