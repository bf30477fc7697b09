from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class Comment(BaseModel):
    id: str
    postSlug: str
    author: str
    content: str
    date: str
    isRead: bool = False
    reply: Optional[str] = None


class CommentInput(BaseModel):
    postSlug: str = ""
    author: str = ""
    content: str = ""

    @field_validator("postSlug", "author", "content", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    def missing_fields(self) -> List[str]:
        return [name for name in ("postSlug", "author", "content") if not getattr(self, name)]


class ReplyInput(BaseModel):
    reply: str = Field(..., min_length=1)


class CommentThread(BaseModel):
    slug: str
    comments: List[Comment] = Field(default_factory=list)
    revision: Optional[str] = None


class CommentsReplace(BaseModel):
    comments: List[Comment]
    revision: Optional[str] = None


class CommentsOverview(BaseModel):
    unread: int
    comments: List[Comment] = Field(default_factory=list)
