import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PostFrontMatter(BaseModel):
    """Recognised front matter keys of a post file."""

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    date: Optional[str] = None
    published: Optional[bool] = None
    category: Optional[str] = None
    excerpt: Optional[str] = None


class PostMeta(BaseModel):
    slug: str
    title: str
    date: str = ""
    published: bool = False
    category: Optional[str] = None
    excerpt: Optional[str] = None
    revision: Optional[str] = None


class Post(PostMeta):
    content: str


class PostInput(BaseModel):
    title: str = Field(..., min_length=1)
    date: str = Field(default_factory=lambda: datetime.date.today().isoformat())
    content: str = ""
    published: bool = False
    category: Optional[str] = None
    excerpt: Optional[str] = None

    @field_validator("category", "excerpt")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    def front_matter(self) -> PostFrontMatter:
        return PostFrontMatter(
            title=self.title,
            date=self.date,
            published=self.published,
            category=self.category,
            excerpt=self.excerpt,
        )


class PostCreate(PostInput):
    slug: str = Field(..., min_length=1)


class PostUpdate(PostInput):
    revision: str = Field(..., min_length=1)


class SaveResult(BaseModel):
    slug: str
    revision: str


class PostNavigation(BaseModel):
    newer: Optional[PostMeta] = None
    older: Optional[PostMeta] = None


class PostPage(BaseModel):
    post: Post
    navigation: PostNavigation


class CategoryCount(BaseModel):
    name: str
    count: int


class ArchiveBucket(BaseModel):
    key: str
    label: str
    count: int


class Sidebar(BaseModel):
    total: int
    recent: List[PostMeta] = Field(default_factory=list)
    categories: List[CategoryCount] = Field(default_factory=list)
    archives: List[ArchiveBucket] = Field(default_factory=list)
