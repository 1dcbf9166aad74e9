from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field, field_validator

from ..services.posts import NewPost, Post


def _strip(v: object) -> object:
    return v.strip() if isinstance(v, str) else v


class PostCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    excerpt: str = Field(min_length=1, max_length=500)
    author: str = Field(min_length=1, max_length=100)
    tags: list[str] = Field(default_factory=list)
    featured: bool = False
    featuredImage: str | None = Field(default=None)
    imageAlt: str | None = Field(default=None, max_length=255)

    @field_validator("title", "excerpt", "author", mode="before")
    @classmethod
    def strip_text(cls, v: object) -> object:
        return _strip(v)

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("content cannot be blank")
        return v

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str]) -> list[str]:
        return [t.strip() for t in v if t.strip()]

    @field_validator("featuredImage", "imageAlt", mode="before")
    @classmethod
    def empty_as_none(cls, v: object) -> object:
        v = _strip(v)
        return v or None

    def to_new_post(self) -> NewPost:
        return NewPost(
            title=self.title,
            content=self.content,
            excerpt=self.excerpt,
            author=self.author,
            tags=list(self.tags),
            featured=self.featured,
            featured_image=self.featuredImage,
            image_alt=self.imageAlt,
        )


class PostUpdate(BaseModel):
    # every field optional; only the keys actually sent are applied
    title: str | None = Field(default=None, max_length=255)
    content: str | None = Field(default=None)
    excerpt: str | None = Field(default=None, max_length=500)
    author: str | None = Field(default=None, max_length=100)
    tags: list[str] | None = Field(default=None)
    featured: bool | None = Field(default=None)
    featuredImage: str | None = Field(default=None)
    imageAlt: str | None = Field(default=None, max_length=255)

    def sent_fields(self) -> dict[str, object]:
        return self.model_dump(exclude_unset=True)


class PostPublic(BaseModel):
    id: str
    title: str
    content: str
    excerpt: str
    author: str
    publishedAt: dt.datetime
    updatedAt: dt.datetime
    tags: list[str]
    featured: bool
    readingTime: int
    featuredImage: str | None = None
    imageAlt: str | None = None

    @classmethod
    def from_post(cls, post: Post) -> "PostPublic":
        return cls(
            id=post.id,
            title=post.title,
            content=post.content,
            excerpt=post.excerpt,
            author=post.author,
            publishedAt=post.published_at,
            updatedAt=post.updated_at,
            tags=list(post.tags),
            featured=post.featured,
            readingTime=post.reading_time,
            featuredImage=post.featured_image,
            imageAlt=post.image_alt,
        )


class PostList(BaseModel):
    items: list[PostPublic]
    total: int
    page: int
    limit: int


class PostEnvelope(BaseModel):
    post: PostPublic


class PostMutation(BaseModel):
    post: PostPublic
    message: str


class PostDeleted(BaseModel):
    message: str
    deletedId: str
