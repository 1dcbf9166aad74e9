from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Callable, Mapping

from ..core.errors import ValidationError
from .posts import Post, reading_time, utc_now

if TYPE_CHECKING:
    from ..db.base import PostStore


# wire name -> Post attribute; anything else in a partial update is ignored
UPDATABLE_FIELDS: dict[str, str] = {
    "title": "title",
    "content": "content",
    "excerpt": "excerpt",
    "author": "author",
    "tags": "tags",
    "featured": "featured",
    "featuredImage": "featured_image",
    "imageAlt": "image_alt",
}
REQUIRED_TEXT = {"title", "content", "excerpt", "author"}
NULLABLE = {"featured_image", "image_alt"}


@dataclass(frozen=True)
class PostChanges:
    values: dict[str, Any]
    updated_at: dt.datetime

    def stamp_for(self, post: Post) -> dt.datetime:
        return max(self.updated_at, post.published_at)

    def apply_to(self, post: Post) -> Post:
        return replace(post, **self.values, updated_at=self.stamp_for(post))


def _check_value(attr: str, value: Any) -> Any:
    if value is None:
        if attr in NULLABLE:
            return None
        raise ValidationError(f"{attr} cannot be null")
    if attr in REQUIRED_TEXT:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{attr} cannot be empty")
        return value if attr == "content" else value.strip()
    if attr == "tags":
        if not isinstance(value, (list, tuple)) or not all(isinstance(t, str) for t in value):
            raise ValidationError("tags must be a list of strings")
        return [t.strip() for t in value if t.strip()]
    if attr in NULLABLE:
        if not isinstance(value, str):
            raise ValidationError(f"{attr} must be a string")
        return value.strip() or None
    if attr == "featured":
        if not isinstance(value, bool):
            raise ValidationError("featured must be a boolean")
    return value


def compose_update(partial: Mapping[str, Any], now: dt.datetime) -> PostChanges:
    """Turn a sparse update into the column changes to write.

    Only keys present in ``partial`` are written. ``reading_time`` follows
    ``content`` when it is present and is left alone otherwise.
    """
    values: dict[str, Any] = {}
    for key, value in partial.items():
        attr = UPDATABLE_FIELDS.get(key)
        if attr is None:
            continue
        values[attr] = _check_value(attr, value)
    if "content" in values:
        values["reading_time"] = reading_time(values["content"])
    return PostChanges(values=values, updated_at=now)


async def apply_update(
    store: "PostStore",
    post_id: str,
    partial: Mapping[str, Any],
    clock: Callable[[], dt.datetime] = utc_now,
) -> Post | None:
    changes = compose_update(partial, clock())
    return await store.update(post_id, changes)
