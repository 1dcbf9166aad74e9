from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from ....core.errors import AppError, InternalError, NotFoundError, ServiceUnavailableError
from ....core.runtime import Runtime
from ....db.base import PostStore, StoreError, StoreTimeoutError
from ....schemas.posts import PostCreate, PostDeleted, PostEnvelope, PostList, PostMutation, PostPublic, PostUpdate
from ....services.query import PostQuery
from ....services.updates import apply_update
from ...deps import ensure_store_available, get_runtime, get_store, require_admin


logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(ensure_store_available)])


def _store_failure(exc: StoreError, code: str, message: str) -> AppError:
    if isinstance(exc, StoreTimeoutError):
        logger.warning("store timeout (%s): %s", code, exc)
        return ServiceUnavailableError("The database is busy. Please try again shortly.", code="STORE_TIMEOUT")
    logger.error("store failure (%s): %s", code, exc, exc_info=exc)
    return InternalError(message, code=code)


def _not_found() -> NotFoundError:
    return NotFoundError("Blog post not found", code="POST_NOT_FOUND")


@router.get("", response_model=PostList)
async def list_posts(
    search: str | None = None,
    tag: str | None = None,
    featured: str | None = None,
    page: str | None = None,
    limit: str | None = None,
    store: PostStore = Depends(get_store),
) -> PostList:
    # page/limit stay strings here so junk values fall back to defaults instead of 422
    query = PostQuery.from_params(search=search, tag=tag, featured=featured, page=page, limit=limit)
    try:
        result = await store.find(query)
    except StoreError as exc:
        raise _store_failure(exc, "FETCH_POSTS_FAILED", "Unable to fetch blog posts at this time. Please try again later.") from exc
    return PostList(
        items=[PostPublic.from_post(p) for p in result.items],
        total=result.total,
        page=query.page,
        limit=query.limit,
    )


@router.get("/{post_id}", response_model=PostEnvelope)
async def get_post(post_id: str, store: PostStore = Depends(get_store)) -> PostEnvelope:
    try:
        post = await store.get_by_id(post_id)
    except StoreError as exc:
        raise _store_failure(exc, "FETCH_POST_FAILED", "Unable to fetch the requested blog post. Please try again later.") from exc
    if post is None:
        raise _not_found()
    return PostEnvelope(post=PostPublic.from_post(post))


@router.post("", response_model=PostMutation, status_code=201, dependencies=[Depends(require_admin)])
async def create_post(payload: PostCreate, store: PostStore = Depends(get_store)) -> PostMutation:
    try:
        post = await store.insert(payload.to_new_post())
    except StoreError as exc:
        raise _store_failure(exc, "CREATE_POST_FAILED", "Unable to create blog post. Please check your data and try again.") from exc
    logger.info("created post %s", post.id)
    return PostMutation(post=PostPublic.from_post(post), message="Blog post created successfully")


@router.put("/{post_id}", response_model=PostMutation, dependencies=[Depends(require_admin)])
async def update_post(
    post_id: str,
    payload: PostUpdate,
    store: PostStore = Depends(get_store),
    runtime: Runtime = Depends(get_runtime),
) -> PostMutation:
    try:
        post = await apply_update(store, post_id, payload.sent_fields(), clock=runtime.clock)
    except StoreError as exc:
        raise _store_failure(exc, "UPDATE_POST_FAILED", "Unable to update blog post. Please check your data and try again.") from exc
    if post is None:
        raise _not_found()
    logger.info("updated post %s", post.id)
    return PostMutation(post=PostPublic.from_post(post), message="Blog post updated successfully")


@router.delete("/{post_id}", response_model=PostDeleted, dependencies=[Depends(require_admin)])
async def delete_post(post_id: str, store: PostStore = Depends(get_store)) -> PostDeleted:
    try:
        deleted_id = await store.delete_by_id(post_id)
    except StoreError as exc:
        raise _store_failure(exc, "DELETE_POST_FAILED", "Unable to delete blog post. Please try again later.") from exc
    if deleted_id is None:
        raise _not_found()
    logger.info("deleted post %s", deleted_id)
    return PostDeleted(message="Blog post deleted successfully", deletedId=deleted_id)
