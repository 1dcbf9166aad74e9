"""
tests/test_stores.py
"""
from __future__ import annotations

import pytest
from sqlalchemy import select

from app.db.base import StoreError
from app.db.models import PostRow, tag_index
from app.db.sql import SqlPostStore, filter_clauses, normalize_database_url
from app.services.query import PostQuery
from app.services.samples import sample_posts
from conftest import new_post


async def test_insert_assigns_id_timestamps_and_reading_time(store):
    post = await store.insert(new_post(content=" ".join(["w"] * 250), tags=["x"]))

    assert post.id
    assert post.updated_at == post.published_at
    assert post.reading_time == 2
    assert post.tags == ["x"]
    assert post.featured_image is None and post.image_alt is None


async def test_ids_are_unique(store):
    ids = {(await store.insert(new_post(title=str(i)))).id for i in range(5)}
    assert len(ids) == 5


async def test_get_by_id_round_trips(store):
    post = await store.insert(new_post(featured=True, featured_image="https://img", image_alt="alt"))
    assert await store.get_by_id(post.id) == post


async def test_delete_is_permanent_and_second_delete_is_not_found(store):
    post = await store.insert(new_post())

    assert await store.delete_by_id(post.id) == post.id
    assert await store.get_by_id(post.id) is None
    assert await store.delete_by_id(post.id) is None


@pytest.mark.parametrize("post_id", ["does-not-exist", "0", "-1", "99999999999999999999"])
async def test_unknown_ids_are_not_found(store, post_id):
    assert await store.get_by_id(post_id) is None
    assert await store.delete_by_id(post_id) is None


async def test_list_all_in_insertion_order(store):
    a = await store.insert(new_post(title="a"))
    b = await store.insert(new_post(title="b"))
    assert [p.id for p in await store.list_all()] == [a.id, b.id]


async def test_initialize_seeds_only_an_empty_store(store):
    assert await store.initialize(sample_posts()) is True
    assert await store.initialize(sample_posts()) is True

    posts = await store.list_all()
    assert len(posts) == 2
    assert [p.featured for p in posts] == [True, False]


# ────────────────────────── SQL specifics ──────────────────────────
@pytest.mark.parametrize(
    "url, expected",
    [
        ("postgres://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
        ("postgresql://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
        ("sqlite:///blog.db", "sqlite+aiosqlite:///blog.db"),
        ("postgresql+asyncpg://u@h/db", "postgresql+asyncpg://u@h/db"),
    ],
)
def test_normalize_database_url(url, expected):
    assert normalize_database_url(url) == expected


def test_tag_index_is_lowercased_and_delimited():
    assert tag_index([]) == ""
    assert tag_index(["Welcome", "Tips"]) == "\x1fwelcome\x1ftips\x1f"


def test_filter_clauses_bind_user_input():
    payload = "x'; DROP TABLE posts; --"
    query = PostQuery(search=payload, tag="Tips", featured=True)
    stmt = select(PostRow).where(*filter_clauses(query))
    compiled = stmt.compile()

    assert "DROP TABLE" not in str(compiled)
    assert payload in compiled.params.values()
    assert len(filter_clauses(PostQuery())) == 0


async def test_sql_store_survives_reconnect(sql_store):
    post = await sql_store.insert(new_post(tags=["Keep"]))
    await sql_store.close()

    assert (await sql_store.get_by_id(post.id)).tags == ["Keep"]
    assert await sql_store.ping() is True


async def test_unreachable_database_raises_store_error(tmp_path):
    missing = tmp_path / "no-such-dir" / "blog.sqlite3"
    store = SqlPostStore(f"sqlite:///{missing}", query_timeout=5)
    with pytest.raises(StoreError):
        await store.initialize()
    await store.close()
