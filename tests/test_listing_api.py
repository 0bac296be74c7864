"""HTTP tests for the listing routes.

Drives the FastAPI app through httpx against an in-memory SQLite
database and checks status codes and JSON shapes.
"""

import time

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session

from readit.models.schemas import ListingMode
from readit.routes.listing import get_ranker
from readit.services.cursor import encode_cursor
from tests.fixtures.listing_items import T0, add_comment, add_post, add_subreddit


@pytest.fixture
def seeded_db(test_db: Session) -> Session:
    """Two subreddits with a handful of voted posts."""
    add_subreddit(test_db, "programming")
    add_subreddit(test_db, "empty")
    add_post(test_db, "programming", up_votes=10, down_votes=0, created_utc=T0, title="A")
    add_post(test_db, "programming", up_votes=100, down_votes=90, created_utc=T0 + 60, title="B")
    add_post(test_db, "programming", up_votes=3, down_votes=1, created_utc=T0 + 120, title="C")
    add_post(test_db, "programming", up_votes=50, down_votes=5, created_utc=T0 + 180, title="D")
    add_post(test_db, "programming", up_votes=500, created_utc=T0 + 240, deleted=True)
    return test_db


class TestHealth:
    """Tests for the health endpoint."""

    async def test_health(self, test_client: AsyncClient) -> None:
        response = await test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestGlobalListings:
    """Tests for /best, /hot, /new and /top."""

    async def test_new_listing_shape(self, test_client: AsyncClient, seeded_db: Session) -> None:
        """Listings return before/after/children with item summaries."""
        response = await test_client.get("/new")

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"before", "after", "children"}
        assert body["before"] is None
        assert body["after"] is None
        assert [child["title"] for child in body["children"]] == ["D", "C", "B", "A"]

        child = body["children"][0]
        assert child["kind"] == "t3"
        assert child["name"] == f"t3_{child['id']}"
        assert child["scope"] == "programming"
        assert child["score"] == 45
        assert child["up_votes"] == 50
        assert child["down_votes"] == 5

    async def test_top_tie_broken_by_id(self, test_client: AsyncClient, seeded_db: Session) -> None:
        """A and B both net 10; the older id comes first."""
        response = await test_client.get("/top")
        titles = [child["title"] for child in response.json()["children"]]
        assert titles == ["D", "A", "B", "C"]

    async def test_best_prefers_clean_ratio(self, test_client: AsyncClient, seeded_db: Session) -> None:
        """Under best, A (10/0) ranks above B (100/90)."""
        response = await test_client.get("/best")
        titles = [child["title"] for child in response.json()["children"]]
        assert titles.index("A") < titles.index("B")

    async def test_hot_excludes_deleted(self, test_client: AsyncClient, seeded_db: Session) -> None:
        """Soft-deleted posts never appear."""
        response = await test_client.get("/hot")
        assert response.status_code == 200
        assert len(response.json()["children"]) == 4

    async def test_empty_database(self, test_client: AsyncClient) -> None:
        """No posts at all is an empty listing, not an error."""
        for mode in ListingMode:
            response = await test_client.get(f"/{mode.value}")
            assert response.status_code == 200
            assert response.json() == {"before": None, "after": None, "children": []}

    async def test_paging_forward_and_back(self, test_client: AsyncClient, seeded_db: Session) -> None:
        """after/before cursors walk the listing in both directions."""
        page1 = (await test_client.get("/new", params={"limit": 2})).json()
        assert [c["title"] for c in page1["children"]] == ["D", "C"]
        assert page1["before"] is None

        page2 = (await test_client.get("/new", params={"limit": 2, "after": page1["after"]})).json()
        assert [c["title"] for c in page2["children"]] == ["B", "A"]
        assert page2["after"] is None

        back = (await test_client.get("/new", params={"limit": 2, "before": page2["before"]})).json()
        assert back["children"] == page1["children"]

    async def test_limit_is_clamped(self, test_client: AsyncClient, seeded_db: Session) -> None:
        """limit=0 returns one item and limit=500 is accepted."""
        response = await test_client.get("/new", params={"limit": 0})
        assert response.status_code == 200
        assert len(response.json()["children"]) == 1

        response = await test_client.get("/new", params={"limit": 500})
        assert response.status_code == 200
        assert len(response.json()["children"]) == 4

    async def test_hot_paging_on_wall_clock(self, test_client: AsyncClient, test_db: Session) -> None:
        """Walking /hot page by page in real time lists each post exactly once."""
        add_subreddit(test_db)
        start = time.time()
        for i in range(1, 10):
            add_post(test_db, up_votes=10 * i, created_utc=start - i * 7200.0, title=f"P{i}")

        titles: list[str] = []
        params = {"limit": 2}
        while True:
            body = (await test_client.get("/hot", params=params)).json()
            titles.extend(child["title"] for child in body["children"])
            if body["after"] is None:
                break
            params = {"limit": 2, "after": body["after"]}

        assert len(titles) == 9
        assert sorted(titles) == sorted(f"P{i}" for i in range(1, 10))

    async def test_blank_cursor_ignored(self, test_client: AsyncClient, seeded_db: Session) -> None:
        """An empty after= parameter behaves like no cursor."""
        response = await test_client.get("/new", params={"after": ""})
        assert response.status_code == 200
        assert len(response.json()["children"]) == 4


class TestErrors:
    """Error translation at the HTTP boundary."""

    async def test_after_and_before(self, test_client: AsyncClient, seeded_db: Session) -> None:
        """Both cursors at once is a 400."""
        token = encode_cursor(ListingMode.HOT, 1.0, 1)
        response = await test_client.get("/hot", params={"after": token, "before": token})
        assert response.status_code == 400
        assert "error" in response.json()

    async def test_malformed_cursor(self, test_client: AsyncClient, seeded_db: Session) -> None:
        response = await test_client.get("/hot", params={"after": "garbage!"})
        assert response.status_code == 400
        assert response.json() == {"error": "Malformed cursor."}

    async def test_cursor_from_other_mode(self, test_client: AsyncClient, seeded_db: Session) -> None:
        """A /new cursor cannot be redeemed on /top."""
        page = (await test_client.get("/new", params={"limit": 1})).json()
        response = await test_client.get("/top", params={"after": page["after"]})
        assert response.status_code == 400

    async def test_non_integer_limit(self, test_client: AsyncClient, seeded_db: Session) -> None:
        """Request validation failures are reported as 400."""
        response = await test_client.get("/new", params={"limit": "lots"})
        assert response.status_code == 400
        assert isinstance(response.json()["error"], list)

    async def test_unhandled_error_is_500(self, test_app, seeded_db: Session) -> None:
        """Unexpected failures become a 500 with a generic message."""

        def _broken_ranker():
            raise RuntimeError("ranker exploded")

        test_app.dependency_overrides[get_ranker] = _broken_ranker
        transport = ASGITransport(app=test_app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            response = await client.get("/hot")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}


class TestSubredditListings:
    """Tests for /r/{subreddit}/{mode}."""

    async def test_subreddit_listing(self, test_client: AsyncClient, seeded_db: Session) -> None:
        add_subreddit(seeded_db, "python")
        add_post(seeded_db, "python", up_votes=7, title="Walrus")

        response = await test_client.get("/r/python/top")

        assert response.status_code == 200
        assert [c["title"] for c in response.json()["children"]] == ["Walrus"]

    async def test_default_mode_is_hot(self, test_client: AsyncClient, seeded_db: Session) -> None:
        response = await test_client.get("/r/programming")
        assert response.status_code == 200
        assert len(response.json()["children"]) == 4

    async def test_empty_subreddit(self, test_client: AsyncClient, seeded_db: Session) -> None:
        """An existing subreddit with no posts lists nothing."""
        for mode in ListingMode:
            response = await test_client.get(f"/r/empty/{mode.value}")
            assert response.status_code == 200
            assert response.json() == {"before": None, "after": None, "children": []}

    async def test_unknown_subreddit(self, test_client: AsyncClient, seeded_db: Session) -> None:
        response = await test_client.get("/r/doesnotexist/new")
        assert response.status_code == 404
        assert response.json() == {"error": "Subreddit not found!"}

    async def test_unknown_mode(self, test_client: AsyncClient, seeded_db: Session) -> None:
        response = await test_client.get("/r/programming/rising")
        assert response.status_code == 400


class TestCommentListings:
    """Tests for /comments/{post_id}/{mode}."""

    async def test_best_comments(self, test_client: AsyncClient, test_db: Session) -> None:
        add_subreddit(test_db)
        post = add_post(test_db)
        add_comment(test_db, post, up_votes=100, down_votes=90, content="contested")
        add_comment(test_db, post, up_votes=10, content="liked")
        add_comment(test_db, post, up_votes=999, deleted=True)

        response = await test_client.get(f"/comments/{post.id}")

        assert response.status_code == 200
        children = response.json()["children"]
        assert [c["content"] for c in children] == ["liked", "contested"]
        assert all(c["kind"] == "t1" for c in children)
        assert all(c["scope"] == str(post.id) for c in children)

    async def test_new_comments_paginate(self, test_client: AsyncClient, test_db: Session) -> None:
        add_subreddit(test_db)
        post = add_post(test_db)
        for i in range(5):
            add_comment(test_db, post, created_utc=T0 + i, content=f"c{i}")

        page1 = (await test_client.get(f"/comments/{post.id}/new", params={"limit": 3})).json()
        page2 = (await test_client.get(
            f"/comments/{post.id}/new", params={"limit": 3, "after": page1["after"]}
        )).json()

        assert [c["content"] for c in page1["children"]] == ["c4", "c3", "c2"]
        assert [c["content"] for c in page2["children"]] == ["c1", "c0"]
        assert page2["after"] is None

    async def test_missing_post(self, test_client: AsyncClient, test_db: Session) -> None:
        response = await test_client.get("/comments/12345/top")
        assert response.status_code == 404
        assert response.json() == {"error": "Post not found!"}
