"""Tests for tags endpoint."""
from httpx import AsyncClient


async def _create(client: AsyncClient, url: str, tags: list[str]) -> dict:
    response = await client.post(
        "/bookmarks/", json={"url": url, "title": "Test", "tags": tags},
    )
    assert response.status_code == 201, response.text
    return response.json()


async def test_list_tags_empty(client: AsyncClient) -> None:
    """Test listing tags when no bookmarks exist."""
    response = await client.get("/tags/")
    assert response.status_code == 200

    data = response.json()
    assert data["tags"] == []


async def test_list_tags_single_bookmark(client: AsyncClient) -> None:
    """Test listing tags from a single bookmark."""
    await _create(client, "https://example.com", ["python", "web"])

    response = await client.get("/tags/")
    assert response.status_code == 200

    data = response.json()
    assert [(tag["name"], tag["count"]) for tag in data["tags"]] == [
        ("python", 1),
        ("web", 1),
    ]


async def test_list_tags_sorted_by_count_then_name(client: AsyncClient) -> None:
    """Most used tags come first; ties are alphabetical."""
    await _create(client, "https://example.com", ["news", "tech"])

    response = await client.get("/tags/")
    assert [(t["name"], t["count"]) for t in response.json()["tags"]] == [
        ("news", 1),
        ("tech", 1),
    ]

    await _create(client, "https://another.com", ["tech"])

    response = await client.get("/tags/")
    assert [(t["name"], t["count"]) for t in response.json()["tags"]] == [
        ("tech", 2),
        ("news", 1),
    ]


async def test_list_tags_deleted_bookmarks_not_counted(client: AsyncClient) -> None:
    """Soft-deleted bookmarks drop out of the count; the tag stays with zero."""
    bookmark = await _create(client, "https://example.com", ["orphan"])
    await client.delete(f"/bookmarks/{bookmark['id']}")

    response = await client.get("/tags/")
    assert response.json()["tags"] == [{"name": "orphan", "color": None, "count": 0}]


async def test_list_tags_archived_bookmarks_still_counted(client: AsyncClient) -> None:
    """Archived bookmarks keep counting toward their tags."""
    bookmark = await _create(client, "https://example.com", ["kept"])
    await client.post(f"/bookmarks/{bookmark['id']}/archive")

    response = await client.get("/tags/")
    assert response.json()["tags"][0]["count"] == 1


async def test_list_tags_limit(client: AsyncClient) -> None:
    """limit returns only the most used tags."""
    await _create(client, "https://one.com", ["a", "b", "c"])
    await _create(client, "https://two.com", ["c"])

    response = await client.get("/tags/", params={"limit": 2})
    assert [t["name"] for t in response.json()["tags"]] == ["c", "a"]


async def test_list_tags_sidebar(client: AsyncClient) -> None:
    """sidebar=true caps the list at the configured sidebar size."""
    await _create(client, "https://many.com", [f"tag{i:02d}" for i in range(20)])
    await _create(client, "https://more.com", ["extra"])

    response = await client.get("/tags/", params={"sidebar": "true"})
    assert len(response.json()["tags"]) == 20


async def test_list_tags_invalid_limit(client: AsyncClient) -> None:
    """limit must be positive."""
    response = await client.get("/tags/", params={"limit": 0})
    assert response.status_code == 422
