from datetime import datetime
from unittest.mock import AsyncMock

import pytest

from slugly.repository import (
    getShortLinkBySlug,
    getShortLinkByURL,
    incrementHitCount,
    insertShortLink,
)

TEST_IP = "127.0.0.1"
TEST_SLUG = "abc1234"
TEST_URL = "https://example.com"


@pytest.fixture
def mock_conn():
    return AsyncMock()


def create_link_row(hit_count=1):
    return {
        "slug": TEST_SLUG,
        "original_url": TEST_URL,
        "requester_ip": TEST_IP,
        "hit_count": hit_count,
        "created_at": datetime.now(),
    }


@pytest.mark.asyncio
async def test_insert_short_link(mock_conn):
    mock_conn.fetchrow.return_value = create_link_row()

    link = await insertShortLink(mock_conn, TEST_SLUG, TEST_URL, TEST_IP)

    assert link.slug == TEST_SLUG
    assert link.hit_count == 1
    query, *args = mock_conn.fetchrow.call_args.args
    assert "ON CONFLICT (original_url)" in query
    assert args == [TEST_SLUG, TEST_URL, TEST_IP]


@pytest.mark.asyncio
async def test_insert_short_link_no_row(mock_conn):
    mock_conn.fetchrow.return_value = None
    assert await insertShortLink(mock_conn, TEST_SLUG, TEST_URL, TEST_IP) is None


@pytest.mark.asyncio
async def test_get_short_link_by_url(mock_conn):
    mock_conn.fetchrow.return_value = create_link_row(hit_count=4)

    link = await getShortLinkByURL(mock_conn, TEST_URL)

    assert link.original_url == TEST_URL
    assert link.hit_count == 4
    assert mock_conn.fetchrow.call_args.args[1] == TEST_URL


@pytest.mark.asyncio
async def test_get_short_link_by_slug_missing(mock_conn):
    mock_conn.fetchrow.return_value = None
    assert await getShortLinkBySlug(mock_conn, TEST_SLUG) is None
    assert mock_conn.fetchrow.call_args.args[1] == TEST_SLUG


@pytest.mark.asyncio
async def test_increment_hit_count(mock_conn):
    mock_conn.fetchrow.return_value = create_link_row(hit_count=2)

    link = await incrementHitCount(mock_conn, TEST_SLUG)

    assert link.hit_count == 2
    assert "hit_count = hit_count + 1" in mock_conn.fetchrow.call_args.args[0]
