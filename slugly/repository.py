from typing import Optional

from asyncpg import Connection

from slugly.models import ShortLink

SHORT_LINK_COLUMNS = "slug, original_url, requester_ip, hit_count, created_at"


def _toShortLink(result) -> Optional[ShortLink]:
    if result:
        return ShortLink(
            slug=result["slug"],
            original_url=result["original_url"],
            requester_ip=result["requester_ip"],
            hit_count=result["hit_count"],
            created_at=result["created_at"],
        )
    return None


async def insertShortLink(
    conn: Connection, slug: str, original_url: str, requester_ip: str
) -> Optional[ShortLink]:
    # A concurrent insert of the same URL turns into a hit on the existing row.
    result = await conn.fetchrow(
        f"""
        INSERT INTO short_links (slug, original_url, requester_ip, hit_count)
        VALUES ($1, $2, $3, 1)
        ON CONFLICT (original_url) DO UPDATE
        SET hit_count = short_links.hit_count + 1
        RETURNING {SHORT_LINK_COLUMNS}
        """,
        slug,
        original_url,
        requester_ip,
    )
    return _toShortLink(result)


async def getShortLinkByURL(
    conn: Connection, original_url: str
) -> Optional[ShortLink]:
    result = await conn.fetchrow(
        f"""
        SELECT {SHORT_LINK_COLUMNS} FROM short_links WHERE original_url = $1
        """,
        original_url,
    )
    return _toShortLink(result)


async def getShortLinkBySlug(conn: Connection, slug: str) -> Optional[ShortLink]:
    result = await conn.fetchrow(
        f"""
        SELECT {SHORT_LINK_COLUMNS} FROM short_links WHERE slug = $1
        """,
        slug,
    )
    return _toShortLink(result)


async def incrementHitCount(conn: Connection, slug: str) -> Optional[ShortLink]:
    result = await conn.fetchrow(
        f"""
        UPDATE short_links
        SET hit_count = hit_count + 1
        WHERE slug = $1
        RETURNING {SHORT_LINK_COLUMNS}
        """,
        slug,
    )
    return _toShortLink(result)
