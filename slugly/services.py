import logging
import os
from typing import Optional

from asyncpg import Connection

from slugly.helpers import make_slug
from slugly.models import ShortLink
from slugly.repository import (
    getShortLinkBySlug,
    getShortLinkByURL,
    incrementHitCount,
    insertShortLink,
)

logger = logging.getLogger(__name__)

SLUG_MAX_ATTEMPTS = int(os.getenv("SLUG_MAX_ATTEMPTS", 10))


class InvalidInput(Exception):
    def __init__(self, details: str):
        self.details = details
        self.message = f"Invalid input: {details}"
        super().__init__(self.message)


class SlugOccupied(Exception):
    def __init__(self, slug: str, original_url: Optional[str] = None):
        self.slug = slug
        self.original_url = original_url
        if original_url is None:
            self.message = f"Slug '{slug}' is already in use."
        else:
            self.message = f"URL {original_url} is already shortened as '{slug}'."
        super().__init__(self.message)


class SlugTooManyTries(Exception):
    def __init__(self, original_url: str, attempts: int):
        self.original_url = original_url
        self.attempts = attempts
        self.message = (
            f"Unable to find a free slug for {original_url} "
            f"after {attempts} attempts, try again later."
        )
        super().__init__(self.message)


class RecordNotFound(Exception):
    def __init__(self, record_type: str, identifier: str):
        self.record_type = record_type
        self.identifier = identifier
        self.message = f"{record_type} not found for identifier: {identifier}"
        super().__init__(self.message)


class UpsertFailed(Exception):
    def __init__(self, operation: str, details: str):
        self.operation = operation
        self.details = details
        self.message = f"Upsert operation '{operation}' failed: {details}"
        super().__init__(self.message)


async def findFreeSlug(conn: Connection, original_url: str) -> str:
    for attempt in range(SLUG_MAX_ATTEMPTS):
        slug = make_slug(original_url, attempt)
        existing = await getShortLinkBySlug(conn, slug)
        if existing is None or existing.original_url == original_url:
            return slug
        logger.warning(
            f"Slug collision on attempt {attempt}: {slug} is taken by "
            f"{existing.original_url}"
        )

    logger.error(f"No free slug found for url: {original_url}")
    raise SlugTooManyTries(original_url, SLUG_MAX_ATTEMPTS)


async def shortenURL(
    conn: Connection, original_url: str, client_ip: str, slug: Optional[str] = None
) -> ShortLink:
    existing = await getShortLinkByURL(conn, original_url)
    if existing is not None:
        if slug is not None and slug != existing.slug:
            logger.warning(
                f"Requested slug {slug} for {original_url}, "
                f"already shortened as {existing.slug}"
            )
            raise SlugOccupied(existing.slug, original_url)

        link = await incrementHitCount(conn, existing.slug)
        if link is None:
            raise UpsertFailed("Hit count", f"Failed to count hit for {existing.slug}")
        logger.info(
            f"URL shortened again by {client_ip}: {link.original_url} -> "
            f"{link.slug} ({link.hit_count} hits)"
        )
        return link

    requested_slug = slug
    if requested_slug is not None:
        if await getShortLinkBySlug(conn, requested_slug) is not None:
            logger.warning(f"Requested slug already in use: {requested_slug}")
            raise SlugOccupied(requested_slug)
    else:
        slug = await findFreeSlug(conn, original_url)

    link = await insertShortLink(conn, slug, original_url, client_ip)
    if link is None:
        logger.error(f"Could not insert the slug for url: {original_url}")
        raise UpsertFailed(
            "Short link", f"Failed to create or update link for {original_url}"
        )

    # A concurrent request stored this URL first, under another slug.
    if requested_slug is not None and link.slug != requested_slug:
        logger.warning(
            f"Requested slug {requested_slug} for {original_url}, "
            f"concurrently shortened as {link.slug}"
        )
        raise SlugOccupied(link.slug, original_url)

    logger.info(f"URL shortened by {client_ip}: {link.original_url} -> {link.slug}")
    return link


async def findMatchingURL(conn: Connection, slug: str) -> str:
    link = await incrementHitCount(conn, slug)
    if link is None:
        logger.error(f"Cannot find matching URL for slug: {slug}")
        raise RecordNotFound("Original URL", slug)

    logger.info(f"Redirecting: {slug} -> {link.original_url} ({link.hit_count} hits)")
    return link.original_url
