import json
import logging
from typing import Annotated, Optional, Tuple

from asyncpg import Connection
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError

from slugly.dependencies import get_db_conn
from slugly.models import ShortenRequest, ShortLink
from slugly.services import (
    InvalidInput,
    RecordNotFound,
    SlugOccupied,
    SlugTooManyTries,
    UpsertFailed,
    findMatchingURL,
    shortenURL,
)

logger = logging.getLogger(__name__)
router = APIRouter()


# Request helpers
def get_client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client is None:
        return "unknown"
    return request.client.host


async def parse_shorten_body(request: Request) -> Tuple[str, Optional[str]]:
    """Extract (url, slug) from a JSON object, a JSON string or a raw body."""

    try:
        body = (await request.body()).decode("utf-8")
    except UnicodeDecodeError:
        raise InvalidInput("request body is not valid UTF-8")

    url, slug = body, None
    content_type = request.headers.get("content-type", "")
    if content_type.split(";")[0].strip().lower() == "application/json":
        try:
            payload = json.loads(body)
        except json.JSONDecodeError as exc:
            raise InvalidInput(f"error parsing json: {exc}")

        if isinstance(payload, str):
            url = payload
        elif isinstance(payload, dict):
            try:
                shorten_request = ShortenRequest.model_validate(payload)
            except ValidationError as exc:
                errors = "; ".join(
                    f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}"
                    for error in exc.errors()
                )
                raise InvalidInput(errors)
            url, slug = shorten_request.url, shorten_request.slug
        else:
            raise InvalidInput("expected a JSON object or string")

    url = url.strip()
    if not url:
        raise InvalidInput("url must not be empty")
    return url, slug


# Routes
@router.get("/health")
def health_check():
    health_status = {"status": "healthy"}
    logger.info("Health Check: OK")
    return JSONResponse(content=health_status, status_code=status.HTTP_200_OK)


@router.post("/", response_model=ShortLink)
async def shorten(
    request: Request,
    conn: Annotated[Connection, Depends(get_db_conn)],
):
    try:
        url, slug = await parse_shorten_body(request)
    except InvalidInput as exc:
        logger.warning(f"Rejected shorten request: {exc.details}")
        return JSONResponse(
            status_code=400,
            content={"error": "Bad request", "detail": str(exc)},
        )

    async with conn.transaction():
        try:
            client_ip = get_client_ip(request)
            result = await shortenURL(conn, url, client_ip, slug)
            return result

        except SlugOccupied as exc:
            return JSONResponse(
                status_code=409,
                content={"error": "Conflict", "detail": str(exc)},
            )

        except SlugTooManyTries as exc:
            return JSONResponse(
                status_code=408,
                content={"error": "Request timeout", "detail": str(exc)},
            )

        except UpsertFailed as exc:
            return JSONResponse(
                status_code=500,
                content={"error": "Internal Server Error", "detail": str(exc)},
            )

        except Exception as exc:
            logger.error(f"Error shortening URL: {str(exc)}")
            return JSONResponse(
                status_code=500,
                content={"error": "Internal server error", "detail": str(exc)},
            )


@router.get("/{slug}")
async def redirect(
    conn: Annotated[Connection, Depends(get_db_conn)],
    slug: str,
):
    async with conn.transaction():
        try:
            original_url = await findMatchingURL(conn, slug)
            return RedirectResponse(url=original_url)

        except RecordNotFound as exc:
            return JSONResponse(
                status_code=404,
                content={"error": "Content not found", "detail": str(exc)},
            )

        except Exception as exc:
            logger.error(f"Error redirecting URL: {str(exc)}")
            return JSONResponse(
                status_code=500,
                content={"error": "Internal server error", "detail": str(exc)},
            )
