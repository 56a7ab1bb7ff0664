import logging
from typing import AsyncIterator, Optional

import httpx

from config import settings
from errors import UpstreamFetchError

logger = logging.getLogger(__name__)


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(timeout=settings.FETCH_TIMEOUT, follow_redirects=True) as client:
        yield client


async def fetch_bytes(
    client: httpx.AsyncClient,
    url: str,
    params: Optional[dict] = None,
    headers: Optional[dict] = None,
) -> tuple[bytes, str]:
    """GET ``url`` and return the body and its content type.

    The body is read incrementally and abandoned once it grows past
    MAX_FETCH_BYTES. Transport errors and non-2xx statuses are raised as
    UpstreamFetchError.
    """
    limit = settings.MAX_FETCH_BYTES
    try:
        async with client.stream("GET", url, params=params, headers=headers) as response:
            response.raise_for_status()
            body = bytearray()
            async for chunk in response.aiter_bytes():
                body.extend(chunk)
                if len(body) > limit:
                    logger.warning("Response from %s exceeded %d bytes", url, limit)
                    raise UpstreamFetchError(details=f"Response larger than {limit} bytes")
            content_type = response.headers.get("content-type", "")
    except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError) as e:
        logger.warning("GET %s failed: %s", url, e)
        raise UpstreamFetchError(details=str(e)) from e
    return bytes(body), content_type
