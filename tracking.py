import json
import logging
from typing import Any

import httpx

from config import settings
from errors import UpstreamFetchError
from fetch import fetch_bytes

logger = logging.getLogger(__name__)


async def fetch_tracking(client: httpx.AsyncClient, order_code: str) -> Any:
    if not settings.TRACKING_API_TOKEN:
        logger.error("TRACKING_API_TOKEN is not configured")
        raise UpstreamFetchError("Error tracking order", "Tracking API token not configured")
    try:
        body, _ = await fetch_bytes(
            client,
            settings.TRACKING_API_URL,
            params={"order_code": order_code},
            headers={"Token": settings.TRACKING_API_TOKEN},
        )
    except UpstreamFetchError as e:
        raise UpstreamFetchError("Error tracking order", e.details) from e
    try:
        return json.loads(body)
    except ValueError as e:
        logger.warning("Tracking API returned a non-JSON body for %s", order_code)
        raise UpstreamFetchError("Error tracking order", "Invalid JSON from tracking API") from e
