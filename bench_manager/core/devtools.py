"""Chromium DevTools HTTP endpoint client.

Only the target listing is used: GET http://127.0.0.1:<port>/json/list
returns one JSON object per target (page, service worker, extension, ...).
"""

import asyncio
import logging
from typing import List

import aiohttp

from .errors import BenchIOError, ParseError

logger = logging.getLogger("bench.devtools")

DEVTOOLS_HOST = "127.0.0.1"


def list_url(port: int) -> str:
    return f"http://{DEVTOOLS_HOST}:{port}/json/list"


def page_urls(targets: list) -> List[str]:
    """URLs of 'page' targets, in listing order.

    Examples:
        >>> page_urls([{"type": "page", "url": "https://a"}, {"type": "service_worker", "url": "x"}])
        ['https://a']
    """
    urls: List[str] = []
    for target in targets:
        if not isinstance(target, dict) or target.get("type") != "page":
            continue
        url = target.get("url")
        if url:
            urls.append(url)
    return urls


async def list_page_urls(port: int, timeout: float = 0.8) -> List[str]:
    """Fetch the open tab URLs of the browser listening on `port`.

    Raises:
        BenchIOError: If the endpoint is unreachable or answers with an error
        ParseError: If the listing is not a JSON array
    """
    url = list_url(port)
    logger.debug(f"GET {url}")
    try:
        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)) as session:
            async with session.get(url) as response:
                response.raise_for_status()
                targets = await response.json(content_type=None)
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise BenchIOError(f"DevTools endpoint {url} unreachable: {e}")
    except ValueError as e:
        raise ParseError(f"DevTools endpoint {url} returned invalid JSON: {e}")

    if not isinstance(targets, list):
        raise ParseError(f"DevTools endpoint {url} did not return a target list")
    return page_urls(targets)
