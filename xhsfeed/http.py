import asyncio
import logging

import httpx

from .config import Settings
from .errors import FetchError

logger = logging.getLogger("xhsfeed")

DESKTOP_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)


def _headers(cookie: str = "") -> dict[str, str]:
    headers = {
        "User-Agent": DESKTOP_UA,
        "Accept-Language": "zh-CN,zh;q=0.9,en;q=0.8",
    }
    if cookie:
        headers["Cookie"] = cookie
    return headers


def new_client(settings: Settings, **kwargs) -> httpx.AsyncClient:
    return httpx.AsyncClient(follow_redirects=True, timeout=settings.timeout, **kwargs)


async def fetch_text(client: httpx.AsyncClient, url: str, cookie: str = "",
                     max_retries: int = 1) -> str:
    """GET a page and return its body, with exponential backoff retry.

    Only transport errors and HTTP 429 are retried, and only when
    ``max_retries`` allows more than one attempt. Everything else
    becomes a FetchError straight away.
    """
    last_exc = None
    for attempt in range(max(1, max_retries)):
        if attempt:
            wait = 2 ** attempt
            logger.warning(f"Retry {attempt}/{max_retries - 1} for {url} in {wait}s: {last_exc}")
            await asyncio.sleep(wait)
        try:
            logger.debug(f"GET {url}")
            resp = await client.get(url, headers=_headers(cookie))
            resp.raise_for_status()
            return resp.text
        except httpx.HTTPStatusError as e:
            code = e.response.status_code
            if code != 429:
                raise FetchError(url, f"HTTP {code}", status_code=code) from e
            last_exc = e
        except (httpx.TransportError, httpx.TimeoutException) as e:
            last_exc = e
        except httpx.HTTPError as e:
            raise FetchError(url, str(e) or type(e).__name__) from e
    status = last_exc.response.status_code if isinstance(last_exc, httpx.HTTPStatusError) else 0
    raise FetchError(url, f"请求失败 ({max(1, max_retries)} 次): {last_exc}", status_code=status) from last_exc
