import logging
from datetime import datetime, timezone

import httpx

from .cache import MemoryCache
from .errors import StateShapeError
from .http import fetch_text
from .models import NoteContent, PostDetail
from .state import extract_state, get_note_detail, require
from .text import normalize_desc

logger = logging.getLogger("xhsfeed")

MODE_FULLTEXT = "fulltext"
MODE_IMAGES = "images"


def _ms_to_datetime(ms):
    """Millisecond timestamp to an aware UTC datetime."""
    try:
        ms = int(ms)
        if ms > 0:
            return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    except (ValueError, TypeError, OverflowError, OSError):
        pass
    return None


def parse_detail(note: dict) -> PostDetail:
    """Read a detail record; title, desc and imageList must be present."""
    image_list = require(note, "imageList", "note.imageList") or []
    if not isinstance(image_list, list) or not all(isinstance(img, dict) for img in image_list):
        raise StateShapeError("note.imageList")
    return PostDetail(
        title=require(note, "title", "note.title") or "",
        desc=require(note, "desc", "note.desc") or "",
        images=tuple(img["urlDefault"] for img in image_list if img.get("urlDefault")),
        pub_date=_ms_to_datetime(note.get("time")),
    )


def render_description(detail: PostDetail, mode: str) -> str:
    images = "".join(f'<img src="{url}">' for url in detail.images)
    if mode == MODE_IMAGES:
        return images
    return f"{images}<br>{detail.title}<br>{normalize_desc(detail.desc)}"


async def get_full_note(client: httpx.AsyncClient, link: str, mode: str,
                        cache: MemoryCache, cookie: str = "",
                        max_retries: int = 1) -> NoteContent:
    """Return a note's rendered content, from the cache when possible.

    The cache key is the note link alone, so an entry rendered in one mode
    is served to requests in the other until it expires.
    """
    cached = cache.get(link)
    if cached is not None:
        logger.debug(f"cache hit {link}")
        return cached

    page = await fetch_text(client, link, cookie=cookie, max_retries=max_retries)
    detail = parse_detail(get_note_detail(extract_state(page)))
    content = NoteContent(
        title=detail.title,
        description=render_description(detail, mode),
        pub_date=detail.pub_date,
    )
    cache.set(link, content)
    return content
