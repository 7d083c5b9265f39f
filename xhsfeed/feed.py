"""
Feed building for a xiaohongshu user's notes.

Two pipelines share one entry point:

- basic: the profile page alone; one item per note card, cover image plus
  display title. The profile fetch is cached per profile URL.
- full text: only with a cookie configured and a mode requested. Every note
  page is fetched (bounded by ``Settings.concurrency``) and rendered as its
  images, optionally followed by title and description. Items keep the
  profile order. One failed note fails the whole feed.

Both pipelines run the profile bio through ``format_text`` for the feed
description; full-text feeds used to carry the bio unformatted.
"""

import asyncio
import logging
from typing import Optional

import httpx

from .cache import MemoryCache, default_cache
from .config import Settings, load_settings
from .enrich import MODE_FULLTEXT, MODE_IMAGES, get_full_note
from .http import new_client
from .models import Feed, FeedItem, PostSummary, Profile
from .profile import fetch_user, flatten_notes, parse_profile, parse_user_id, profile_url
from .text import format_text, normalize_desc

logger = logging.getLogger("xhsfeed")

MODES = ("", MODE_FULLTEXT, MODE_IMAGES)


def feed_title(profile: Profile) -> str:
    return f"{profile.nickname} - 笔记 • 小红书 / RED"


def format_note(url: str, note: PostSummary) -> FeedItem:
    return FeedItem(
        title=note.title,
        link=f"{url}/{note.note_id}",
        description=f'<img src="{note.cover}"><br>{normalize_desc(note.title)}',
        author=note.author,
        guid=note.note_id,
    )


class NotesFeed:
    """Builds the notes feed of one user per call. Owns its HTTP client."""

    platform = "xiaohongshu"

    def __init__(self, settings: Optional[Settings] = None,
                 cache: Optional[MemoryCache] = None,
                 client: Optional[httpx.AsyncClient] = None):
        self.settings = settings or load_settings()
        self.cache = cache if cache is not None else default_cache(self.settings.cache_ttl)
        self.client = client or new_client(self.settings)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
        return False

    async def aclose(self) -> None:
        await self.client.aclose()

    async def build(self, user: str, mode: str = "") -> Feed:
        if mode not in MODES:
            raise ValueError(f"未知模式: {mode!r}，可选 fulltext / images")
        user_id = parse_user_id(user)
        url = profile_url(user_id)
        if self.settings.cookie and mode:
            return await self._build_fulltext(url, user_id, mode)
        if mode:
            logger.info(f"未配置小红书 cookie，{mode} 模式退回基础模式")
        return await self._build_basic(url, user_id)

    async def _build_basic(self, url: str, user_id: str) -> Feed:
        async def fetch():
            user = await fetch_user(self.client, url, cookie=self.settings.cookie,
                                    max_retries=self.settings.max_retries)
            return parse_profile(user, user_id), flatten_notes(user)

        profile, notes = await self.cache.try_get(url, fetch)
        return self._feed(url, profile, [format_note(url, n) for n in notes])

    async def _build_fulltext(self, url: str, user_id: str, mode: str) -> Feed:
        user = await fetch_user(self.client, url, cookie=self.settings.cookie,
                                max_retries=self.settings.max_retries)
        profile = parse_profile(user, user_id)
        items = await self.render_notes_fulltext(flatten_notes(user), url, mode)
        return self._feed(url, profile, items)

    async def render_notes_fulltext(self, notes: list[PostSummary], url: str,
                                    mode: str) -> list[FeedItem]:
        """Fetch every note page concurrently, keeping the input order."""
        limit = self.settings.concurrency or len(notes) or 1
        semaphore = asyncio.Semaphore(limit)
        logger.debug(f"fetching {len(notes)} notes, limit {limit}")

        async def render(note: PostSummary) -> FeedItem:
            link = f"{url}/{note.note_id}"
            async with semaphore:
                content = await get_full_note(
                    self.client, link, mode, self.cache,
                    cookie=self.settings.cookie,
                    max_retries=self.settings.max_retries,
                )
            return FeedItem(
                title=content.title,
                link=link,
                description=content.description,
                author=note.author,
                guid=note.note_id,
                pub_date=content.pub_date,
            )

        tasks = [asyncio.ensure_future(render(note)) for note in notes]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    @staticmethod
    def _feed(url: str, profile: Profile, items: list[FeedItem]) -> Feed:
        return Feed(
            title=feed_title(profile),
            description=format_text(profile.desc),
            image=profile.avatar,
            link=url,
            items=items,
        )


async def build_feed(user: str, mode: str = "", settings: Optional[Settings] = None,
                     cache: Optional[MemoryCache] = None) -> Feed:
    """Unified entry: build one feed with a short-lived client."""
    async with NotesFeed(settings=settings, cache=cache) as feed:
        return await feed.build(user, mode)
