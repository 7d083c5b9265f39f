import re
from urllib.parse import quote, unquote

import httpx

from .errors import StateShapeError
from .http import fetch_text
from .models import PostSummary, Profile
from .state import extract_state, get_user, require

PROFILE_URL = "https://www.xiaohongshu.com/user/profile/{user_id}"

_PROFILE_URL_RE = re.compile(r"xiaohongshu\.com/user/profile/([^/?#]+)")
_BARE_ID_RE = re.compile(r"^[^\s/]+$")


def parse_user_id(value: str) -> str:
    """Accept a bare user id or a profile link and return the id.

    Ids are opaque; anything without whitespace or ``/`` is taken as one.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError("用户 ID 不能为空")
    value = value.strip()
    m = _PROFILE_URL_RE.search(value)
    if m:
        return unquote(m.group(1))
    if _BARE_ID_RE.match(value):
        return value
    raise ValueError(f"无法识别的小红书用户: {value}")


def profile_url(user_id: str) -> str:
    return PROFILE_URL.format(user_id=quote(user_id, safe=""))


async def fetch_user(client: httpx.AsyncClient, url: str, cookie: str = "",
                     max_retries: int = 1) -> dict:
    page = await fetch_text(client, url, cookie=cookie, max_retries=max_retries)
    return get_user(extract_state(page))


def parse_profile(user: dict, user_id: str = "") -> Profile:
    info = user["userPageData"]["basicInfo"]
    return Profile(
        user_id=user_id,
        nickname=require(info, "nickname", "user.userPageData.basicInfo.nickname") or "",
        desc=info.get("desc", "") or "",
        avatar=info.get("imageb", "") or info.get("images", "") or "",
    )


def _cover_url(cover) -> str:
    if not isinstance(cover, dict):
        return ""
    url = cover.get("urlDefault") or cover.get("url") or ""
    if not url:
        # Largest rendition comes last
        info_list = cover.get("infoList") or []
        if info_list:
            if not isinstance(info_list, list) or not isinstance(info_list[-1], dict):
                raise StateShapeError("user.notes[].noteCard.cover.infoList")
            url = info_list[-1].get("url", "")
    return url


def flatten_notes(user: dict) -> list[PostSummary]:
    """Flatten the page's groups of note cards into one ordered list."""
    summaries = []
    for group in user["notes"]:
        for entry in group or []:
            card = entry.get("noteCard") if isinstance(entry, dict) else None
            if not isinstance(card, dict):
                raise StateShapeError("user.notes[].noteCard")
            note_id = card.get("noteId") or entry.get("id")
            if not note_id:
                raise StateShapeError("user.notes[].noteCard.noteId")
            author = card.get("user") or {}
            if not isinstance(author, dict):
                raise StateShapeError("user.notes[].noteCard.user")
            summaries.append(PostSummary(
                note_id=note_id,
                author=author.get("nickName", "") or author.get("nickname", ""),
                title=card.get("displayTitle", "") or "",
                cover=_cover_url(card.get("cover")),
            ))
    return summaries
