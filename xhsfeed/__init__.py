__version__ = "0.1.0"

from .cache import MemoryCache, default_cache
from .config import Settings, load_settings
from .errors import (
    FeedError,
    FetchError,
    StateError,
    StateNotFoundError,
    StateParseError,
    StateShapeError,
)
from .feed import NotesFeed, build_feed
from .models import Feed, FeedItem, NoteContent, PostDetail, PostSummary, Profile
from .state import extract_state, get_note_detail, get_user
from .text import format_text, normalize_desc

__all__ = [
    "MemoryCache",
    "default_cache",
    "Settings",
    "load_settings",
    "FeedError",
    "FetchError",
    "StateError",
    "StateNotFoundError",
    "StateParseError",
    "StateShapeError",
    "NotesFeed",
    "build_feed",
    "Feed",
    "FeedItem",
    "NoteContent",
    "PostDetail",
    "PostSummary",
    "Profile",
    "extract_state",
    "get_note_detail",
    "get_user",
    "format_text",
    "normalize_desc",
]
