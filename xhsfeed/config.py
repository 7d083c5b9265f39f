"""Runtime settings, read from the environment and ``~/.xhsfeed/cookies.json``."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger("xhsfeed")

COOKIE_ENV = "XIAOHONGSHU_COOKIE"
DEFAULT_COOKIE_PATH = Path.home() / ".xhsfeed" / "cookies.json"

PARSE_EXCEPTIONS = (
    json.JSONDecodeError,
    ValueError,
    TypeError,
)


@dataclass(frozen=True)
class Settings:
    cookie: str = ""
    timeout: float = 15.0
    max_retries: int = 1
    concurrency: int = 8  # 0 = no limit
    cache_ttl: float = 3600.0


def _load_cookies(path: Path) -> dict:
    """Load cookies from a cookies.json file if it exists."""
    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            return data if isinstance(data, dict) else {}
        except (OSError, *PARSE_EXCEPTIONS) as e:
            logger.warning(f"Failed to load cookies: {e}")
    return {}


def _cookie_header(entry) -> str:
    """Turn a cookies.json entry into a Cookie header value. Supports:
    - Raw string: {"xiaohongshu": "a1=xxx; web_session=yyy"}
    - Simple: {"xiaohongshu": {"web_session": "yyy"}}
    - Auth format: {"xiaohongshu": {"cookies": {"web_session": "yyy"}, "updated_at": "..."}}
    """
    if isinstance(entry, str):
        return entry.strip()
    if not isinstance(entry, dict):
        return ""
    if isinstance(entry.get("cookies"), dict):
        entry = entry["cookies"]
    return "; ".join(f"{k}={v}" for k, v in entry.items() if isinstance(v, str))


def _number_from_env(env: Mapping[str, str], key: str, default, cast):
    raw = env.get(key)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        logger.warning(f"Invalid value for {key}={raw!r}; using default {default}")
        return default
    if value < 0:
        logger.warning(f"Negative value for {key}={raw!r}; using default {default}")
        return default
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None,
                  cookie_path: Optional[Path] = None) -> Settings:
    env = os.environ if environ is None else environ

    cookie = (env.get(COOKIE_ENV) or "").strip()
    if not cookie:
        stored = _load_cookies(cookie_path or DEFAULT_COOKIE_PATH)
        cookie = _cookie_header(stored.get("xiaohongshu", ""))

    return Settings(
        cookie=cookie,
        timeout=_number_from_env(env, "XHSFEED_TIMEOUT", 15.0, float),
        max_retries=max(1, _number_from_env(env, "XHSFEED_MAX_RETRIES", 1, int)),
        concurrency=_number_from_env(env, "XHSFEED_CONCURRENCY", 8, int),
        cache_ttl=_number_from_env(env, "XHSFEED_CACHE_TTL", 3600.0, float),
    )
