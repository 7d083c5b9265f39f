"""
Extraction of the ``window.__INITIAL_STATE__`` blob that xiaohongshu pages
render into a ``<script>`` element.

The blob is a JavaScript object literal rather than JSON: absent values are
written as the bare token ``undefined``. Those tokens are rewritten to
``null`` before parsing; string values that merely contain the word are
left alone. This is a platform quirk, not a general JSON extension.
"""

import json
import re

from bs4 import BeautifulSoup

from .errors import StateNotFoundError, StateParseError, StateShapeError

STATE_MARKER = "window.__INITIAL_STATE__="

# A JSON string literal, or a bare ``undefined`` token outside of one.
_UNDEFINED_RE = re.compile(r'"(?:[^"\\]|\\.)*"|\bundefined\b')


def find_state_script(page: str, marker: str = STATE_MARKER) -> str:
    soup = BeautifulSoup(page, "html.parser")
    for script in soup.find_all("script"):
        text = script.string
        if text and text.startswith(marker):
            return str(text)
    raise StateNotFoundError("小红书: 页面中没有找到 __INITIAL_STATE__")


def normalize_literal(raw: str) -> str:
    """Rewrite every bare ``undefined`` token to ``null``."""
    return _UNDEFINED_RE.sub(lambda m: "null" if m.group(0) == "undefined" else m.group(0), raw)


def extract_state(page: str, marker: str = STATE_MARKER) -> dict:
    script = find_state_script(page, marker)
    raw = normalize_literal(script[len(marker):].strip().rstrip(";"))
    try:
        state = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StateParseError(f"小红书: 页面状态无法解析: {e}") from e
    if not isinstance(state, dict):
        raise StateParseError("小红书: 页面状态不是对象")
    return state


def _dig(state: dict, path: str):
    value = state
    walked = []
    for key in path.split("."):
        walked.append(key)
        if not isinstance(value, dict) or value.get(key) is None:
            raise StateShapeError(".".join(walked))
        value = value[key]
    return value


def get_user(state: dict) -> dict:
    """Return the ``user`` subtree of a profile page.

    Guarantees ``userPageData.basicInfo`` is a mapping and ``notes`` is a list.
    """
    if not isinstance(_dig(state, "user.userPageData.basicInfo"), dict):
        raise StateShapeError("user.userPageData.basicInfo")
    if not isinstance(_dig(state, "user.notes"), list):
        raise StateShapeError("user.notes")
    return state["user"]


def get_note_detail(state: dict) -> dict:
    """Resolve ``note.noteDetailMap[note.firstNoteId].note`` on a detail page."""
    first_id = _dig(state, "note.firstNoteId")
    detail_map = _dig(state, "note.noteDetailMap")
    entry = detail_map.get(first_id) if isinstance(detail_map, dict) else None
    note = entry.get("note") if isinstance(entry, dict) else None
    if not isinstance(note, dict):
        raise StateShapeError(f"note.noteDetailMap.{first_id}.note")
    return note


def require(mapping: dict, key: str, path: str):
    """Return ``mapping[key]``. The key must exist; a null or empty value is allowed."""
    if not isinstance(mapping, dict) or key not in mapping:
        raise StateShapeError(path)
    return mapping[key]
