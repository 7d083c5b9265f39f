import re

_STICKER_RE = re.compile(r"\[.*?\]")
_TOPIC_RE = re.compile(r"#(.*?)#")
_NEWLINE_RE = re.compile(r"\r\n|\r|\n")


def normalize_desc(text: str) -> str:
    """Clean a note description for use inside an HTML description.

    Drops ``[表情]`` sticker codes, turns ``#话题#`` into ``#话题`` and
    newlines into ``<br>``. The remaining text is not HTML-escaped.
    """
    text = _STICKER_RE.sub("", text or "")
    text = _TOPIC_RE.sub(r"#\1", text)
    return text.replace("\n", "<br>")


def format_text(text: str) -> str:
    """Profile bio / summary cleanup: any newline style to ``<br>``, tab to ``&emsp;``."""
    return _NEWLINE_RE.sub("<br>", text or "").replace("\t", "&emsp;")
