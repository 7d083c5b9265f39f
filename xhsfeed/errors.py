class FeedError(RuntimeError):
    """Root of every error raised while building a feed."""


class FetchError(FeedError):
    """Raised when a page fetch fails (HTTP status or transport)."""

    def __init__(self, url: str, message: str, status_code: int = 0):
        super().__init__(f"{message} [{url}]")
        self.url = url
        self.status_code = status_code


class StateError(FeedError, ValueError):
    """Problems with the page's embedded ``__INITIAL_STATE__`` blob."""


class StateNotFoundError(StateError):
    """No script on the page starts with the state marker."""


class StateParseError(StateError):
    """The state literal is not valid JSON even after normalization."""


class StateShapeError(StateError):
    """An expected field is missing from the parsed state."""

    def __init__(self, path: str):
        super().__init__(f"小红书: 页面状态缺少字段 {path}")
        self.path = path
