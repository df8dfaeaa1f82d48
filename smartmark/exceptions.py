"""Exceptions shared by the form, list and storage layers."""


class InvalidUrlError(ValueError):
    """Raised when user input cannot be turned into an absolute URL."""

    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(f"Invalid URL: {raw!r}")


class BookmarkNotFoundError(Exception):
    """Raised when a bookmark id is not present in the store."""

    def __init__(self, bookmark_id: int) -> None:
        self.bookmark_id = bookmark_id
        super().__init__(f"Bookmark not found: {bookmark_id}")


class UnknownActionError(Exception):
    """Raised when a list row is asked to perform an action it does not offer."""

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"Unknown bookmark action: {action}")
