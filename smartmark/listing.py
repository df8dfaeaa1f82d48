"""Bookmark list rendering state.

`build_list_view` turns the externally owned collection into a ListView; the
templates only project that value. Row actions are forwarded to handlers
supplied by the collection's owner and never touch the list itself.
"""
import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence

from .display import (
    FAVICON_ENDPOINT,
    domain_of,
    fallback_color,
    favicon_url,
    initial_of,
    time_ago,
)
from .exceptions import UnknownActionError
from .models import Bookmark

logger = logging.getLogger(__name__)

SKELETON_COUNT = 3
COPY_FEEDBACK_SECONDS = 1.5


class ListMode(str, Enum):
    LOADING = "loading"
    EMPTY_SEARCH = "empty_search"
    EMPTY_ALL = "empty_all"
    POPULATED = "populated"


@dataclass
class BookmarkRow:
    id: int
    title: str
    url: str
    domain: str
    is_favorite: bool
    favicon_url: Optional[str]
    initial: str
    color: str
    age: Optional[str]


@dataclass
class ListView:
    mode: ListMode
    query: str = ""
    rows: List[BookmarkRow] = field(default_factory=list)
    skeletons: int = 0

    @property
    def count(self) -> int:
        return len(self.rows)

    @property
    def heading(self) -> str:
        return "Search results" if self.query else "Your links"

    @property
    def count_label(self) -> str:
        return f"{self.count} {'link' if self.count == 1 else 'links'}"


def list_mode(loading: bool, bookmarks: Sequence[Bookmark], search_query: Optional[str]) -> ListMode:
    if loading:
        return ListMode.LOADING
    if not bookmarks:
        return ListMode.EMPTY_SEARCH if search_query else ListMode.EMPTY_ALL
    return ListMode.POPULATED


def build_row(
    bookmark: Bookmark,
    now: Optional[datetime] = None,
    favicon_endpoint: str = FAVICON_ENDPOINT,
    favicon_check: Optional[Callable[[str], bool]] = None,
) -> BookmarkRow:
    domain = domain_of(bookmark.url)
    icon = favicon_url(bookmark.url, favicon_endpoint)
    if icon is not None and favicon_check is not None and not favicon_check(icon):
        icon = None
    return BookmarkRow(
        id=bookmark.id,
        title=bookmark.title,
        url=bookmark.url,
        domain=domain,
        is_favorite=bool(bookmark.is_favorite),
        favicon_url=icon,
        initial=initial_of(domain),
        color=fallback_color(domain),
        age=time_ago(bookmark.created_at, now) if bookmark.created_at else None,
    )


def build_list_view(
    bookmarks: Sequence[Bookmark],
    loading: bool = False,
    search_query: Optional[str] = None,
    now: Optional[datetime] = None,
    favicon_endpoint: str = FAVICON_ENDPOINT,
    favicon_check: Optional[Callable[[str], bool]] = None,
) -> ListView:
    """
    Project the collection into one of the four list modes.

    Rows keep the caller's order; filtering by `search_query` has already
    happened upstream and the query is only used for labels.
    """
    query = search_query or ""
    mode = list_mode(loading, bookmarks, query)
    if mode is ListMode.LOADING:
        return ListView(mode=mode, query=query, skeletons=SKELETON_COUNT)
    if mode is not ListMode.POPULATED:
        return ListView(mode=mode, query=query)

    rows = [
        build_row(b, now=now, favicon_endpoint=favicon_endpoint, favicon_check=favicon_check)
        for b in bookmarks
    ]
    return ListView(mode=mode, query=query, rows=rows)


@dataclass
class ListHandlers:
    on_favorite: Callable[[int], Any]
    on_edit: Callable[[Bookmark], Any]
    on_delete: Callable[[int, str], Any]


ROW_ACTIONS = ("favorite", "edit", "delete")


def dispatch_action(action: str, bookmark: Bookmark, handlers: ListHandlers) -> Any:
    """Forward a row action to its handler and return whatever it returns."""
    if action == "favorite":
        return handlers.on_favorite(bookmark.id)
    if action == "edit":
        return handlers.on_edit(bookmark)
    if action == "delete":
        return handlers.on_delete(bookmark.id, bookmark.title)
    raise UnknownActionError(action)


class CopyFeedback:
    """
    Copy-to-clipboard affordance with a short-lived "copied" state.

    `write(text)` is the platform clipboard and may be sync or async. A
    failed write leaves `copied` unset and is not reported to the user.
    """

    def __init__(self, write: Callable[[str], Any], revert_after: float = COPY_FEEDBACK_SECONDS):
        self.write = write
        self.revert_after = revert_after
        self.copied = False
        self._timer: Optional[asyncio.TimerHandle] = None

    async def copy(self, text: str) -> bool:
        try:
            result = self.write(text)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.debug("Clipboard write failed", exc_info=True)
            return False

        self.copied = True
        if self._timer is not None:
            self._timer.cancel()
        self._timer = asyncio.get_running_loop().call_later(self.revert_after, self._revert)
        return True

    def _revert(self):
        self.copied = False
        self._timer = None
