import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import List, Optional

from .exceptions import BookmarkNotFoundError
from .models import AppState, Bookmark, utcnow

logger = logging.getLogger(__name__)


def load_state(path: Path) -> AppState:
    if not path.exists():
        return AppState()
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return AppState.model_validate(data)


def save_state(state: AppState, path: Path):
    """Write `state` to a temp file beside `path`, then swap it into place."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(state.model_dump(mode="json"), f, indent=2)
        os.replace(tmp, path)
    except Exception:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


class BookmarkStore:
    """
    JSON-file backed owner of the bookmark collection.

    This is the persistence collaborator the form and list call into. The
    collection is kept newest first. Every change builds a new AppState,
    writes it, and only then replaces `self.state`, all under one lock, so a
    failed write leaves memory and disk as they were.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.state = load_state(self.path)
        self._lock = threading.RLock()

    def _commit(self, state: AppState):
        save_state(state, self.path)
        self.state = state

    def bookmarks(self) -> List[Bookmark]:
        return list(self.state.bookmarks)

    def get(self, bookmark_id: int) -> Bookmark:
        bookmark = next((b for b in self.state.bookmarks if b.id == bookmark_id), None)
        if bookmark is None:
            raise BookmarkNotFoundError(bookmark_id)
        return bookmark

    def search(self, query: Optional[str]) -> List[Bookmark]:
        q = (query or "").strip().lower()
        if not q:
            return self.bookmarks()
        return [
            b for b in self.state.bookmarks
            if q in b.title.lower() or q in b.url.lower()
        ]

    def create(self, title: str, url: str) -> Bookmark:
        """Persist a new bookmark and return it; OSError propagates."""
        with self._lock:
            bookmark = Bookmark(
                id=self.state.next_id,
                title=title,
                url=url,
                created_at=utcnow(),
            )
            self._commit(AppState(
                next_id=self.state.next_id + 1,
                bookmarks=[bookmark, *self.state.bookmarks],
            ))
        logger.info("Added bookmark id=%s url=%s", bookmark.id, url)
        return bookmark

    def add(self, title: str, url: str) -> bool:
        try:
            self.create(title, url)
        except OSError:
            logger.exception("Failed to save bookmark %r to %s", url, self.path)
            return False
        return True

    def update(
        self,
        bookmark_id: int,
        title: Optional[str] = None,
        url: Optional[str] = None,
        is_favorite: Optional[bool] = None,
    ) -> Bookmark:
        changes = {"title": title, "url": url, "is_favorite": is_favorite}
        changes = {k: v for k, v in changes.items() if v is not None}
        with self._lock:
            updated = self.get(bookmark_id).model_copy(update=changes)
            bookmarks = [updated if b.id == bookmark_id else b for b in self.state.bookmarks]
            self._commit(self.state.model_copy(update={"bookmarks": bookmarks}))
        return updated

    def edit(self, bookmark_id: int, title: str, url: str) -> bool:
        """Form-facing update: returns a success flag instead of raising."""
        try:
            self.update(bookmark_id, title=title, url=url)
        except (BookmarkNotFoundError, OSError):
            logger.exception("Failed to update bookmark id=%s", bookmark_id)
            return False
        return True

    def toggle_favorite(self, bookmark_id: int) -> Bookmark:
        with self._lock:
            bookmark = self.get(bookmark_id)
            return self.update(bookmark_id, is_favorite=not bookmark.is_favorite)

    def delete(self, bookmark_id: int, title: Optional[str] = None):
        with self._lock:
            self.get(bookmark_id)
            bookmarks = [b for b in self.state.bookmarks if b.id != bookmark_id]
            self._commit(self.state.model_copy(update={"bookmarks": bookmarks}))
        logger.info("Deleted bookmark id=%s title=%r", bookmark_id, title)
