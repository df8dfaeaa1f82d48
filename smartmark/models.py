from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Bookmark(BaseModel):
    id: int
    title: str
    url: str
    is_favorite: bool = False
    created_at: Optional[datetime] = None


class FormDraft(BaseModel):
    title: str = ""
    url: str = ""
    loading: bool = False
    error: Optional[str] = None


class AppState(BaseModel):
    next_id: int = 1
    bookmarks: List[Bookmark] = Field(default_factory=list)


class BookmarkIn(BaseModel):
    title: str
    url: str


class BookmarkUpdate(BaseModel):
    title: Optional[str] = None
    url: Optional[str] = None
    is_favorite: Optional[bool] = None
