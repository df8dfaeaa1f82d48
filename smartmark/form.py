"""Bookmark entry form: validation, submission and post-submit reset."""
import inspect
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional, Tuple, Union

from .exceptions import InvalidUrlError
from .models import FormDraft
from .urls import normalize_url

logger = logging.getLogger(__name__)

REQUIRED_MESSAGE = "Both fields are required"
INVALID_URL_MESSAGE = "That doesn't look like a valid URL"
FAILED_MESSAGE = "Something went wrong, try again"

AddCallback = Callable[[str, str], Union[bool, Awaitable[bool]]]


class FormPhase(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"


class BookmarkFormController:
    """
    Drives a FormDraft through validate -> submit -> reset.

    `on_add(title, url)` is the persistence collaborator. It may return the
    success flag directly or an awaitable resolving to it. Only one
    submission runs at a time; the draft is read-only while it is in flight.
    """

    def __init__(self, on_add: AddCallback, draft: Optional[FormDraft] = None):
        self.on_add = on_add
        self.draft = draft or FormDraft()
        self.phase = FormPhase.IDLE
        self.focus_title = False

    @property
    def disabled(self) -> bool:
        return self.draft.loading

    def set_title(self, value: str):
        if not self.disabled:
            self.draft.title = value

    def set_url(self, value: str):
        if not self.disabled:
            self.draft.url = value

    def validate(self) -> Optional[Tuple[str, str]]:
        """Return the (title, url) pair to submit, or None with draft.error set."""
        self.phase = FormPhase.VALIDATING
        title = self.draft.title.strip()
        if not title or not self.draft.url.strip():
            self.draft.error = REQUIRED_MESSAGE
            self.phase = FormPhase.IDLE
            return None

        try:
            url = normalize_url(self.draft.url)
        except InvalidUrlError:
            self.draft.error = INVALID_URL_MESSAGE
            self.phase = FormPhase.IDLE
            return None
        return title, url

    async def submit(self) -> bool:
        if self.phase is FormPhase.SUBMITTING:
            logger.debug("Ignoring submit while another is in flight")
            return False

        self.draft.error = None
        self.focus_title = False
        candidate = self.validate()
        if candidate is None:
            return False
        title, url = candidate

        self.phase = FormPhase.SUBMITTING
        self.draft.loading = True
        try:
            ok = self.on_add(title, url)
            if inspect.isawaitable(ok):
                ok = await ok
        finally:
            self.draft.loading = False
            self.phase = FormPhase.IDLE

        if ok:
            self.draft.title = ""
            self.draft.url = ""
            self.draft.error = None
            self.focus_title = True
            return True

        self.draft.error = FAILED_MESSAGE
        return False
