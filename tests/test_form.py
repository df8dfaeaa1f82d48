"""Tests for the bookmark entry form controller."""
import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from smartmark.form import (
    FAILED_MESSAGE,
    INVALID_URL_MESSAGE,
    REQUIRED_MESSAGE,
    BookmarkFormController,
    FormPhase,
)
from smartmark.models import FormDraft


def make_controller(on_add, title: str = "", url: str = "") -> BookmarkFormController:
    return BookmarkFormController(on_add=on_add, draft=FormDraft(title=title, url=url))


class TestValidation:
    """Submissions rejected before the collaborator is called."""

    @pytest.mark.parametrize(
        ("title", "url"),
        [("", "example.com"), ("Site", ""), ("   ", "example.com"), ("Site", "   "), ("", "")],
    )
    async def test__submit__requires_both_fields(self, title: str, url: str) -> None:
        on_add = Mock(return_value=True)
        controller = make_controller(on_add, title, url)

        assert await controller.submit() is False

        assert controller.draft.error == REQUIRED_MESSAGE
        on_add.assert_not_called()
        assert controller.phase is FormPhase.IDLE

    async def test__submit__rejects_invalid_url(self) -> None:
        on_add = Mock(return_value=True)
        controller = make_controller(on_add, "Site", "http://")

        assert await controller.submit() is False

        assert controller.draft.error == INVALID_URL_MESSAGE
        on_add.assert_not_called()
        assert controller.draft.url == "http://"

    def test__validate__returns_trimmed_pair(self) -> None:
        controller = make_controller(Mock(), "  Site  ", " example.com ")
        assert controller.validate() == ("Site", "https://example.com")
        assert controller.draft.error is None


class TestSubmission:
    """Submissions that reach the collaborator."""

    async def test__submit__normalizes_url(self) -> None:
        on_add = Mock(return_value=True)
        controller = make_controller(on_add, "Site", "example.com")

        assert await controller.submit() is True

        on_add.assert_called_once_with("Site", "https://example.com")

    async def test__submit__success_clears_fields(self) -> None:
        controller = make_controller(Mock(return_value=True), "Site", "example.com")
        controller.draft.error = "stale"

        await controller.submit()

        assert controller.draft.title == ""
        assert controller.draft.url == ""
        assert controller.draft.error is None
        assert controller.draft.loading is False
        assert controller.focus_title is True

    async def test__submit__failure_preserves_input(self) -> None:
        controller = make_controller(Mock(return_value=False), "Site", "example.com")

        assert await controller.submit() is False

        assert controller.draft.title == "Site"
        assert controller.draft.url == "example.com"
        assert controller.draft.error == FAILED_MESSAGE
        assert controller.draft.loading is False
        assert controller.focus_title is False

    async def test__submit__awaits_async_collaborator(self) -> None:
        on_add = AsyncMock(return_value=True)
        controller = make_controller(on_add, "Site", "https://example.com/a")

        assert await controller.submit() is True

        on_add.assert_awaited_once_with("Site", "https://example.com/a")

    async def test__submit__async_failure(self) -> None:
        controller = make_controller(AsyncMock(return_value=False), "Site", "example.com")
        assert await controller.submit() is False
        assert controller.draft.error == FAILED_MESSAGE

    async def test__submit__form_disabled_while_in_flight(self) -> None:
        """The draft is loading and read-only while the collaborator runs."""
        seen = {}

        def on_add(title: str, url: str) -> bool:
            seen["loading"] = controller.draft.loading
            seen["phase"] = controller.phase
            seen["disabled"] = controller.disabled
            controller.set_title("changed")
            controller.set_url("changed.com")
            return False

        controller = make_controller(on_add, "Site", "example.com")
        await controller.submit()

        assert seen == {"loading": True, "phase": FormPhase.SUBMITTING, "disabled": True}
        assert controller.draft.title == "Site"
        assert controller.draft.url == "example.com"

    async def test__submit__one_submission_at_a_time(self) -> None:
        release = asyncio.Event()
        calls = []

        async def on_add(title: str, url: str) -> bool:
            calls.append((title, url))
            await release.wait()
            return True

        controller = make_controller(on_add, "Site", "example.com")
        first = asyncio.create_task(controller.submit())
        await asyncio.sleep(0)

        assert controller.phase is FormPhase.SUBMITTING
        assert await controller.submit() is False

        release.set()
        assert await first is True
        assert calls == [("Site", "https://example.com")]

    async def test__submit__collaborator_exception_propagates(self) -> None:
        controller = make_controller(Mock(side_effect=RuntimeError("boom")), "Site", "example.com")

        with pytest.raises(RuntimeError):
            await controller.submit()

        assert controller.draft.loading is False
        assert controller.phase is FormPhase.IDLE

    async def test__submit__clears_previous_error(self) -> None:
        controller = make_controller(Mock(return_value=True), "", "example.com")
        await controller.submit()
        assert controller.draft.error == REQUIRED_MESSAGE

        controller.set_title("Site")
        assert await controller.submit() is True
        assert controller.draft.error is None


class TestEditing:
    """Field edits outside of submission."""

    def test__set_fields__idle(self) -> None:
        controller = make_controller(Mock())
        controller.set_title("Title")
        controller.set_url("example.com")
        assert controller.draft.title == "Title"
        assert controller.draft.url == "example.com"

    def test__default_draft__is_empty(self) -> None:
        controller = BookmarkFormController(on_add=Mock())
        assert controller.draft == FormDraft()
        assert controller.disabled is False
