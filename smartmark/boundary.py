import logging
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FaultBoundary(Generic[T]):
    """
    Contain failures raised while rendering a subtree.

    While healthy, `render()` returns whatever `render_children()` returns.
    The first exception is logged with its traceback and flips the boundary
    into the faulted state, where `render()` returns `render_fallback(self)`
    until `reset()` is called. Nothing is retried automatically.
    """

    def __init__(
        self,
        render_children: Callable[[], T],
        render_fallback: Callable[["FaultBoundary[T]"], T],
        name: str = "",
    ):
        self.render_children = render_children
        self.render_fallback = render_fallback
        self.name = name or getattr(render_children, "__name__", "subtree")
        self.error: Optional[BaseException] = None

    @property
    def faulted(self) -> bool:
        return self.error is not None

    def render(self) -> T:
        if self.faulted:
            return self.render_fallback(self)
        try:
            return self.render_children()
        except Exception as exc:
            self.on_fault(exc)
            return self.render_fallback(self)

    def on_fault(self, exc: BaseException):
        self.error = exc
        logger.error("Fault boundary %r caught: %s", self.name, exc, exc_info=exc)

    def reset(self):
        self.error = None
