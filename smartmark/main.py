import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlencode

from fastapi import Depends, FastAPI, Form, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from .boundary import FaultBoundary
from .config import Settings, get_settings
from .exceptions import BookmarkNotFoundError, InvalidUrlError, UnknownActionError
from .favicons import FaviconProbe
from .form import FAILED_MESSAGE, INVALID_URL_MESSAGE, BookmarkFormController
from .listing import ListHandlers, build_list_view, dispatch_action
from .models import Bookmark, BookmarkIn, BookmarkUpdate, FormDraft
from .storage import BookmarkStore
from .urls import normalize_url

logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(PACKAGE_DIR / "templates"))


@lru_cache
def _store_for(path: Path) -> BookmarkStore:
    return BookmarkStore(path)


def get_store(settings: Settings = Depends(get_settings)) -> BookmarkStore:
    return _store_for(settings.data_file)


@lru_cache
def _probe_for(timeout: float) -> FaviconProbe:
    return FaviconProbe(timeout=timeout)


def get_favicon_check(
    settings: Settings = Depends(get_settings),
) -> Optional[Callable[[str], bool]]:
    if not settings.probe_favicons:
        return None
    return _probe_for(settings.favicon_timeout).is_available


@asynccontextmanager
async def lifespan(_app: FastAPI):
    settings = get_settings()
    store = _store_for(settings.data_file)
    logger.info("Loaded %d bookmarks from %s", len(store.bookmarks()), store.path)
    yield


app = FastAPI(title="SmartMark", lifespan=lifespan)

app.mount("/static", StaticFiles(directory=str(PACKAGE_DIR / "static")), name="static")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BookmarkNotFoundError)
async def bookmark_not_found_handler(request: Request, exc: BookmarkNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


def _home_url(query: str = "") -> str:
    return app.url_path_for("home") + (f"?{urlencode({'q': query})}" if query else "")


def _error_status(draft: FormDraft) -> int:
    return 500 if draft.error == FAILED_MESSAGE else 400


def render_list(
    bookmarks: list,
    query: str,
    settings: Settings,
    favicon_check: Optional[Callable[[str], bool]] = None,
) -> str:
    view = build_list_view(
        bookmarks,
        search_query=query,
        favicon_endpoint=settings.favicon_endpoint,
        favicon_check=favicon_check,
    )
    return templates.get_template("partials/list.html").render(
        view=view,
        query=query,
        copy_feedback_ms=settings.copy_feedback_ms,
    )


def render_home(
    request: Request,
    store: BookmarkStore,
    settings: Settings,
    query: str,
    controller: Optional[BookmarkFormController] = None,
    favicon_check: Optional[Callable[[str], bool]] = None,
    status_code: int = 200,
):
    bookmarks = store.search(query)
    boundary = FaultBoundary(
        lambda: render_list(bookmarks, query, settings, favicon_check),
        lambda b: templates.get_template("partials/fault.html").render(
            retry_url=_home_url(query),
        ),
        name="bookmark-list",
    )
    draft = controller.draft if controller else FormDraft()
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "settings": settings,
            "draft": draft,
            "focus_title": not draft.error,
            "query": query,
            "list_html": boundary.render(),
        },
        status_code=status_code,
    )


# ========== HTML pages ==========


@app.get("/", response_class=HTMLResponse, name="home")
def home(
    request: Request,
    q: str = "",
    store: BookmarkStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
    favicon_check=Depends(get_favicon_check),
):
    return render_home(request, store, settings, q.strip(), favicon_check=favicon_check)


@app.post("/bookmarks", response_class=HTMLResponse)
async def add_bookmark_form(
    request: Request,
    title: str = Form(""),
    url: str = Form(""),
    q: str = Form(""),
    store: BookmarkStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
    favicon_check=Depends(get_favicon_check),
):
    controller = BookmarkFormController(on_add=store.add, draft=FormDraft(title=title, url=url))
    if await controller.submit():
        return RedirectResponse(_home_url(q), status_code=303)
    return render_home(
        request,
        store,
        settings,
        q,
        controller=controller,
        favicon_check=favicon_check,
        status_code=_error_status(controller.draft),
    )


def render_edit(request: Request, bookmark: Bookmark, draft: FormDraft, settings: Settings, status_code: int = 200):
    return templates.TemplateResponse(
        request,
        "edit.html",
        {"settings": settings, "bookmark": bookmark, "draft": draft},
        status_code=status_code,
    )


@app.get("/bookmarks/{bookmark_id}/edit", response_class=HTMLResponse, name="edit_page")
def edit_page(
    request: Request,
    bookmark_id: int,
    store: BookmarkStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    bookmark = store.get(bookmark_id)
    draft = FormDraft(title=bookmark.title, url=bookmark.url)
    return render_edit(request, bookmark, draft, settings)


@app.post("/bookmarks/{bookmark_id}/edit", response_class=HTMLResponse)
async def edit_bookmark_form(
    request: Request,
    bookmark_id: int,
    title: str = Form(""),
    url: str = Form(""),
    store: BookmarkStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    bookmark = store.get(bookmark_id)
    controller = BookmarkFormController(
        on_add=lambda t, u: store.edit(bookmark_id, t, u),
        draft=FormDraft(title=title, url=url),
    )
    if await controller.submit():
        return RedirectResponse(_home_url(), status_code=303)
    return render_edit(request, bookmark, controller.draft, settings, _error_status(controller.draft))


@app.post("/bookmarks/{bookmark_id}/{action}")
def bookmark_row_action(
    bookmark_id: int,
    action: str,
    q: str = Form(""),
    store: BookmarkStore = Depends(get_store),
):
    bookmark = store.get(bookmark_id)
    handlers = ListHandlers(
        on_favorite=store.toggle_favorite,
        on_edit=lambda b: RedirectResponse(
            app.url_path_for("edit_page", bookmark_id=str(b.id)), status_code=303,
        ),
        on_delete=store.delete,
    )
    try:
        result = dispatch_action(action, bookmark, handlers)
    except UnknownActionError as exc:
        raise HTTPException(404, str(exc))
    if isinstance(result, RedirectResponse):
        return result
    return RedirectResponse(_home_url(q), status_code=303)


@app.get("/manifest.json")
def manifest(settings: Settings = Depends(get_settings)):
    return {
        "name": settings.site_title,
        "short_name": settings.site_name,
        "description": settings.site_description,
        "start_url": "/",
        "scope": "/",
        "display": "standalone",
        "background_color": "#09090b",
        "theme_color": settings.theme_color,
        "icons": [
            {"src": "/static/icon.svg", "sizes": "any", "type": "image/svg+xml"},
        ],
    }


# ========== JSON API ==========


@app.get("/api/bookmarks")
def list_bookmarks(q: str = "", store: BookmarkStore = Depends(get_store)):
    res = store.search(q)
    return {"results": res, "count": len(res)}


@app.post("/api/bookmarks", status_code=201)
async def create_bookmark(body: BookmarkIn, store: BookmarkStore = Depends(get_store)):
    created: list = []

    def add(title: str, url: str) -> bool:
        try:
            created.append(store.create(title, url))
        except OSError:
            logger.exception("Failed to save bookmark %r", url)
            return False
        return True

    controller = BookmarkFormController(on_add=add, draft=FormDraft(title=body.title, url=body.url))
    if not await controller.submit():
        raise HTTPException(_error_status(controller.draft), controller.draft.error)
    return created[0]


@app.get("/api/bookmarks/{bookmark_id}")
def get_bookmark(bookmark_id: int, store: BookmarkStore = Depends(get_store)):
    return store.get(bookmark_id)


@app.patch("/api/bookmarks/{bookmark_id}")
def update_bookmark(bookmark_id: int, payload: BookmarkUpdate, store: BookmarkStore = Depends(get_store)):
    title = payload.title
    if title is not None:
        title = title.strip()
        if not title:
            raise HTTPException(400, "Title cannot be empty")
    url = payload.url
    if url is not None:
        try:
            url = normalize_url(url)
        except InvalidUrlError:
            raise HTTPException(400, INVALID_URL_MESSAGE)
        if not url:
            raise HTTPException(400, "URL cannot be empty")
    return store.update(bookmark_id, title=title, url=url, is_favorite=payload.is_favorite)


@app.post("/api/bookmarks/{bookmark_id}/favorite")
def toggle_favorite(bookmark_id: int, store: BookmarkStore = Depends(get_store)):
    return store.toggle_favorite(bookmark_id)


@app.delete("/api/bookmarks/{bookmark_id}")
def delete_bookmark(bookmark_id: int, store: BookmarkStore = Depends(get_store)):
    store.delete(bookmark_id)
    return {"ok": True}


@app.get("/api/export/json")
def export_json(store: BookmarkStore = Depends(get_store)):
    return {"bookmarks": store.bookmarks()}


@app.get("/api/export/txt", response_class=PlainTextResponse)
def export_txt(store: BookmarkStore = Depends(get_store)):
    return "\n".join(b.url for b in store.bookmarks())
