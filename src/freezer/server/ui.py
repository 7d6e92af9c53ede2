"""HTML pages for the freezer inventory web UI."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from freezer.server.templates import load as load_template

PAGE_ALIASES = {
    "/containers": "containers",
    "/boxen": "containers",
    "/box-inventar": "containers",
    "/recipes": "recipes",
}


def _render(page: str) -> str:
    return (
        load_template("layout.html")
        .replace("__PAGE__", page)
        .replace("__CONTENT__", load_template(f"{page}.html"))
    )


PAGES = {page: _render(page) for page in ("inventory", "containers", "recipes")}

router = APIRouter(include_in_schema=False)


def page_for_path(path: str) -> str:
    """Map a request path to the page that serves it; unknown paths get the inventory."""

    normalized = "/" + path.strip("/")
    return PAGE_ALIASES.get(normalized.lower(), "inventory")


@router.get("/", response_class=HTMLResponse)
def ui_home() -> str:
    return PAGES["inventory"]


@router.get("/{path:path}", response_class=HTMLResponse)
def ui_page(path: str) -> str:
    """Serve the page for any non-API path."""

    return PAGES[page_for_path(path)]
