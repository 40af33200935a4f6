"""FastAPI application: REST API, browse page and image files."""

from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from photoshelf import __version__
from photoshelf.core.archive import PhotoArchive
from photoshelf.core.config import Config
from photoshelf.core.dates import format_date_for_display, format_date_short, sort_by_date_taken
from photoshelf.core.exceptions import PhotoshelfError
from photoshelf.core.logger import log_warning
from photoshelf.models.photo import DatePrecision
from photoshelf.services.query import PhotoFilters, search_photos
from photoshelf.web.routes import router


def _describe_validation_errors(errors) -> str:
    parts = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("query", "body"))
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "invalid request"


def create_app(config: Config) -> FastAPI:
    """Create and configure FastAPI app."""

    app = FastAPI(
        title="Photoshelf",
        description="Personal photo archive",
        version=__version__,
    )

    config.ensure_dirs()
    app.state.config = config
    app.state.archive = PhotoArchive(config)

    templates_dir = Path(__file__).parent / "templates"
    templates = Jinja2Templates(directory=str(templates_dir))

    @app.exception_handler(PhotoshelfError)
    async def photoshelf_error_handler(request: Request, err: PhotoshelfError):
        if err.status_code >= 500:
            log_warning(f"{request.method} {request.url.path} failed: {err.message}")
        return JSONResponse(status_code=err.status_code, content={"error": err.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(_: Request, err: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _describe_validation_errors(err.errors())})

    app.include_router(router)
    app.mount("/images", StaticFiles(directory=str(config.images_dir)), name="images")

    @app.get("/", response_class=HTMLResponse)
    async def index(
        request: Request,
        q: Optional[str] = Query(None),
        tags: Optional[str] = Query(None),
        people: Optional[str] = Query(None),
        location: Optional[str] = Query(None),
        year_from: Optional[str] = Query(None, alias="yearFrom"),
        year_to: Optional[str] = Query(None, alias="yearTo"),
        precision: Optional[str] = Query(None),
    ):
        """Browse page."""
        archive: PhotoArchive = app.state.archive

        # Empty form fields arrive as ""
        filters = PhotoFilters.from_params(
            tags=tags,
            people=people,
            location=location,
            year_from=int(year_from) if year_from and year_from.isdigit() else None,
            year_to=int(year_to) if year_to and year_to.isdigit() else None,
            precision=precision,
        )
        everything = archive.all_photos()
        photos = search_photos(everything, q) if q and q.strip() else everything
        matched = [photo for photo in photos if filters.matches(photo)]

        cards = [
            {
                "photo": photo.to_dict(),
                "date": format_date_short(photo.date_taken, photo.date_taken_precision),
                "date_title": format_date_for_display(photo.date_taken, photo.date_taken_precision),
                "has_image": (config.images_dir / photo.filename).is_file(),
            }
            for photo in sort_by_date_taken(matched)
        ]

        return templates.TemplateResponse(
            request,
            "index.html",
            {
                "cards": cards,
                "total": len(everything),
                "top_tags": archive.tags()[:20],
                "precisions": [p.value for p in DatePrecision],
                "form": {
                    "q": q or "",
                    "tags": tags or "",
                    "people": people or "",
                    "location": location or "",
                    "yearFrom": year_from or "",
                    "yearTo": year_to or "",
                    "precision": precision or "",
                },
            },
        )

    return app
