"""ASGI application for the freezer inventory."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from importlib import resources
from time import perf_counter
from typing import Any, Optional
from uuid import uuid4

from fastapi import Body, Depends, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from freezer import __version__, metrics
from freezer.config import Settings, get_settings
from freezer.db import repository
from freezer.errors import BusinessRuleError, FreezerError, NotFoundError
from freezer.logging_utils import configure_logging, database_secrets, mask_database_url
from freezer.models.containers import Container, ContainerType
from freezer.models.inventory import (
    STORAGE_STANDARDS,
    InventoryItem,
    ItemFilters,
    MealSetDetail,
    TakeoutResult,
)
from freezer.models.requests import (
    ContainerCreateRequest,
    ContainerTypeCreateRequest,
    ContainerUpdateRequest,
    InventoryCreateRequest,
    MealSetCreateRequest,
    RecipeCreateRequest,
    RecipeUpdateRequest,
    TakeoutRequest,
)
from freezer.server import deps, ui

logger = logging.getLogger(__name__)

SERVICE_NAME = "freezer-inventory"


def _json_safe(value: Any) -> Any:
    """Convert non-serializable values into JSON-safe representations."""

    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, (list, tuple)):
        return [_json_safe(entry) for entry in value]
    if isinstance(value, dict):
        return {key: _json_safe(sub_value) for key, sub_value in value.items()}
    return str(value)


def _normalize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Ensure validation error payloads can be serialized to JSON."""

    return [{key: _json_safe(value) for key, value in error.items()} for error in errors]


def _error_response(exc: FreezerError) -> JSONResponse:
    return JSONResponse(status_code=exc.http_status, content=_json_safe(exc.to_dict()))


def _recipe_error(status_code: int, code: str, message: str, details: Any = None) -> JSONResponse:
    error: dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = _json_safe(details)
    return JSONResponse(status_code=status_code, content={"ok": False, "error": error})


def _configure_logging(settings: Settings) -> None:
    configure_logging(
        settings.log_level,
        settings.log_format,
        database_secrets(settings.database_url),
    )


def _request_log_extra(request: Request) -> dict[str, Any]:
    request_id = getattr(request.state, "request_id", None)
    return {"extra": {"request_id": request_id}} if request_id else {}


def create_app() -> FastAPI:
    """Create and configure a FastAPI application instance."""

    settings = get_settings()
    _configure_logging(settings)

    application = FastAPI(title="Freezer Inventory", version=__version__)

    static_dir = resources.files("freezer.server.static")
    application.mount(
        "/assets",
        StaticFiles(directory=str(static_dir)),
        name="assets",
    )

    access_logger = logging.getLogger("freezer.access")
    log_requests = settings.log_requests

    @application.middleware("http")
    async def log_request_response(request: Request, call_next):
        """Tag the request with an id, record metrics and optionally log it."""

        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        request.state.request_id = request_id
        start = perf_counter()
        method = request.method
        try:
            response: Response = await call_next(request)
        except Exception:
            duration_ms = (perf_counter() - start) * 1000
            if log_requests:
                access_logger.exception(
                    "HTTP %s %s status=500 duration_ms=%.2f",
                    method,
                    request.url.path,
                    duration_ms,
                    extra={"request_id": request_id},
                )
            metrics.REQUEST_COUNT.labels(method=method, path=request.url.path, status="500").inc()
            raise

        duration_ms = (perf_counter() - start) * 1000
        # Label by route template so ids in the URL do not explode cardinality.
        route = request.scope.get("route")
        path = getattr(route, "path", request.url.path)
        response.headers.setdefault("X-Request-ID", request_id)
        if log_requests:
            access_logger.info(
                "HTTP %s %s status=%s duration_ms=%.2f",
                method,
                request.url.path,
                response.status_code,
                duration_ms,
                extra={"request_id": request_id},
            )
        metrics.REQUEST_COUNT.labels(
            method=method,
            path=path,
            status=str(response.status_code),
        ).inc()
        metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000.0)
        return response

    @application.exception_handler(FreezerError)
    async def freezer_error_handler(request: Request, exc: FreezerError):
        logger.info(
            "Request rejected %s %s code=%s status=%s",
            request.method,
            request.url.path,
            exc.code,
            exc.http_status,
            **_request_log_extra(request),
        )
        return _error_response(exc)

    @application.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        code = "not_found" if exc.status_code == status.HTTP_404_NOT_FOUND else "http_error"
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": code, "message": str(exc.detail)},
        )

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(
            "Validation error on %s %s: %s",
            request.method,
            request.url.path,
            exc.errors(),
            **_request_log_extra(request),
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": "validation_failed",
                "message": "Request payload failed validation",
                "detail": _normalize_validation_errors(exc.errors()),
            },
        )

    @application.get("/health", summary="Service and database health")
    def health() -> dict[str, Any]:
        started = perf_counter()
        db_ok, db_error = True, None
        try:
            repository.ping()
        except SQLAlchemyError as exc:
            db_ok, db_error = False, str(exc)
            logger.warning("Health check database failure: %s", exc)

        return {
            "ok": db_ok,
            "service": SERVICE_NAME,
            "env": settings.app_env,
            "time": datetime.now(timezone.utc).astimezone().isoformat(timespec="seconds"),
            "db": {
                "ok": db_ok,
                "url": mask_database_url(settings.sqlalchemy_url),
                "error": db_error,
            },
            "latency_ms": round((perf_counter() - started) * 1000),
        }

    @application.get("/metrics", include_in_schema=False)
    def metrics_endpoint() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # -- meal sets -----------------------------------------------------------

    @application.get("/api/meal_sets", summary="List meal sets")
    def meal_sets_list(
        filters: ItemFilters = Depends(deps.get_filters),
        limit: int = Query(default=20),
        offset: int = Query(default=0),
        provider: deps.MealSetProvider = Depends(deps.get_meal_set_provider),
    ) -> dict[str, Any]:
        items = provider(filters, limit, offset)
        return {"items": [item.model_dump(mode="json") for item in items]}

    @application.post(
        "/api/meal_sets",
        response_model=MealSetDetail,
        status_code=status.HTTP_201_CREATED,
        summary="Create a meal set",
    )
    def meal_sets_create(
        payload: MealSetCreateRequest = Body(...),
        creator: deps.MealSetCreator = Depends(deps.get_meal_set_creator),
    ) -> MealSetDetail:
        return creator(payload.model_dump())

    @application.get(
        "/api/meal_sets/{meal_set_id}",
        response_model=MealSetDetail,
        summary="Meal set detail with FIFO-ordered items",
    )
    def meal_sets_detail(
        meal_set_id: int,
        fetcher: deps.MealSetFetcher = Depends(deps.get_meal_set_fetcher),
    ) -> MealSetDetail:
        return fetcher(meal_set_id)

    @application.post(
        "/api/meal_sets/{meal_set_id}/takeout",
        response_model=TakeoutResult,
        summary="Take out one meal set (FIFO unless item ids are given)",
    )
    def meal_sets_takeout(
        meal_set_id: int,
        payload: Optional[TakeoutRequest] = Body(default=None),
        takeout: deps.MealSetTakeout = Depends(deps.get_meal_set_takeout),
    ) -> TakeoutResult:
        item_ids = payload.item_ids if payload else None
        return TakeoutResult(item_ids=takeout(meal_set_id, item_ids or None))

    # -- inventory -----------------------------------------------------------

    @application.get("/api/inventory", summary="List active inventory items")
    def inventory_list(
        view: str = Query(default="single"),
        filters: ItemFilters = Depends(deps.get_filters),
        limit: int = Query(default=20),
        offset: int = Query(default=0),
        provider: deps.InventoryProvider = Depends(deps.get_inventory_provider),
    ) -> dict[str, Any]:
        items = provider(view, filters, limit, offset)
        return {"items": [item.model_dump(mode="json") for item in items]}

    @application.post(
        "/api/inventory",
        response_model=InventoryItem,
        status_code=status.HTTP_201_CREATED,
        summary="Record a newly frozen item",
    )
    def inventory_create(
        payload: InventoryCreateRequest = Body(...),
        creator: deps.InventoryCreator = Depends(deps.get_inventory_creator),
    ) -> InventoryItem:
        create_payload = payload.model_dump()
        logger.debug("Creating inventory item payload=%s", create_payload)
        return creator(create_payload)

    @application.post(
        "/api/inventory/takeout",
        response_model=TakeoutResult,
        summary="Take out an explicit list of items",
    )
    def inventory_takeout(
        payload: Optional[TakeoutRequest] = Body(default=None),
        takeout: deps.InventoryTakeout = Depends(deps.get_inventory_takeout),
    ) -> TakeoutResult:
        item_ids = payload.item_ids if payload else None
        if not item_ids:
            raise BusinessRuleError("no_items_selected", "No inventory items were selected")
        return TakeoutResult(item_ids=takeout(item_ids))

    # -- containers ----------------------------------------------------------

    @application.get("/api/container-types", summary="List container types")
    def container_types_list(
        provider: deps.ContainerTypeProvider = Depends(deps.get_container_type_provider),
    ) -> dict[str, Any]:
        return {"ok": True, "items": [item.model_dump() for item in provider()]}

    @application.post(
        "/api/container-types",
        status_code=status.HTTP_201_CREATED,
        summary="Create a container type",
    )
    def container_types_create(
        payload: ContainerTypeCreateRequest = Body(...),
        creator: deps.ContainerTypeCreator = Depends(deps.get_container_type_creator),
    ) -> dict[str, Any]:
        created: ContainerType = creator(payload.model_dump())
        return {"ok": True, "id": created.id}

    @application.get("/api/containers", summary="List containers")
    def containers_list(
        active: str = Query(default="1"),
        provider: deps.ContainerProvider = Depends(deps.get_container_provider),
    ) -> dict[str, Any]:
        return {"ok": True, "items": [item.model_dump() for item in provider(active)]}

    @application.post(
        "/api/containers",
        status_code=status.HTTP_201_CREATED,
        summary="Create a container",
    )
    def containers_create(
        payload: ContainerCreateRequest = Body(...),
        creator: deps.ContainerCreator = Depends(deps.get_container_creator),
    ) -> dict[str, Any]:
        created: Container = creator(payload.model_dump())
        return {"ok": True, "id": created.id}

    @application.patch("/api/containers/{container_id}", summary="Update a container")
    def containers_update(
        container_id: int,
        payload: ContainerUpdateRequest = Body(...),
        updater: deps.ContainerUpdater = Depends(deps.get_container_updater),
    ) -> dict[str, Any]:
        update_payload = payload.model_dump(exclude_unset=True)
        if not update_payload:
            raise BusinessRuleError("no_fields", "No fields provided for update")
        updater(container_id, update_payload)
        return {"ok": True}

    @application.get("/api/storage-standards", summary="Storage types without a box")
    def storage_standards() -> dict[str, Any]:
        return {"ok": True, "items": list(STORAGE_STANDARDS)}

    # -- recipes -------------------------------------------------------------

    @application.get("/api/recipes", summary="List recipes")
    def recipes_list(
        search: str = Query(default="", max_length=255),
        recipe_type: Optional[str] = Query(default=None, alias="type"),
        veggie: Optional[str] = Query(default=None),
        vegan: Optional[str] = Query(default=None),
        sort: str = Query(default="name"),
        limit: int = Query(default=50),
        offset: int = Query(default=0),
        provider: deps.RecipeProvider = Depends(deps.get_recipe_provider),
    ) -> dict[str, Any]:
        recipes = provider(
            search=search.strip(),
            recipe_type=recipe_type or None,
            veggie=deps.parse_flag(veggie),
            vegan=deps.parse_flag(vegan),
            sort=sort,
            limit=limit,
            offset=offset,
        )
        return {"ok": True, "data": [recipe.model_dump(mode="json") for recipe in recipes]}

    @application.post("/api/recipes", summary="Create a recipe")
    def recipes_create(
        payload: dict[str, Any] = Body(...),
        creator: deps.RecipeCreator = Depends(deps.get_recipe_creator),
    ):
        try:
            parsed = RecipeCreateRequest.model_validate(payload)
        except ValidationError as exc:
            logger.warning("Invalid recipe payload=%s errors=%s", payload, exc.errors())
            return _recipe_error(
                status.HTTP_422_UNPROCESSABLE_ENTITY,
                "validation_failed",
                "Recipe payload failed validation",
                exc.errors(),
            )
        recipe = creator(parsed.model_dump())
        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content={"ok": True, "data": recipe.model_dump(mode="json")},
        )

    @application.patch("/api/recipes/{recipe_id}", summary="Update a recipe")
    def recipes_update(
        recipe_id: int,
        payload: dict[str, Any] = Body(...),
        updater: deps.RecipeUpdater = Depends(deps.get_recipe_updater),
    ):
        try:
            parsed = RecipeUpdateRequest.model_validate(payload)
        except ValidationError as exc:
            logger.warning(
                "Invalid recipe update payload=%s errors=%s (recipe_id=%s)",
                payload,
                exc.errors(),
                recipe_id,
            )
            return _recipe_error(
                status.HTTP_422_UNPROCESSABLE_ENTITY,
                "validation_failed",
                "Recipe payload failed validation",
                exc.errors(),
            )
        try:
            recipe = updater(recipe_id, parsed.model_dump(exclude_unset=True))
        except NotFoundError as exc:
            return _recipe_error(exc.http_status, exc.code, exc.message)
        return {"ok": True, "data": recipe.model_dump(mode="json")}

    @application.api_route(
        "/api/{rest:path}",
        methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        include_in_schema=False,
    )
    def api_not_found(rest: str) -> None:
        raise NotFoundError()

    # Pages last: the inventory page is the fallback for every other path.
    application.include_router(ui.router)
    logger.debug("Application created with log level %s", settings.log_level)
    return application


app = create_app()

__all__ = ["app", "create_app"]
