"""Command-line interface for the freezer inventory."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer
from pydantic import ValidationError

from freezer.config import get_settings
from freezer.db.containers import create_container, create_type
from freezer.db.inventory import create_item
from freezer.db.meal_sets import (
    choose_fifo_items_for_single_set,
    create_set,
    list_sets,
    takeout_set,
)
from freezer.db.recipes import create_recipe
from freezer.db.repository import get_engine
from freezer.errors import FreezerError
from freezer.logging_utils import configure_logging, database_secrets, mask_database_url
from freezer.models.inventory import ItemFilters
from freezer.models.requests import (
    ContainerCreateRequest,
    ContainerTypeCreateRequest,
    InventoryCreateRequest,
    MealSetCreateRequest,
    RecipeCreateRequest,
)

app = typer.Typer(help="Freezer inventory maintenance commands.")


@app.callback()
def _setup() -> None:
    settings = get_settings()
    configure_logging(
        settings.log_level, settings.log_format, database_secrets(settings.database_url)
    )


def _fail(exc: FreezerError) -> NoReturn:
    typer.secho(f"{exc.code}: {exc.message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _dump(payload: Any, pretty: bool) -> None:
    typer.echo(json.dumps(payload, indent=2 if pretty else None, sort_keys=pretty, default=str))


@app.command("init-db")
def init_db() -> None:
    """Create the database schema if it does not exist yet."""

    settings = get_settings()
    get_engine()
    typer.echo(f"Database ready at {mask_database_url(settings.sqlalchemy_url)}")


def _resolve(entry: dict[str, Any], key: str, target: str, lookup: dict[str, int]) -> dict[str, Any]:
    """Replace a by-name reference (``key``) with the id it was created under."""

    if key not in entry:
        return entry
    entry = dict(entry)
    name = entry.pop(key)
    if name not in lookup:
        raise ValueError(f"Unknown {key} reference '{name}'")
    entry[target] = lookup[name]
    return entry


def seed_snapshot(snapshot: dict[str, Any]) -> dict[str, int]:
    """Load a JSON snapshot into the database and return per-section counts.

    Containers may reference a type by its position in ``container_types``
    (``"type": 0``); items may reference ``"meal_set"``, ``"recipe"`` and
    ``"container"`` by name or code instead of ids.
    """

    type_ids: dict[str, int] = {}
    for index, entry in enumerate(snapshot.get("container_types", [])):
        payload = ContainerTypeCreateRequest.model_validate(entry)
        type_ids[str(index)] = create_type(**payload.model_dump()).id

    container_ids: dict[str, int] = {}
    for entry in snapshot.get("containers", []):
        if "type" in entry:
            entry = {**entry, "type": str(entry["type"])}
        payload = ContainerCreateRequest.model_validate(
            _resolve(entry, "type", "container_type_id", type_ids)
        )
        container = create_container(**payload.model_dump())
        container_ids[container.container_code] = container.id

    recipe_ids: dict[str, int] = {}
    for entry in snapshot.get("recipes", []):
        payload = RecipeCreateRequest.model_validate(entry)
        recipe = create_recipe(**payload.model_dump())
        recipe_ids[recipe.name] = recipe.id

    set_ids: dict[str, int] = {}
    for entry in snapshot.get("meal_sets", []):
        payload = MealSetCreateRequest.model_validate(entry)
        set_ids[payload.name] = create_set(**payload.model_dump()).id

    items = 0
    for entry in snapshot.get("items", []):
        entry = _resolve(entry, "meal_set", "meal_set_id", set_ids)
        entry = _resolve(entry, "recipe", "recipe_id", recipe_ids)
        entry = _resolve(entry, "container", "container_id", container_ids)
        create_item(**InventoryCreateRequest.model_validate(entry).model_dump())
        items += 1

    return {
        "container_types": len(type_ids),
        "containers": len(container_ids),
        "recipes": len(recipe_ids),
        "meal_sets": len(set_ids),
        "items": items,
    }


@app.command()
def seed(
    snapshot_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON snapshot."),
) -> None:
    """Load container types, containers, recipes, meal sets and items from JSON."""

    with open(snapshot_path, "r", encoding="utf-8") as fh:
        snapshot = json.load(fh)

    try:
        counts = seed_snapshot(snapshot)
    except FreezerError as exc:
        _fail(exc)
    except (ValidationError, ValueError) as exc:
        typer.secho(f"Invalid snapshot: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(", ".join(f"{count} {section}" for section, count in counts.items()))


@app.command()
def sets(
    q: str = typer.Option("", "--q", help="Case-insensitive name filter."),
    veggie: bool = typer.Option(False, "--veggie", help="Only veggie or vegan sets."),
    expiring: bool = typer.Option(False, "--expiring", help="Only sets with expiring items."),
    limit: int = typer.Option(20, "--limit", help="Maximum number of sets (1-100)."),
    pretty: bool = typer.Option(False, "--pretty", help="Pretty-print output JSON."),
) -> None:
    """List meal sets with their complete count and next FIFO selection."""

    filters = ItemFilters(q=q.strip(), veggie=veggie, expiring=expiring)
    summaries = list_sets(filters, limit, 0)
    _dump([summary.model_dump(mode="json") for summary in summaries], pretty)


@app.command()
def fifo(meal_set_id: int = typer.Argument(..., help="Meal set ID.")) -> None:
    """Show which items a FIFO take-out would remove, without changing anything."""

    try:
        item_ids = choose_fifo_items_for_single_set(meal_set_id)
    except FreezerError as exc:
        _fail(exc)
    _dump({"meal_set_id": meal_set_id, "item_ids": item_ids}, pretty=False)


@app.command()
def takeout(
    meal_set_id: int = typer.Argument(..., help="Meal set ID."),
    items: Optional[list[int]] = typer.Option(
        None,
        "--item",
        help="Take out these item IDs instead of the FIFO selection (repeatable).",
    ),
) -> None:
    """Take out one unit of a meal set."""

    try:
        item_ids = takeout_set(meal_set_id, items or None)
    except FreezerError as exc:
        _fail(exc)
    _dump({"ok": True, "item_ids": item_ids}, pretty=False)


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the ``freezer`` script and ``python -m freezer``."""
    app(prog_name="freezer", args=argv)


if __name__ == "__main__":
    main()
