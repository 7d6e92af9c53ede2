"""Shared pytest fixtures for the freezer inventory test suite."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Callable, Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from freezer.config import get_settings
from freezer.db.inventory import create_item
from freezer.db.meal_sets import create_set
from freezer.db.repository import reset_repository_state
from freezer.models.inventory import InventoryItem, MealSetDetail
from freezer.server.app import create_app


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Ensure each test uses an isolated SQLite database location."""

    db_path = tmp_path / "test_freezer.db"
    monkeypatch.setenv("FREEZER_DATABASE_PATH", str(db_path))
    monkeypatch.delenv("FREEZER_DATABASE_URL", raising=False)
    get_settings.cache_clear()
    reset_repository_state()
    yield
    reset_repository_state()
    monkeypatch.delenv("FREEZER_DATABASE_PATH", raising=False)
    get_settings.cache_clear()


@pytest.fixture()
def app() -> Generator[FastAPI, None, None]:
    """Create a new FastAPI app instance for each test and reset overrides."""

    application = create_app()
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
def client(app) -> TestClient:
    """Return a test client bound to the FastAPI app."""

    return TestClient(app)


@pytest.fixture()
def days_ago() -> Callable[[int], date]:
    return lambda days: date.today() - timedelta(days=days)


@pytest.fixture()
def make_set() -> Callable[..., MealSetDetail]:
    """Create a meal set; ``components`` defaults to one item of any type."""

    def _make(name: str = "Chili", **fields) -> MealSetDetail:
        return create_set(name=name, **fields)

    return _make


@pytest.fixture()
def freeze(days_ago) -> Callable[..., InventoryItem]:
    """Record an item frozen ``age`` days ago."""

    def _freeze(name: str = "Chili portion", age: int = 0, **fields) -> InventoryItem:
        return create_item(name=name, frozen_at=days_ago(age), **fields)

    return _freeze
