"""ASGI application factory and dependencies for the freezer inventory server."""

from freezer.server.app import app, create_app

__all__ = ["app", "create_app"]
