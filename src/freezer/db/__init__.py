"""Persistence layer (SQLAlchemy models and data access helpers)."""
