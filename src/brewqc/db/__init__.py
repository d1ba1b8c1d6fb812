"""Database module for BrewQC."""

from brewqc.db.session import async_session, engine, get_db

__all__ = ["async_session", "engine", "get_db"]
