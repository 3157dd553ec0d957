"""
Dependency injection utilities. Everything is read from app.state, which
create_app() fills from the Settings instance it was given.
"""
from typing import Iterator

from fastapi import Request

from portfolio.app.core.config import Settings
from portfolio.app.services.picture_store import PictureStore
from portfolio.app.services.profile_store import ProfileStore
from portfolio.app.services.sql_profile_store import SqlProfileStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_picture_store(request: Request) -> PictureStore:
    return request.app.state.picture_store


def get_profile_store(request: Request) -> Iterator[ProfileStore]:
    """Shared JSON store, or a SQL store bound to a per-request session."""
    state = request.app.state
    if state.session_factory is None:
        yield state.profile_store
        return
    db = state.session_factory()
    try:
        yield SqlProfileStore(db, state.picture_store)
    finally:
        db.close()
