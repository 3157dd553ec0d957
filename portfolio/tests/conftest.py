"""
Pytest fixtures for the profile API tests.
Every test gets its own storage directory; the database variant runs on in-memory SQLite.
"""
import os
import tempfile

import pytest
from fastapi.testclient import TestClient

# Keep the module-level app (portfolio.main) away from the working directory
# - set before config/main load
os.environ["STORAGE_DIR"] = tempfile.mkdtemp(prefix="portfolio-test-")
os.environ["APP_ENV"] = "test"

from portfolio.app.core.config import Settings
from portfolio.app.db.base import Base
from portfolio.app.db.session import make_engine, make_session_factory
from portfolio.app.services.picture_store import PictureStore
from portfolio.app.services.profile_store import JsonProfileStore
from portfolio.app.services.sql_profile_store import SqlProfileStore
from portfolio.main import create_app

# Smallest thing that passes for a PNG upload
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24
GIF_BYTES = b"GIF89a" + b"\x00" * 16


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "storage_dir": str(tmp_path / "storage"),
        "database_url": "sqlite:///:memory:",
        "app_env": "test",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def pictures(settings):
    return PictureStore(settings.pictures_dir)


@pytest.fixture
def json_store(settings, pictures):
    return JsonProfileStore(settings.users_file_path, pictures)


@pytest.fixture
def sql_store(pictures):
    """SqlProfileStore on a fresh in-memory database."""
    engine = make_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    session = make_session_factory(engine)()
    try:
        yield SqlProfileStore(session, pictures)
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(params=["file", "database"])
def app_settings(request, tmp_path):
    """Settings for each storage backend; API tests run against both."""
    return make_settings(tmp_path, storage_backend=request.param)


@pytest.fixture
def client(app_settings):
    return TestClient(create_app(app_settings))


def picture_files(settings) -> list[str]:
    """Names of the blobs currently in the picture directory."""
    if not settings.pictures_dir.exists():
        return []
    return sorted(p.name for p in settings.pictures_dir.iterdir())
