"""Pytest configuration and fixtures."""

import json
import os
from typing import Generator

# Settings are read lazily; point them at throwaway values before the app loads
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["OPENAI_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.inventory.database import get_db, init_db
from app.inventory.main import app
from app.inventory.services.ai import AIService, get_ai_service

from .fakes import FakeVisionModel
from .utils import make_image_bytes

DUNE_REPLY = json.dumps(
    {
        "title": "Dune",
        "author": "Frank Herbert",
        "gradeLevel": "",
        "subject": "Science Fiction",
        "series": "Dune Chronicles",
    }
)


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image_bytes("JPEG")


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine: Engine) -> Generator[Session, None, None]:
    session = sessionmaker(bind=engine, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def vision_model() -> FakeVisionModel:
    return FakeVisionModel(reply=DUNE_REPLY)


@pytest.fixture
def client(engine: Engine, vision_model: FakeVisionModel) -> Generator[TestClient, None, None]:
    """Test client wired to the in-memory database and the fake vision model."""
    session_factory = sessionmaker(bind=engine, autoflush=False)

    def override_get_db() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ai_service] = lambda: AIService(
        api_key="test-key", model="test-model", vision_model=vision_model
    )
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
