"""
Configuration partagée pour tous les tests.
Override get_db pour éviter toute connexion réelle à PostgreSQL
et get_current_actor pour se passer de jeton JWT.
"""

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from unittest.mock import MagicMock

import academy.models  # noqa: F401
from academy.auth import Actor, get_current_actor
from academy.database import Base, get_db
from academy.main import app

ASSISTANT_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")
ADMIN_ID = uuid.UUID("22222222-2222-2222-2222-222222222222")


def _make_client(actor: Actor):
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_current_actor] = lambda: actor
    return TestClient(app)


@pytest.fixture
def client():
    """Client HTTP de test avec la BDD mockée, connecté en tant qu'assistant."""
    with _make_client(Actor(id=ASSISTANT_ID, role="assistant")) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client():
    """Client HTTP de test avec la BDD mockée, connecté en tant qu'administrateur."""
    with _make_client(Actor(id=ADMIN_ID, role="admin")) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client():
    """Client sans override d'authentification : le vrai contrôle du jeton s'applique."""
    app.dependency_overrides[get_db] = lambda: MagicMock()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db_session():
    """Session SQLite en mémoire avec le schéma complet (contraintes d'unicité et CHECK incluses)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()
