"""
Configuration partagée pour tous les tests.
Backend local sur SQLite en mémoire (une base neuve par test) et override de
la dépendance get_workspace pour éviter toute connexion à Supabase.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from student_records.database import init_local_db, make_engine
from student_records.main import app
from student_records.routers.students import get_live_workspace
from student_records.services.local_backend import ChangeFeed, LocalBackend
from student_records.workspace import Workspace, get_workspace

PASSWORD = "Senha@123"


@pytest.fixture
def session_factory():
    engine = make_engine("sqlite://")
    init_local_db(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def feed():
    return ChangeFeed()


@pytest.fixture
def make_backend(session_factory, feed):
    """Fabrique de backends partageant la même base et le même flux (un par navigateur)."""
    def _make() -> LocalBackend:
        return LocalBackend(session_factory=session_factory, feed=feed, bcrypt_rounds=4)
    return _make


@pytest.fixture
def backend(make_backend):
    return make_backend()


@pytest.fixture
async def signed_in(backend):
    """Backend avec un compte créé et une session ouverte."""
    await backend.sign_up("ana@inst.edu", PASSWORD, {"full_name": "Ana Souza", "matricula": "20240001"})
    await backend.sign_in_with_password("ana@inst.edu", PASSWORD)
    return backend


async def seed_students(backend, count: int) -> list:
    """Insère `count` élèves ; le dernier inséré est le plus récent."""
    session = await backend.get_session()
    rows = []
    for i in range(count):
        rows.append(await backend.insert("students", {
            "full_name": f"Aluno {i:02d}",
            "email": f"aluno{i}@inst.edu",
            "matricula": f"2024{i:04d}",
            "user_id": session.user.id,
        }))
    return rows


@pytest.fixture
def workspace(backend):
    return Workspace("ws-test", backend)


@pytest.fixture
def client(workspace):
    """Client HTTP de test branché sur l'espace de travail local."""
    app.dependency_overrides[get_workspace] = lambda: workspace
    app.dependency_overrides[get_live_workspace] = lambda: workspace
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def logged_client(client):
    """Client avec un compte inscrit et connecté via l'API."""
    client.post("/api/v1/auth/signup", json={
        "full_name": "Ana Souza",
        "email": "ana@inst.edu",
        "matricula": "20240001",
        "password": PASSWORD,
        "confirm_password": PASSWORD,
    })
    resp = client.post("/api/v1/auth/login", json={"email": "ana@inst.edu", "password": PASSWORD})
    assert resp.status_code == 200
    return client
