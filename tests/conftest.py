import os
import tempfile
import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Environment needed before importing application modules
_fd, _db_path = tempfile.mkstemp(prefix="test_db_", suffix=".sqlite")
os.close(_fd)
os.environ["DATABASE_URL"] = f"sqlite:///{_db_path}"
os.environ["JWT_SECRET_KEY"] = "testsecret"
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.pop("LOGFIRE_TOKEN", None)
os.environ.pop("ALERTS_REQUIRE_ADMIN", None)


class FakeSmsSender:
    """Records sends; raises for numbers listed in ``fail_for``."""

    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.attempts = []
        self.sent = []

    def send(self, to, body):
        self.attempts.append(to)
        if to in self.fail_for:
            raise RuntimeError(f"carrier rejected {to}")
        self.sent.append((to, body))
        return f"SM{uuid.uuid4().hex[:8]}"


class FakeMailer:
    def __init__(self):
        self.outbox = []

    def send(self, to, subject, html):
        self.outbox.append({"to": to, "subject": subject, "html": html})


class FakeMediaStore:
    def __init__(self, fail=False):
        self.fail = fail
        self.uploads = []

    async def upload(self, path, folder):
        from core.media import MediaUploadError

        self.uploads.append({"path": path, "folder": folder, "existed": os.path.exists(path)})
        if self.fail:
            raise MediaUploadError("asset host unavailable")
        return f"https://res.cloudinary.test/{folder}/{os.path.basename(path)}"


@pytest.fixture(scope="session")
def test_db_url():
    return os.environ["DATABASE_URL"]


@pytest.fixture(scope="session")
def engine(test_db_url):
    from database.database import Base  # local after env set
    from models import report, user  # noqa: F401

    engine_ = create_engine(
        test_db_url,
        connect_args=(
            {"check_same_thread": False}
            if "sqlite" in test_db_url
            else {}
        ),
    )
    Base.metadata.create_all(bind=engine_)
    yield engine_
    engine_.dispose()


@pytest.fixture(scope="function")
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def local_db():
    """Private in-memory database for controller tests."""
    from database.database import Base
    from models import report, user  # noqa: F401

    engine_ = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine_)
    session = sessionmaker(bind=engine_)()
    try:
        yield session
    finally:
        session.close()
        engine_.dispose()


@pytest.fixture(scope="session")
def app(test_db_url):  # noqa: D401
    from main import app as fastapi_app

    return fastapi_app


@pytest.fixture(autouse=True)
def _override_dependency(app, db_session):
    from database.database import get_db

    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture()
def sms_sender(app):
    from core.sms import get_sms_sender

    sender = FakeSmsSender()
    app.dependency_overrides[get_sms_sender] = lambda: sender
    yield sender
    app.dependency_overrides.pop(get_sms_sender, None)


@pytest.fixture()
def mailer(app):
    from core.mailer import get_mailer

    fake = FakeMailer()
    app.dependency_overrides[get_mailer] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_mailer, None)


@pytest.fixture()
def media_store(app):
    from core.media import get_media_store

    store = FakeMediaStore()
    app.dependency_overrides[get_media_store] = lambda: store
    yield store
    app.dependency_overrides.pop(get_media_store, None)


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c
