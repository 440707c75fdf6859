import pytest
from datetime import datetime, timedelta, timezone
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from app import app
from database import Base, build_engine, get_db
from services.notification_service import NotificationDispatcher, get_notifier
from services.verification_service import get_clock
from services.verification_store import VerificationStore


class FakeClock:
    """Callable clock that only moves when a test advances it."""

    def __init__(self, now=None):
        self.now = now or datetime(2026, 1, 15, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


class RecordingMailer:
    """Mail transport that keeps sent messages instead of talking to SMTP."""

    def __init__(self):
        self.sent = []
        self.fail_for = set()

    def send(self, to, subject, body):
        if to in self.fail_for:
            raise ConnectionError(f"SMTP unavailable for {to}")
        self.sent.append({"to": to, "subject": subject, "body": body})


@pytest.fixture
def engine(tmp_path):
    # File-backed so that several threads can open their own connections
    engine = build_engine(f"sqlite:///{tmp_path / 'test_reservations.db'}")
    import models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def store(db):
    return VerificationStore(db)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def operator_email():
    return "operator@laon.test"


@pytest.fixture
def notifier(mailer, operator_email):
    return NotificationDispatcher(mailer, operator_email=operator_email)


@pytest.fixture
def client(db, notifier, clock):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides = {}
