from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from argon2 import PasswordHasher

# make the webapp package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from webapp.core import config as core_config
from webapp.core.rate_limiter import reset_rate_limits
from webapp.core.security import CredentialHasher
from webapp.db import models
from webapp.db import session as db_session


class FakeClock:
    """Settable clock handed to services instead of utcnow."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingPublisher:
    """Collects verification messages; optionally fails like a broken transport."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[tuple[str, str, str]] = []

    def publish(self, email: str, token: str, display_name: str | None) -> None:
        if self.fail:
            raise RuntimeError("transport down")
        self.sent.append((email, token, display_name))

    def token_for(self, email: str) -> str:
        return [token for sent_to, token, _ in self.sent if sent_to == email][-1]


def fast_hasher() -> CredentialHasher:
    return CredentialHasher(PasswordHasher(time_cost=1, memory_cost=8, parallelism=1))


@pytest.fixture()
def temp_db(tmp_path, monkeypatch):
    """Temporary SQLite database with fresh settings and engine caches, fully torn down."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    monkeypatch.setenv("STORAGE_DIR", str(tmp_path / "storage"))
    monkeypatch.setenv("RATE_LIMIT_ENABLED", "false")
    monkeypatch.delenv("SMTP_HOST", raising=False)
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]
    reset_rate_limits()

    engine = db_session.get_engine()
    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)

    yield db_file

    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def publisher():
    return RecordingPublisher()
