from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path

import pytest

# Makes the phonebook package importable for local runs without installation
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from phonebook.core import config as core_config  # noqa: E402
from phonebook.db import models  # noqa: E402
from phonebook.db import session as db_session  # noqa: E402
from phonebook.services.user_service import UserService  # noqa: E402


class InMemoryRepository:
    """Dict-backed gateway that records every save."""

    def __init__(self, key: str):
        self.key = key
        self.rows: dict = {}
        self.saved: list = []
        self.deleted: list = []
        self.lookups: list = []

    def find_by_id(self, key):
        self.lookups.append(key)
        return self.rows.get(key)

    def save(self, entity):
        self.saved.append(entity)
        self.rows[getattr(entity, self.key)] = entity
        return entity

    def delete(self, key) -> None:
        self.deleted.append(key)
        self.rows.pop(key, None)


class InMemoryContactRepository(InMemoryRepository):
    def __init__(self):
        super().__init__("id")

    def list_for_owner(self, email: str) -> list:
        return [c for c in self.rows.values() if c.owner_email == email]


@dataclass
class SentMail:
    to_address: str
    subject: str
    body: str


@dataclass
class RecordingMailer:
    sent: list = field(default_factory=list)

    def send_mail(self, to_address: str, subject: str, body: str) -> None:
        self.sent.append(SentMail(to_address, subject, body))


class PrefixHasher:
    def encode(self, raw: str) -> str:
        return f"encoded{raw}"

    def matches(self, raw: str, hashed: str | None) -> bool:
        return hashed == self.encode(raw)


@pytest.fixture()
def settings(monkeypatch):
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://phonebook.test")
    core_config.get_settings.cache_clear()
    yield core_config.get_settings()
    core_config.get_settings.cache_clear()


@pytest.fixture()
def users():
    return InMemoryRepository("email")


@pytest.fixture()
def activation_tokens():
    return InMemoryRepository("token")


@pytest.fixture()
def recovery_tokens():
    return InMemoryRepository("token")


@pytest.fixture()
def contacts():
    return InMemoryContactRepository()


@pytest.fixture()
def mailer():
    return RecordingMailer()


@pytest.fixture()
def service(settings, users, activation_tokens, recovery_tokens, contacts, mailer):
    return UserService(
        users=users,
        activation_tokens=activation_tokens,
        recovery_tokens=recovery_tokens,
        contacts=contacts,
        mailer=mailer,
        hasher=PrefixHasher(),
        settings=settings,
    )


@pytest.fixture()
def db_env(tmp_path, monkeypatch):
    """Point DATABASE_URL at a temporary SQLite file and reset settings/engine caches."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://phonebook.test")
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]

    engine = db_session.get_engine()
    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)

    yield db_file

    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]
    core_config.get_settings.cache_clear()
