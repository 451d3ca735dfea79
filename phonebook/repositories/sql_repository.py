"""Data access gateways backed by SQLAlchemy."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Generic, Optional, TypeVar

from sqlalchemy import select, delete

from phonebook.db.models import (
    ActivationToken,
    Contact,
    RecoveryToken,
    User,
)
from phonebook.db.session import get_session

EntityT = TypeVar("EntityT")


class _SQLGateway(Generic[EntityT]):
    """find_by_id/save over a single mapped class; one transaction per call."""

    model: type

    def find_by_id(self, key) -> Optional[EntityT]:
        with get_session() as session:
            return session.get(self.model, key)

    def _stamp(self, entity: EntityT, now: datetime) -> None:
        if hasattr(entity, "created_at") and entity.created_at is None:
            entity.created_at = now

    def save(self, entity: EntityT) -> EntityT:
        self._stamp(entity, datetime.now(timezone.utc))
        with get_session() as session:
            merged = session.merge(entity)
            session.flush()
            session.refresh(merged)
            return merged


class SQLUserRepository(_SQLGateway[User]):
    model = User

    def _stamp(self, entity: User, now: datetime) -> None:
        super()._stamp(entity, now)
        entity.updated_at = now


class SQLActivationTokenRepository(_SQLGateway[ActivationToken]):
    model = ActivationToken

    def delete(self, token: str) -> None:
        with get_session() as session:
            session.execute(delete(ActivationToken).where(ActivationToken.token == token))


class SQLRecoveryTokenRepository(_SQLGateway[RecoveryToken]):
    model = RecoveryToken

    def delete(self, token: str) -> None:
        with get_session() as session:
            session.execute(delete(RecoveryToken).where(RecoveryToken.token == token))


class SQLContactRepository(_SQLGateway[Contact]):
    model = Contact

    def list_for_owner(self, email: str) -> list[Contact]:
        with get_session() as session:
            stmt = select(Contact).where(Contact.owner_email == email).order_by(Contact.id)
            return list(session.execute(stmt).scalars().all())

    def delete(self, contact_id: int) -> None:
        with get_session() as session:
            session.execute(delete(Contact).where(Contact.id == contact_id))
