"""Gateway protocols the services are written against."""
from __future__ import annotations

from typing import Optional, Protocol

from phonebook.db.models import ActivationToken, Contact, RecoveryToken, User


class UserRepository(Protocol):
    """Users keyed by email."""

    def find_by_id(self, email: str) -> Optional[User]: ...

    def save(self, user: User) -> User: ...


class ActivationTokenRepository(Protocol):
    def find_by_id(self, token: str) -> Optional[ActivationToken]: ...

    def save(self, token: ActivationToken) -> ActivationToken: ...

    def delete(self, token: str) -> None: ...


class RecoveryTokenRepository(Protocol):
    def find_by_id(self, token: str) -> Optional[RecoveryToken]: ...

    def save(self, token: RecoveryToken) -> RecoveryToken: ...

    def delete(self, token: str) -> None: ...


class ContactRepository(Protocol):
    def find_by_id(self, contact_id: int) -> Optional[Contact]: ...

    def save(self, contact: Contact) -> Contact: ...

    def list_for_owner(self, email: str) -> list[Contact]: ...

    def delete(self, contact_id: int) -> None: ...
