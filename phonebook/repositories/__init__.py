"""
Persistence adapters.

Services depend on the gateway protocols in ``base`` rather than on
SQLAlchemy; ``sql_repository`` provides the relational implementations.
"""

from .base import (
    ActivationTokenRepository,
    ContactRepository,
    RecoveryTokenRepository,
    UserRepository,
)
from .sql_repository import (
    SQLActivationTokenRepository,
    SQLContactRepository,
    SQLRecoveryTokenRepository,
    SQLUserRepository,
)

__all__ = [
    "UserRepository",
    "ActivationTokenRepository",
    "RecoveryTokenRepository",
    "ContactRepository",
    "SQLUserRepository",
    "SQLActivationTokenRepository",
    "SQLRecoveryTokenRepository",
    "SQLContactRepository",
]
