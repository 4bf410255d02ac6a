"""
Shared Domain Components.

Contém componentes compartilhados entre clientes e pagamentos:
- Exceções de domínio
- Interfaces (Ports)
- Base classes para Domain Events
- Sentinela de patch em três estados
"""

from .exceptions import (
    DomainException,
    ValidationError,
    EntityNotFoundError,
    ConflictError,
    InvalidTransitionError,
    DuplicateKeyError,
    StorageError,
    GatewayError,
)
from .events import DomainEvent
from .interfaces import UnitOfWork, EventPublisher, EventStore
from .patch import UNSET, is_set

__all__ = [
    "DomainException",
    "ValidationError",
    "EntityNotFoundError",
    "ConflictError",
    "InvalidTransitionError",
    "DuplicateKeyError",
    "StorageError",
    "GatewayError",
    "DomainEvent",
    "UnitOfWork",
    "EventPublisher",
    "EventStore",
    "UNSET",
    "is_set",
]
