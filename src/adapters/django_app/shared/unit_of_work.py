"""
Unit of Work - Implementação Django.

Cada operação do checkout é uma unidade atômica própria.

Responsabilidades:
- Iniciar/finalizar transações (django.db.transaction.atomic)
- Commit/Rollback coordenado
- Persistir eventos no Event Store dentro da transação
- Publicar eventos somente após o commit (transaction.on_commit)

Quando o UoW roda dentro de um bloco atomic externo, a publicação
fica para o commit do bloco mais externo.
"""

from functools import partial
from typing import List, Optional
import logging

from django.db import DatabaseError, transaction

from src.core.shared.interfaces import UnitOfWork, EventPublisher, EventStore
from src.core.shared.events import DomainEvent
from src.core.shared.exceptions import StorageError

logger = logging.getLogger(__name__)


class DjangoUnitOfWork(UnitOfWork):
    """
    Implementação Django do Unit of Work.

    Features:
    - Context manager (with statement)
    - Auto-commit/rollback
    - Event buffering
    - Event Store integration (opcional)
    - Event Publisher integration (opcional)

    Example:
        with DjangoUnitOfWork(event_publisher=publisher) as uow:
            repo.update_if_version(payment.id, payment.version, patch)
            uow.publish_event(PaymentCompletedEvent(...))
        # Commit automático + eventos publicados

    Example com rollback:
        with DjangoUnitOfWork() as uow:
            uow.publish_event(event)
            raise ConflictError("...")
        # Rollback automático, eventos descartados
    """

    def __init__(
        self,
        event_publisher: Optional[EventPublisher] = None,
        event_store: Optional[EventStore] = None,
        using: Optional[str] = None,
    ):
        """
        Inicializa Unit of Work.

        Args:
            event_publisher: Publicador de eventos (Celery, logging)
            event_store: Store para persistência de eventos
            using: Alias do banco (None = default)
        """
        super().__init__()
        self._event_publisher = event_publisher
        self._event_store = event_store
        self._using = using
        self._atomic = None
        self._committed = False
        self._rolled_back = False

    def _begin_transaction(self) -> None:
        """Abre bloco atomic (transação ou savepoint se aninhado)."""
        self._committed = False
        self._rolled_back = False
        self._atomic = transaction.atomic(using=self._using)
        self._atomic.__enter__()
        logger.debug("Transaction started")

    def commit(self) -> None:
        """
        Persiste todas as mudanças e agenda publicação dos eventos.

        Ordem de execução:
        1. Persistir eventos no Event Store (dentro da transação)
        2. Commit da transação no banco
        3. Publicar eventos (on_commit)

        Raises:
            StorageError: Se o commit falhar
        """
        if self._atomic is None:
            logger.warning("Transaction already finalized")
            return

        events = list(self._events)
        try:
            if self._event_store and events:
                for event in events:
                    self._event_store.append(event)
        except Exception:
            self.rollback()
            raise

        atomic, self._atomic = self._atomic, None
        try:
            atomic.__exit__(None, None, None)
        except DatabaseError as e:
            logger.error(f"Commit failed: {e}")
            self.clear_events()
            self._rolled_back = True
            raise StorageError(f"Falha ao confirmar transação: {e}")

        self._committed = True
        logger.debug("Transaction committed")

        for event in events:
            transaction.on_commit(partial(self._publish, event), using=self._using)
        self.clear_events()

    def rollback(self) -> None:
        """
        Desfaz todas as mudanças e descarta eventos.

        Chamado automaticamente se exceção ocorrer dentro do contexto.
        """
        if self._atomic is None:
            return

        atomic, self._atomic = self._atomic, None
        try:
            transaction.set_rollback(True, using=self._using)
            atomic.__exit__(None, None, None)
            logger.debug("Transaction rolled back")
        except DatabaseError as e:
            logger.error(f"Rollback failed: {e}")
        finally:
            self._rolled_back = True
            self.clear_events()

    def _publish(self, event: DomainEvent) -> None:
        """
        Publica evento para handlers assíncronos.

        Se event_publisher não estiver configurado, apenas loga.
        """
        logger.info(
            f"Publishing event: {event.event_type} "
            f"for aggregate {event.aggregate_id}"
        )
        if self._event_publisher:
            try:
                self._event_publisher.publish(event)
            except Exception as e:
                # Log mas não falha - eventos ficam no Event Store para reprocessamento
                logger.error(f"Failed to publish event {event.event_id}: {e}")

    @property
    def is_committed(self) -> bool:
        """Verifica se transação foi comitada."""
        return self._committed

    @property
    def is_rolled_back(self) -> bool:
        """Verifica se transação foi revertida."""
        return self._rolled_back


class InMemoryUnitOfWork(UnitOfWork):
    """
    Unit of Work em memória para testes.

    Não persiste nada - apenas simula o comportamento transacional
    para testes unitários sem banco de dados. Eventos comitados vão
    para `published_events` e, se configurado, para o publisher.

    Example:
        uow = InMemoryUnitOfWork()
        with uow:
            uow.publish_event(event)

        assert uow.committed
        assert len(uow.published_events) == 1
    """

    def __init__(self, event_publisher: Optional[EventPublisher] = None):
        super().__init__()
        self._event_publisher = event_publisher
        self._committed = False
        self._rolled_back = False
        self._published_events: List[DomainEvent] = []

    def _begin_transaction(self) -> None:
        """Simula início de transação."""
        self._committed = False
        self._rolled_back = False

    def commit(self) -> None:
        """Simula commit e publica eventos enfileirados."""
        self._committed = True
        events = list(self._events)
        self.clear_events()
        self._published_events.extend(events)
        if self._event_publisher:
            self._event_publisher.publish_batch(events)

    def rollback(self) -> None:
        """Simula rollback."""
        self._rolled_back = True
        self.clear_events()

    @property
    def committed(self) -> bool:
        """Verifica se foi comitado."""
        return self._committed

    @property
    def rolled_back(self) -> bool:
        """Verifica se foi revertido."""
        return self._rolled_back

    @property
    def published_events(self) -> List[DomainEvent]:
        """Retorna eventos que foram 'publicados'."""
        return self._published_events

    def reset(self) -> None:
        """Reset para próximo teste."""
        self._committed = False
        self._rolled_back = False
        self._published_events.clear()
        self.clear_events()
