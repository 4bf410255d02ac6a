"""
Interfaces (Ports) - Contratos entre Core e Adapters.

Este módulo define as interfaces que os Adapters devem implementar.
São os "Ports" da Arquitetura Hexagonal.

Tipos de Ports:
- Driven Ports (lado direito): UnitOfWork, EventPublisher, EventStore
- Driving Ports (lado esquerdo): Definidos nos Use Cases

Os repositórios de cada domínio ficam em `<dominio>/ports.py`.

Princípio: Core define interfaces; Adapters implementam.
O fluxo de dependência sempre aponta para o Core.
"""

from abc import ABC, abstractmethod
from typing import List

from .events import DomainEvent


class UnitOfWork(ABC):
    """
    Unit of Work - Coordena transações atômicas.

    Cada operação do checkout (resolver cliente, transicionar pagamento)
    é sua própria unidade atômica. Nenhuma transação abrange escrita
    de cliente e de pagamento ao mesmo tempo.

    Pattern: Context Manager
        with uow:
            repo.update_if_version(payment_id, version, patch)
            uow.publish_event(event)
        # Commit automático ao sair sem erro
        # Rollback automático se exceção

    Responsabilidades:
    - Gerenciar início/fim de transação
    - Commit/Rollback coordenado
    - Enfileirar eventos para publicação pós-commit
    - Garantir que eventos só são publicados após commit bem-sucedido
    """

    def __init__(self):
        self._events: List[DomainEvent] = []

    def __enter__(self) -> "UnitOfWork":
        """
        Inicia contexto de transação.

        Returns:
            Self para permitir uso como context manager
        """
        self._events = []
        self._begin_transaction()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        """
        Finaliza contexto de transação.

        Returns:
            False para propagar exceções
        """
        if exc_type is not None:
            self.rollback()
        else:
            self.commit()
        return False  # Não suprime exceções

    @abstractmethod
    def _begin_transaction(self) -> None:
        """Inicia uma nova transação."""
        raise NotImplementedError

    @abstractmethod
    def commit(self) -> None:
        """
        Persiste todas as mudanças e publica eventos.

        Ordem de execução:
        1. Commit da transação no banco
        2. Publicação de eventos enfileirados
        3. Limpeza de estado interno

        Note:
            Eventos só são publicados após commit bem-sucedido.
            Se commit falhar, eventos são descartados.
        """
        raise NotImplementedError

    @abstractmethod
    def rollback(self) -> None:
        """
        Desfaz todas as mudanças e descarta eventos.

        Chamado automaticamente se exceção ocorrer dentro
        do bloco `with`.
        """
        raise NotImplementedError

    def publish_event(self, event: DomainEvent) -> None:
        """
        Enfileira evento para publicação após commit.

        Args:
            event: Evento de domínio a ser publicado

        Example:
            with uow:
                repo.update_if_version(payment.id, payment.version, patch)
                uow.publish_event(PaymentCompletedEvent(...))
            # Evento publicado aqui, após commit
        """
        self._events.append(event)

    def clear_events(self) -> None:
        """Limpa fila de eventos."""
        self._events.clear()


class EventPublisher(ABC):
    """
    Interface para publicação de eventos.

    Entrega não ordenada e pelo menos uma vez: consumidores devem ser
    idempotentes em (payment_id, event_type).

    Example:
        class CeleryEventPublisher(EventPublisher):
            def publish(self, event):
                dispatch_domain_event.delay(event.to_dict())
    """

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        """
        Publica evento para consumidores.

        Args:
            event: Evento de domínio a ser publicado
        """
        raise NotImplementedError

    @abstractmethod
    def publish_batch(self, events: List[DomainEvent]) -> None:
        """
        Publica múltiplos eventos em batch.

        Args:
            events: Lista de eventos a serem publicados
        """
        raise NotImplementedError


class EventStore(ABC):
    """
    Interface para persistência de eventos (trilha de auditoria).

    Permite armazenar o histórico de transições terminais de cada
    pagamento para auditoria e reprocessamento.
    """

    @abstractmethod
    def append(self, event: DomainEvent) -> None:
        """
        Adiciona evento ao store.

        Adicionar o mesmo `event_id` duas vezes não cria registro novo.

        Args:
            event: Evento a ser persistido
        """
        raise NotImplementedError

    @abstractmethod
    def get_events_for_aggregate(self, aggregate_id: str) -> List[dict]:
        """
        Recupera eventos de um agregado.

        Args:
            aggregate_id: ID do agregado

        Returns:
            Lista de eventos serializados, em ordem de ocorrência
        """
        raise NotImplementedError


# Type alias para facilitar tipagem
UoW = UnitOfWork
