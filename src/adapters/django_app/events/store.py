"""
Event Store Django.

Persiste Domain Events na tabela `domain_events` dentro da transação
do Unit of Work, antes do commit.
"""

from typing import Any, Dict, List
import logging

from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import EventStore

from ..shared.repository import storage_errors
from .models import DomainEventModel

logger = logging.getLogger(__name__)


class DjangoEventStore(EventStore):
    """
    Event Store usando Django ORM.

    Usado para:
    - Auditoria das transições terminais
    - Reprocessamento de consumidores (replay)
    """

    def append(self, event: DomainEvent) -> None:
        """
        Adiciona evento ao store (mesmo event_id não duplica).

        Args:
            event: Evento de domínio
        """
        data = event.to_dict()
        with storage_errors("append event"):
            DomainEventModel.objects.get_or_create(
                event_id=event.event_id,
                defaults={
                    'event_type': event.event_type,
                    'aggregate_type': event.aggregate_type,
                    'aggregate_id': event.aggregate_id,
                    'event_data': data['data'],
                    'version': event.version,
                    'occurred_at': event.occurred_at,
                },
            )

        logger.debug(f"Event stored: {event.event_type} for {event.aggregate_id}")

    def get_events_for_aggregate(self, aggregate_id: str) -> List[Dict[str, Any]]:
        """
        Recupera eventos de um agregado, em ordem de ocorrência.

        Returns:
            Lista de eventos no formato de `DomainEvent.to_dict()`
        """
        with storage_errors("load events"):
            events = list(
                DomainEventModel.objects
                .filter(aggregate_id=aggregate_id)
                .order_by('occurred_at')
            )

        return [
            {
                'event_id': e.event_id,
                'event_type': e.event_type,
                'aggregate_id': e.aggregate_id,
                'aggregate_type': e.aggregate_type,
                'occurred_at': e.occurred_at.isoformat(),
                'version': e.version,
                'data': e.event_data,
            }
            for e in events
        ]
