"""
Event Store - Model Django para eventos de domínio.

Registra cada transição terminal de pagamento para auditoria e
reprocessamento de consumidores.
"""

from django.db import models


class DomainEventModel(models.Model):
    """
    Model para persistência de Domain Events.

    Fields:
        event_id: UUID do evento (primary key)
        event_type: Nome da classe do evento
        aggregate_type / aggregate_id: Origem do evento
        event_data: Dados serializados do evento
        version: Versão do schema do evento
        occurred_at: Quando o evento ocorreu
        recorded_at: Quando o evento foi persistido
    """

    event_id = models.CharField(
        max_length=36,
        primary_key=True,
        help_text="UUID único do evento"
    )

    event_type = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Tipo do evento (ex: PaymentCompletedEvent)"
    )

    aggregate_type = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Tipo do agregado (ex: Payment)"
    )

    aggregate_id = models.CharField(
        max_length=36,
        db_index=True,
        help_text="ID do agregado que gerou o evento"
    )

    event_data = models.JSONField(
        default=dict,
        help_text="Dados serializados do evento"
    )

    version = models.IntegerField(
        default=1,
        help_text="Versão do schema do evento"
    )

    occurred_at = models.DateTimeField(
        help_text="Quando o evento ocorreu"
    )

    recorded_at = models.DateTimeField(
        auto_now_add=True,
        help_text="Quando o evento foi persistido"
    )

    class Meta:
        db_table = 'domain_events'
        verbose_name = 'Evento de Domínio'
        verbose_name_plural = 'Eventos de Domínio'
        ordering = ['occurred_at']
        indexes = [
            models.Index(fields=['aggregate_id', 'occurred_at'], name='events_aggregate_idx'),
            models.Index(fields=['event_type', 'recorded_at'], name='events_type_idx'),
        ]

    def __str__(self):
        return f"{self.event_type} - {self.aggregate_id[:8]} @ {self.occurred_at}"
