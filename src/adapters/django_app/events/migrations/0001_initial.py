"""
Migration inicial do Event Store.

Cria a tabela:
- domain_events: Event Store
"""

from django.db import migrations, models


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='DomainEventModel',
            fields=[
                ('event_id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    help_text='UUID único do evento'
                )),
                ('event_type', models.CharField(
                    max_length=100,
                    db_index=True,
                    help_text='Tipo do evento (ex: PaymentCompletedEvent)'
                )),
                ('aggregate_type', models.CharField(
                    max_length=100,
                    db_index=True,
                    help_text='Tipo do agregado (ex: Payment)'
                )),
                ('aggregate_id', models.CharField(
                    max_length=36,
                    db_index=True,
                    help_text='ID do agregado que gerou o evento'
                )),
                ('event_data', models.JSONField(
                    default=dict,
                    help_text='Dados serializados do evento'
                )),
                ('version', models.IntegerField(
                    default=1,
                    help_text='Versão do schema do evento'
                )),
                ('occurred_at', models.DateTimeField(
                    help_text='Quando o evento ocorreu'
                )),
                ('recorded_at', models.DateTimeField(
                    auto_now_add=True,
                    help_text='Quando o evento foi persistido'
                )),
            ],
            options={
                'verbose_name': 'Evento de Domínio',
                'verbose_name_plural': 'Eventos de Domínio',
                'db_table': 'domain_events',
                'ordering': ['occurred_at'],
                'indexes': [
                    models.Index(fields=['aggregate_id', 'occurred_at'], name='events_aggregate_idx'),
                    models.Index(fields=['event_type', 'recorded_at'], name='events_type_idx'),
                ],
            },
        ),
    ]
