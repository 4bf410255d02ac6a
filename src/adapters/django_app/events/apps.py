"""
Configuração do Django App de Eventos (Event Store + handlers Celery).
"""

from django.apps import AppConfig


class EventsConfig(AppConfig):
    """Configuração do app Events."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.events'
    label = 'domain_events'
    verbose_name = 'Eventos de Domínio'
