"""
Configuração do Django App para Pagamentos.
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuração do app Payments."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.payments'
    label = 'payments'
    verbose_name = 'Pagamentos'
