"""
Configuração do Checkout Core.

Módulos:
- settings: Configurações Django (python-dotenv)
- celery: Configuração Celery para eventos e timeouts de pagamento
- container: Dependency Injection Container
"""

# Importar app Celery para que seja carregado com Django
from .celery import app as celery_app

__all__ = ('celery_app',)
