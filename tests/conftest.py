"""
Configurações globais do Pytest para o Checkout Core.

Este arquivo é carregado automaticamente pelo pytest e:
- configura o Django (SQLite em memória, cache local) para os
  testes de adapters
- coloca o Celery em modo eager (sem broker)
- fornece fixtures compartilhadas
"""

import pytest
from pathlib import Path


def pytest_configure(config):
    """Configura Django e Celery antes dos testes."""
    import django
    from django.conf import settings

    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )

    if not settings.configured:
        settings.configure(
            DEBUG=True,
            SECRET_KEY='test-secret-key',
            DATABASES={
                'default': {
                    'ENGINE': 'django.db.backends.sqlite3',
                    'NAME': ':memory:',
                }
            },
            INSTALLED_APPS=[
                'django.contrib.contenttypes',
                'src.adapters.django_app.customers',
                'src.adapters.django_app.payments',
                'src.adapters.django_app.events',
            ],
            CACHES={
                'default': {
                    'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
                    'LOCATION': 'checkout-core-tests',
                }
            },
            DEFAULT_AUTO_FIELD='django.db.models.BigAutoField',
            USE_TZ=True,
            TIME_ZONE='America/Sao_Paulo',
            EVENT_PUBLISHER_MODE='sync',
            WEBPAY_TIMEOUT_MINUTES=3,
            EVENT_IDEMPOTENCY_TTL=3600,
        )
        django.setup()

    from src.config.celery import app as celery_app
    celery_app.conf.update(
        broker_url='memory://',
        result_backend='cache+memory://',
        task_always_eager=True,
        task_eager_propagates=True,
    )


def pytest_collection_modifyitems(config, items):
    """Pula testes de integração, a menos que --run-integration seja informado."""
    skip_integration = pytest.mark.skip(reason="use --run-integration to run")

    for item in items:
        if "integration" in item.keywords:
            if not config.getoption("--run-integration", default=False):
                item.add_marker(skip_integration)


def pytest_addoption(parser):
    """Adiciona opções de linha de comando."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="run integration tests",
    )


@pytest.fixture(scope="session")
def project_root():
    """Retorna o caminho raiz do projeto."""
    return Path(__file__).parent.parent


@pytest.fixture(autouse=True)
def reset_singletons():
    """
    Reset de singletons entre testes.

    Garante que cada teste inicia com container e cache limpos.
    """
    from django.core.cache import cache
    from src.config.container import reset_container

    reset_container()
    cache.clear()
    yield
    reset_container()
