"""
Configuração do Celery para processamento assíncrono.

O Celery é usado para:
- Entregar Domain Events de pagamento (fila `events`)
- Expirar pagamentos WEBPAY sem retorno do gateway (fila `payments`)

Arquitetura:
- Broker: RabbitMQ (mensagens entre Django e Workers)
- Backend: Redis (resultados de tarefas)
- Workers: Processos que executam as tarefas

Uso:
    # Iniciar worker
    celery -A src.config.celery worker -l INFO -Q default,events,payments
"""

import os
from celery import Celery
from kombu import Queue, Exchange

# Definir módulo de settings do Django
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

# Criar aplicação Celery
app = Celery('checkout_core')

# Carregar configurações do Django (CELERY_*)
app.config_from_object('django.conf:settings', namespace='CELERY')

app.conf.update(
    # Monitoramento
    worker_send_task_events=True,
    task_send_sent_event=True,
)

# Definir filas
app.conf.task_queues = (
    Queue('default', Exchange('default'), routing_key='default'),
    Queue('events', Exchange('events'), routing_key='events.#'),
    Queue('payments', Exchange('payments'), routing_key='payments.#'),
)
app.conf.task_default_queue = 'default'

# Roteamento de tarefas para filas
app.conf.task_routes = {
    'src.adapters.django_app.events.handlers.expire_gateway_payment': {'queue': 'payments'},
    'src.adapters.django_app.events.handlers.*': {'queue': 'events'},
}

# Auto-descoberta de tarefas
app.autodiscover_tasks(
    ['src.adapters.django_app.events'],
    related_name='handlers',
)
