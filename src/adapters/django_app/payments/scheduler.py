"""
Agendamento da expiração de pagamentos redirecionados ao gateway.

Implementa o PaymentTimeoutScheduler do Core com uma tarefa Celery
atrasada (countdown) na fila `payments`.
"""

from typing import Optional
import logging

logger = logging.getLogger(__name__)


class CeleryPaymentTimeoutScheduler:
    """
    Agenda `expire_gateway_payment` para `delay_seconds` no futuro.

    Example:
        scheduler = CeleryPaymentTimeoutScheduler()
        task_id = scheduler.schedule_expiry(payment.id, 180)
    """

    def __init__(self, queue: str = 'payments'):
        self._queue = queue

    def schedule_expiry(self, payment_id: str, delay_seconds: int) -> Optional[str]:
        from src.adapters.django_app.events.handlers import expire_gateway_payment

        result = expire_gateway_payment.apply_async(
            args=[payment_id],
            countdown=delay_seconds,
            queue=self._queue,
        )
        logger.debug(
            f"Scheduled gateway expiry for payment {payment_id} "
            f"in {delay_seconds}s (task {result.id})"
        )
        return result.id
