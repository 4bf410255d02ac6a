"""
Event Handlers - Processadores de Eventos de Pagamento.

Handlers são executados de forma assíncrona via Celery quando
Domain Events são publicados.

A entrega é pelo menos uma vez: cada handler registra
(payment_id, event_type) no cache com `cache.add` e ignora
entregas repetidas. Se o processamento falhar, o registro é
liberado antes do retry para que a reentrega seja processada.

Tarefas:
- dispatch_domain_event: roteador central
- handle_payment_completed / failed / cancelled
- expire_gateway_payment: expiração do retorno do gateway (agendada)
- record_metric: métricas de pagamento

Padrão:
    @shared_task(bind=True, ...)
    def handle_<evento>(self, event_data: dict) -> None:
        # Processar evento
"""

import logging
from typing import Dict, Any, Optional

from celery import shared_task
from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)


def _event_key(event_data: Dict[str, Any]) -> str:
    data = event_data.get('data', {})
    payment_id = data.get('payment_id') or event_data.get('aggregate_id')
    return f"payment-event:{payment_id}:{event_data.get('event_type')}"


def _claim_event(key: str, event_data: Dict[str, Any]) -> bool:
    """
    Marca (payment_id, event_type) como processado.

    Returns:
        False se o evento já foi processado (entrega repetida)
    """
    timeout = getattr(settings, 'EVENT_IDEMPOTENCY_TTL', 7 * 24 * 3600)
    return cache.add(key, event_data.get('event_id', '1'), timeout=timeout)


def _release_event(key: str) -> None:
    """Desfaz a marcação para que a próxima entrega seja processada."""
    cache.delete(key)


# =============================================================================
# Event Handlers - Pagamentos
# =============================================================================

@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_payment_completed(self, event_data: Dict[str, Any]) -> bool:
    """
    Handler para PaymentCompletedEvent.

    Ações:
    - Liberar pedido do carrinho para fulfillment
    - Registrar métrica

    Returns:
        True se processado, False se entrega repetida
    """
    key = _event_key(event_data)
    if not _claim_event(key, event_data):
        logger.info(
            f"[HANDLER] PaymentCompleted duplicado ignorado: {event_data.get('aggregate_id')}"
        )
        return False

    data = event_data.get('data', {})
    try:
        logger.info(
            f"[HANDLER] PaymentCompleted: {data.get('payment_id')} | "
            f"Cart: {data.get('cart_id')} | Amount: {data.get('amount')}"
        )
        record_metric.delay(
            metric_name='payments_completed',
            value=float(data.get('amount') or 0),
            tags={'payment_type': data.get('payment_type')},
        )
    except Exception as e:
        _release_event(key)
        logger.error(f"[HANDLER] PaymentCompleted failed for {data.get('payment_id')}: {e}")
        raise self.retry(exc=e)
    return True


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_payment_failed(self, event_data: Dict[str, Any]) -> bool:
    """
    Handler para PaymentFailedEvent.

    Ações:
    - Liberar carrinho para nova tentativa de pagamento
    - Registrar métrica com o motivo
    """
    key = _event_key(event_data)
    if not _claim_event(key, event_data):
        logger.info(
            f"[HANDLER] PaymentFailed duplicado ignorado: {event_data.get('aggregate_id')}"
        )
        return False

    data = event_data.get('data', {})
    try:
        logger.info(
            f"[HANDLER] PaymentFailed: {data.get('payment_id')} | "
            f"Cart: {data.get('cart_id')} | Reason: {data.get('reason')}"
        )
        record_metric.delay(
            metric_name='payments_failed',
            value=1,
            tags={'payment_type': data.get('payment_type')},
        )
    except Exception as e:
        _release_event(key)
        logger.error(f"[HANDLER] PaymentFailed failed for {data.get('payment_id')}: {e}")
        raise self.retry(exc=e)
    return True


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_payment_cancelled(self, event_data: Dict[str, Any]) -> bool:
    """Handler para PaymentCancelledEvent."""
    key = _event_key(event_data)
    if not _claim_event(key, event_data):
        logger.info(
            f"[HANDLER] PaymentCancelled duplicado ignorado: {event_data.get('aggregate_id')}"
        )
        return False

    data = event_data.get('data', {})
    try:
        logger.info(
            f"[HANDLER] PaymentCancelled: {data.get('payment_id')} | "
            f"Cart: {data.get('cart_id')} | Reason: {data.get('reason')}"
        )
        record_metric.delay(
            metric_name='payments_cancelled',
            value=1,
            tags={'payment_type': data.get('payment_type')},
        )
    except Exception as e:
        _release_event(key)
        logger.error(f"[HANDLER] PaymentCancelled failed for {data.get('payment_id')}: {e}")
        raise self.retry(exc=e)
    return True


# =============================================================================
# Event Dispatcher (Router)
# =============================================================================

EVENT_HANDLERS = {
    'PaymentCompletedEvent': handle_payment_completed,
    'PaymentFailedEvent': handle_payment_failed,
    'PaymentCancelledEvent': handle_payment_cancelled,
}


@shared_task(bind=True, max_retries=5, default_retry_delay=30)
def dispatch_domain_event(self, event_type: str, event_data: Dict[str, Any]) -> bool:
    """
    Dispatcher central para Domain Events.

    Args:
        event_type: Tipo do evento (ex: 'PaymentCompletedEvent')
        event_data: Dados do evento serializado (`DomainEvent.to_dict()`)

    Returns:
        True se um handler foi acionado
    """
    handler = EVENT_HANDLERS.get(event_type)

    if handler:
        logger.info(f"[DISPATCHER] Roteando {event_type} para handler")
        handler.delay(event_data)
        return True

    logger.warning(f"[DISPATCHER] Handler não encontrado para {event_type}")
    return False


# =============================================================================
# Payment Tasks
# =============================================================================

@shared_task(bind=True, max_retries=3, default_retry_delay=30, acks_late=True)
def expire_gateway_payment(self, payment_id: str) -> Optional[str]:
    """
    Expira pagamento WEBPAY cujo retorno do gateway não chegou no prazo.

    Agendada por CeleryPaymentTimeoutScheduler no início do
    redirecionamento. Pagamentos já terminais não são alterados.

    Returns:
        Status final do pagamento, ou None se não existe
    """
    from src.config.container import get_container
    from src.core.payments.dtos import ExpireGatewayPaymentInputDTO
    from src.core.shared.exceptions import EntityNotFoundError, StorageError

    service = get_container().expire_gateway_payment_service()
    try:
        output = service.execute(
            ExpireGatewayPaymentInputDTO(payment_id=payment_id, task_id=self.request.id)
        )
    except EntityNotFoundError:
        logger.warning(f"[TIMEOUT] Payment {payment_id} not found")
        return None
    except StorageError as e:
        logger.warning(f"[TIMEOUT] Storage unavailable for payment {payment_id}, retrying")
        raise self.retry(exc=e)

    logger.info(f"[TIMEOUT] Payment {payment_id} is {output.status}")
    return output.status


# =============================================================================
# Metric Tasks
# =============================================================================

@shared_task(bind=True, ignore_result=True)
def record_metric(
    self,
    metric_name: str,
    value: float,
    tags: Dict[str, str] = None
) -> None:
    """
    Registra métrica para monitoramento.

    Args:
        metric_name: Nome da métrica
        value: Valor
        tags: Tags para dimensões
    """
    logger.info(
        f"[METRIC] {metric_name}={value} | tags={tags or {}}"
    )
