"""
Testes para publishers, handlers Celery e agendamento de timeout.

Celery roda em modo eager (configurado no conftest raiz).
"""

import logging
from decimal import Decimal
from unittest.mock import Mock, patch

import pytest

from src.core.payments.entities import PaymentStatus, PaymentType
from src.core.payments.events import (
    PaymentCancelledEvent,
    PaymentCompletedEvent,
    PaymentFailedEvent,
)

from src.adapters.django_app.events import handlers
from src.adapters.django_app.events.publishers import (
    CeleryEventPublisher,
    InMemoryEventPublisher,
    LoggingEventPublisher,
    get_event_publisher,
)
from src.adapters.django_app.payments.scheduler import CeleryPaymentTimeoutScheduler


def completed_event(payment_id="p-1"):
    return PaymentCompletedEvent(
        aggregate_id=payment_id,
        cart_id="C1",
        amount=Decimal("10000.00"),
        payment_type="bank_transfer",
    )


class TestPublishers:

    def test_factory_por_modo(self):
        assert isinstance(get_event_publisher("sync"), LoggingEventPublisher)
        assert isinstance(get_event_publisher("celery"), CeleryEventPublisher)

    def test_logging_publisher_executa_handlers_locais(self, caplog):
        publisher = LoggingEventPublisher()
        received = []
        publisher.register_handler("PaymentCompletedEvent", received.append)
        publisher.register_handler("PaymentCompletedEvent", Mock(side_effect=RuntimeError("x")))
        event = completed_event()

        with caplog.at_level(logging.INFO):
            publisher.publish_batch([event])

        assert received == [event]
        assert "PaymentCompletedEvent" in caplog.text

    def test_inmemory_publisher(self):
        publisher = InMemoryEventPublisher()
        publisher.publish(completed_event())

        assert len(publisher.get_events_by_type("PaymentCompletedEvent")) == 1
        publisher.clear()
        assert publisher.published_events == []

    def test_celery_publisher_envia_evento_serializado(self):
        event = completed_event()

        with patch.object(handlers.dispatch_domain_event, "delay") as delay:
            CeleryEventPublisher(also_log=False).publish(event)

        delay.assert_called_once_with("PaymentCompletedEvent", event.to_dict())


class TestHandlers:

    def test_dispatcher_roteia_para_handler(self):
        event = completed_event()

        with patch.object(handlers.handle_payment_completed, "delay") as delay:
            routed = handlers.dispatch_domain_event(event.event_type, event.to_dict())

        assert routed is True
        delay.assert_called_once_with(event.to_dict())

    def test_dispatcher_evento_desconhecido(self):
        assert handlers.dispatch_domain_event("OrderShippedEvent", {}) is False

    def test_handler_ignora_entrega_repetida(self):
        """Entrega pelo menos uma vez: (payment_id, event_type) processado uma vez."""
        data = completed_event().to_dict()

        assert handlers.handle_payment_completed(data) is True
        assert handlers.handle_payment_completed(data) is False

    def test_falha_libera_evento_para_reentrega(self):
        """Falha no processamento não pode marcar o evento como processado."""
        data = completed_event("p-retry").to_dict()

        with patch.object(
            handlers.record_metric, "delay", side_effect=ConnectionError("broker down")
        ):
            with pytest.raises(ConnectionError):
                handlers.handle_payment_completed(data)

        with patch.object(handlers.record_metric, "delay") as delay:
            assert handlers.handle_payment_completed(data) is True

        delay.assert_called_once()
        assert handlers.handle_payment_completed(data) is False

    def test_falha_no_cancelamento_libera_evento(self):
        data = PaymentCancelledEvent(
            aggregate_id="p-cancel", cart_id="C1", amount="1", payment_type="webpay",
        ).to_dict()

        with patch.object(handlers.record_metric, "delay", side_effect=RuntimeError("x")):
            with pytest.raises(RuntimeError):
                handlers.handle_payment_cancelled(data)

        assert handlers.handle_payment_cancelled(data) is True

    def test_eventos_diferentes_do_mesmo_pagamento(self):
        completed = completed_event("p-9").to_dict()
        failed = PaymentFailedEvent(
            aggregate_id="p-9", cart_id="C1", amount="1", payment_type="webpay",
        ).to_dict()

        assert handlers.handle_payment_completed(completed) is True
        assert handlers.handle_payment_failed(failed) is True

    def test_fluxo_eager_completo(self):
        event = completed_event("p-eager")

        result = handlers.dispatch_domain_event.delay(event.event_type, event.to_dict())

        assert result.get() is True
        assert handlers.handle_payment_completed(event.to_dict()) is False


@pytest.mark.django_db
class TestExpireGatewayPaymentTask:

    def test_expira_pagamento_webpay(self, payment_factory, payment_repo):
        payment = payment_factory(PaymentType.WEBPAY)

        result = handlers.expire_gateway_payment.apply(args=[payment.id])

        assert result.get() == "failed"
        stored = payment_repo.get_by_id(payment.id)
        assert stored.status == PaymentStatus.FAILED
        assert stored.metadata["gateway_timeout"]["task_id"] == result.id

    def test_pagamento_terminal_permanece(self, payment_factory, payment_repo):
        payment = payment_factory(PaymentType.WEBPAY)
        payment_repo.update_if_version(payment.id, 1, {
            "status": PaymentStatus.COMPLETED, "transaction_id": "TXN1",
        })

        assert handlers.expire_gateway_payment.apply(args=[payment.id]).get() == "completed"

    def test_pagamento_inexistente(self):
        assert handlers.expire_gateway_payment.apply(args=["missing"]).get() is None


class TestCeleryPaymentTimeoutScheduler:

    def test_agenda_na_fila_payments(self):
        with patch.object(handlers.expire_gateway_payment, "apply_async") as apply_async:
            apply_async.return_value = Mock(id="task-1")

            task_id = CeleryPaymentTimeoutScheduler().schedule_expiry("p-1", 180)

        assert task_id == "task-1"
        apply_async.assert_called_once_with(args=["p-1"], countdown=180, queue="payments")
