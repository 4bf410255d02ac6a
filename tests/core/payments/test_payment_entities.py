"""
Testes Unitários para Entidades do Domínio de Pagamentos.

Coverage:
- PaymentType / PaymentStatus (conversão, propriedades)
- PaymentEntity.create e validação de valor
- Máquina de estados (transições permitidas e proibidas)
- Reentrada idempotente em estados terminais
"""

from decimal import Decimal

import pytest

from src.core.payments.entities import (
    ALLOWED_TRANSITIONS,
    PaymentEntity,
    PaymentStatus,
    PaymentType,
)
from src.core.payments.events import (
    PaymentCompletedEvent,
    PaymentFailedEvent,
    terminal_event_for,
)
from src.core.shared.exceptions import (
    ConflictError,
    InvalidTransitionError,
    ValidationError,
)


def make_payment(payment_type=PaymentType.BANK_TRANSFER, amount="10000.00", **kwargs):
    return PaymentEntity.create(
        cart_id=kwargs.pop("cart_id", "C1"),
        payment_type=payment_type,
        amount=amount,
        **kwargs,
    )


class TestPaymentEnums:

    def test_payment_type_from_string(self):
        assert PaymentType.from_string("bank_transfer") is PaymentType.BANK_TRANSFER
        assert PaymentType.from_string("WEBPAY") is PaymentType.WEBPAY
        assert PaymentType.from_string(PaymentType.CHECK) is PaymentType.CHECK

    def test_payment_type_invalido(self):
        with pytest.raises(ValueError):
            PaymentType.from_string("bitcoin")

    def test_meios_que_exigem_comprovante(self):
        assert PaymentType.BANK_TRANSFER.requires_proof
        assert PaymentType.CHECK.requires_proof
        assert not PaymentType.WEBPAY.requires_proof
        assert not PaymentType.PURCHASE_ORDER.requires_proof

    def test_status_terminais(self):
        terminal = {s for s in PaymentStatus if s.is_terminal}
        assert terminal == {
            PaymentStatus.COMPLETED,
            PaymentStatus.FAILED,
            PaymentStatus.CANCELLED,
        }

    def test_estados_terminais_sem_saida(self):
        for status in PaymentStatus:
            if status.is_terminal:
                assert ALLOWED_TRANSITIONS[status] == frozenset()


class TestPaymentCreate:

    def test_criar_pagamento_pending(self):
        """Deve criar pagamento em pending com valor de 2 casas."""
        payment = make_payment(organization_id=42, notes="pedido 1")

        assert payment.status == PaymentStatus.PENDING
        assert payment.amount == Decimal("10000.00")
        assert payment.cart_id == "C1"
        assert payment.organization_id == 42
        assert payment.confirmed_at is None
        assert payment.is_active

    def test_valor_arredondado(self):
        assert make_payment(amount="10.005").amount == Decimal("10.01")
        assert make_payment(amount=15).amount == Decimal("15.00")
        assert make_payment(amount=0.1).amount == Decimal("0.10")

    @pytest.mark.parametrize("amount", ["0", "-1", "abc", None, "100000000.00"])
    def test_valor_invalido(self, amount):
        with pytest.raises(ValidationError) as exc_info:
            make_payment(amount=amount)

        assert exc_info.value.field == "amount"

    def test_carrinho_obrigatorio(self):
        with pytest.raises(ValidationError) as exc_info:
            make_payment(cart_id="  ")

        assert exc_info.value.field == "cart_id"


class TestManualFlow:

    def test_comprovante_leva_a_processing(self):
        payment = make_payment()

        payment.submit_proof("https://x/proof.jpg", external_reference="TRF-1")

        assert payment.status == PaymentStatus.PROCESSING
        assert payment.proof_url == "https://x/proof.jpg"
        assert payment.external_reference == "TRF-1"

    def test_comprovante_valido_completa(self):
        payment = make_payment()
        payment.submit_proof("https://x/proof.jpg")

        payment.validate_proof(is_valid=True)

        assert payment.status == PaymentStatus.COMPLETED
        assert payment.confirmed_at is not None
        assert payment.payment_date == payment.confirmed_at

    def test_comprovante_invalido_falha(self):
        payment = make_payment()
        payment.submit_proof("https://x/proof.jpg")

        payment.validate_proof(is_valid=False, notes="ilegível")

        assert payment.status == PaymentStatus.FAILED
        assert payment.confirmed_at is None
        assert payment.notes == "ilegível"

    def test_comprovante_vazio(self):
        with pytest.raises(ValidationError):
            make_payment().submit_proof("  ")

    def test_comprovante_fora_de_pending(self):
        payment = make_payment()
        payment.submit_proof("https://x/proof.jpg")

        with pytest.raises(InvalidTransitionError):
            payment.submit_proof("https://x/other.jpg")

    @pytest.mark.parametrize("status", list(PaymentStatus))
    def test_webpay_nunca_aceita_comprovante(self, status):
        """submit_proof em webpay falha em qualquer estado."""
        payment = make_payment(PaymentType.WEBPAY)
        payment.status = status

        with pytest.raises(InvalidTransitionError):
            payment.submit_proof("https://x/proof.jpg")

    def test_validar_sem_processing(self):
        with pytest.raises(InvalidTransitionError):
            make_payment().validate_proof(is_valid=True)

    def test_validar_meio_nao_manual(self):
        payment = make_payment(PaymentType.WEBPAY)
        payment.status = PaymentStatus.PROCESSING

        with pytest.raises(InvalidTransitionError):
            payment.validate_proof(is_valid=True)


class TestGatewayFlow:

    def test_redirecionamento_registra_token(self):
        payment = make_payment(PaymentType.WEBPAY)

        payment.start_gateway_redirect("tok-1", buy_order="BO-1", session_id="S-1")

        assert payment.status == PaymentStatus.PROCESSING
        assert payment.metadata["gateway_init"]["token"] == "tok-1"
        assert payment.metadata["gateway_init"]["buy_order"] == "BO-1"
        assert payment.external_reference == "BO-1"

    def test_redirecionamento_repetido_nao_altera(self):
        payment = make_payment(PaymentType.WEBPAY)
        payment.start_gateway_redirect("tok-1")
        before = payment.record()

        payment.start_gateway_redirect("tok-1")

        assert payment.record() == before

    def test_redirecionamento_so_para_webpay(self):
        with pytest.raises(InvalidTransitionError):
            make_payment().start_gateway_redirect("tok-1")

    def test_autorizacao_mantem_processing(self):
        payment = make_payment(PaymentType.WEBPAY)
        payment.start_gateway_redirect("tok-1")

        payment.authorize_gateway("AUTH", card_last_four_digits="4242")

        assert payment.status == PaymentStatus.PROCESSING
        assert payment.authorization_code == "AUTH"
        assert "authorized_at" in payment.metadata["gateway_authorization"]
        assert terminal_event_for(payment) is None

    def test_autorizacao_exige_processing(self):
        payment = make_payment(PaymentType.WEBPAY)

        with pytest.raises(InvalidTransitionError):
            payment.authorize_gateway("AUTH")

    def test_autorizacao_validacoes(self):
        payment = make_payment(PaymentType.WEBPAY)
        payment.start_gateway_redirect("tok-1")

        with pytest.raises(ValidationError):
            payment.authorize_gateway("")
        with pytest.raises(ValidationError):
            payment.authorize_gateway("AUTH", card_last_four_digits="42")
        with pytest.raises(InvalidTransitionError):
            make_payment().authorize_gateway("AUTH")

    def test_confirmar_webhook(self):
        payment = make_payment(PaymentType.WEBPAY)
        payment.start_gateway_redirect("tok-1")

        payment.confirm("TXN1", authorization_code="AUTH", card_last_four_digits="4242")

        assert payment.status == PaymentStatus.COMPLETED
        assert payment.transaction_id == "TXN1"
        assert payment.card_last_four_digits == "4242"
        assert payment.confirmed_at is not None

    def test_confirmar_a_partir_de_pending(self):
        payment = make_payment(PaymentType.PURCHASE_ORDER)

        payment.confirm("TXN1")

        assert payment.status == PaymentStatus.COMPLETED

    def test_confirmacao_repetida_e_noop(self):
        payment = make_payment(PaymentType.WEBPAY)
        payment.confirm("TXN1")
        before = payment.record()

        payment.confirm("TXN1")

        assert payment.record() == before

    def test_confirmacao_com_outra_transacao(self):
        payment = make_payment(PaymentType.WEBPAY)
        payment.confirm("TXN1")

        with pytest.raises(ConflictError) as exc_info:
            payment.confirm("TXN2")

        assert exc_info.value.rule == "transaction_id_mismatch"
        assert payment.transaction_id == "TXN1"

    def test_confirmar_pagamento_cancelado(self):
        payment = make_payment(PaymentType.WEBPAY)
        payment.cancel("abandono")

        with pytest.raises(ConflictError):
            payment.confirm("TXN1")

    @pytest.mark.parametrize("digits", ["424", "abcd", "42424"])
    def test_cartao_malformado(self, digits):
        with pytest.raises(ValidationError) as exc_info:
            make_payment(PaymentType.WEBPAY).confirm("TXN1", card_last_four_digits=digits)

        assert exc_info.value.field == "card_last_four_digits"

    def test_expirar_gateway(self):
        payment = make_payment(PaymentType.WEBPAY)
        payment.start_gateway_redirect("tok-1")

        payment.expire_gateway({"reason": "gateway_timeout"})

        assert payment.status == PaymentStatus.FAILED
        assert payment.metadata["gateway_timeout"]["original_status"] == "processing"

    def test_expirar_pagamento_terminal_nao_altera(self):
        payment = make_payment(PaymentType.WEBPAY)
        payment.confirm("TXN1")

        payment.expire_gateway({"reason": "gateway_timeout"})

        assert payment.status == PaymentStatus.COMPLETED
        assert "gateway_timeout" not in payment.metadata

    def test_expirar_meio_manual(self):
        with pytest.raises(InvalidTransitionError):
            make_payment().expire_gateway({})


class TestTerminalStates:

    def test_falha_idempotente(self):
        payment = make_payment()
        payment.mark_failed("recusado")
        before = payment.record()

        payment.mark_failed("recusado de novo")

        assert payment.record() == before
        assert payment.notes == "recusado"

    def test_cancelar_pagamento_falho(self):
        payment = make_payment()
        payment.mark_failed("recusado")

        with pytest.raises(ConflictError) as exc_info:
            payment.cancel("abandono")

        assert exc_info.value.rule == "terminal_state_immutable"

    def test_motivo_acrescentado_as_notas(self):
        payment = make_payment(notes="pedido 1")

        payment.cancel("abandono")

        assert payment.notes == "pedido 1\nabandono"

    def test_anotar_pagamento_terminal(self):
        payment = make_payment()
        payment.cancel("abandono")

        payment.annotate(notes="revisado", metadata={"reviewer": "ops"})

        assert payment.notes == "revisado"
        assert payment.metadata["reviewer"] == "ops"

    def test_alterar_valor(self):
        payment = make_payment()

        payment.update_amount("12000")

        assert payment.amount == Decimal("12000.00")

    def test_alterar_valor_terminal(self):
        payment = make_payment()
        payment.confirm("TXN1")

        with pytest.raises(ConflictError):
            payment.update_amount("1.00")


class TestPaymentEvents:

    def test_evento_terminal_por_status(self):
        payment = make_payment(organization_id=42)
        assert terminal_event_for(payment) is None

        payment.confirm("TXN1")
        event = terminal_event_for(payment)

        assert isinstance(event, PaymentCompletedEvent)
        assert event.aggregate_id == payment.id
        assert event.payment_id == payment.id
        assert event.amount == Decimal("10000.00")
        assert event.payment_type == "bank_transfer"

    def test_serializacao_do_evento(self):
        payment = make_payment()
        payment.mark_failed("recusado")
        event = terminal_event_for(payment, reason="recusado")

        data = event.to_dict()
        restored = PaymentFailedEvent.from_dict(data)

        assert data["event_type"] == "PaymentFailedEvent"
        assert data["aggregate_type"] == "Payment"
        assert data["data"]["amount"] == "10000.00"
        assert data["data"]["reason"] == "recusado"
        assert restored.amount == Decimal("10000.00")
        assert restored.event_id == event.event_id
        assert event.idempotency_key == f"{payment.id}:PaymentFailedEvent"
