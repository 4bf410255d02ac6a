"""
Testes Unitários para Use Cases do Domínio de Pagamentos.

Estratégia de Teste:
- Usa InMemoryPaymentRepository (fake) para isolamento
- Usa InMemoryUnitOfWork para verificar eventos publicados
- Mocks para gateway e agendador de timeout

Coverage:
- InitiatePaymentService
- SubmitProofService / ValidateProofService
- StartGatewayRedirectService / AuthorizeGatewayPaymentService / ConfirmPaymentService
- MarkPaymentFailedService / CancelPaymentService
- ExpireGatewayPaymentService
- AnnotatePaymentService / UpdatePaymentAmountService
- Consultas e estatísticas por carrinho
"""

from decimal import Decimal
from unittest.mock import Mock

import pytest

from src.core.payments.use_cases import (
    InitiatePaymentService,
    SubmitProofService,
    StartGatewayRedirectService,
    AuthorizeGatewayPaymentService,
    ConfirmPaymentService,
    ValidateProofService,
    MarkPaymentFailedService,
    CancelPaymentService,
    ExpireGatewayPaymentService,
    AnnotatePaymentService,
    UpdatePaymentAmountService,
    GetPaymentService,
    ListCartPaymentsService,
    GetActivePaymentService,
    CartPaymentStatsService,
    FindPaymentByReferenceService,
)
from src.core.payments.dtos import (
    InitiatePaymentInputDTO,
    SubmitProofInputDTO,
    StartGatewayRedirectInputDTO,
    AuthorizeGatewayPaymentInputDTO,
    ConfirmPaymentInputDTO,
    ValidateProofInputDTO,
    MarkPaymentFailedInputDTO,
    CancelPaymentInputDTO,
    ExpireGatewayPaymentInputDTO,
    AnnotatePaymentInputDTO,
    UpdatePaymentAmountInputDTO,
)
from src.core.payments.entities import PaymentStatus
from src.core.payments.events import (
    PaymentCompletedEvent,
    PaymentFailedEvent,
    PaymentCancelledEvent,
)
from src.core.payments.ports import InMemoryPaymentRepository, PaymentRepository
from src.core.shared.exceptions import (
    ConflictError,
    DuplicateKeyError,
    EntityNotFoundError,
    GatewayError,
    InvalidTransitionError,
    ValidationError,
)
from src.adapters.django_app.shared.unit_of_work import InMemoryUnitOfWork


@pytest.fixture
def payment_repo():
    """Fixture para repositório em memória."""
    return InMemoryPaymentRepository()


@pytest.fixture
def uow():
    return InMemoryUnitOfWork()


@pytest.fixture
def initiate(payment_repo, uow):
    service = InitiatePaymentService(payment_repo, uow)

    def _initiate(payment_type="bank_transfer", cart_id="C1", amount="10000.00", **kwargs):
        return service.execute(InitiatePaymentInputDTO(
            cart_id=cart_id,
            payment_type=payment_type,
            amount=amount,
            **kwargs,
        ))

    return _initiate


class StaleVersionPaymentRepository(InMemoryPaymentRepository):
    """Outra instância escreve antes das `stale_writes` primeiras atualizações."""

    def __init__(self, stale_writes: int):
        super().__init__()
        self.stale_writes = stale_writes
        self.update_calls = 0

    def update_if_version(self, payment_id, expected_version, patch):
        self.update_calls += 1
        if self.update_calls <= self.stale_writes:
            super().update_if_version(payment_id, expected_version, {"notes": "concurrent"})
        return super().update_if_version(payment_id, expected_version, patch)


class TestInitiatePaymentService:

    def test_repositorio_implementa_protocol(self, payment_repo):
        assert isinstance(payment_repo, PaymentRepository)

    def test_inicia_pagamento_pending(self, initiate, uow):
        output = initiate(organization_id=42, metadata={"source": "web"})

        assert output.status == "pending"
        assert output.amount == Decimal("10000.00")
        assert output.payment_type == "bank_transfer"
        assert output.metadata == {"source": "web"}
        assert uow.committed is True
        assert uow.published_events == []

    def test_um_pagamento_ativo_por_carrinho(self, initiate):
        initiate()

        with pytest.raises(ConflictError) as exc_info:
            initiate(payment_type="webpay")

        assert exc_info.value.rule == "one_active_payment_per_cart"

    def test_novo_pagamento_apos_terminal(self, initiate, payment_repo, uow):
        first = initiate()
        CancelPaymentService(payment_repo, uow).execute(
            CancelPaymentInputDTO(payment_id=first.id, reason="trocou de meio")
        )

        second = initiate(payment_type="webpay")

        assert second.id != first.id
        assert second.status == "pending"

    def test_corrida_na_insercao_vira_conflict(self, uow):
        """A restrição única do armazenamento cobre a corrida."""
        repo = Mock(spec=InMemoryPaymentRepository)
        repo.get_active_by_cart.return_value = None
        repo.insert.side_effect = DuplicateKeyError("duplicate")

        with pytest.raises(ConflictError):
            InitiatePaymentService(repo, uow).execute(InitiatePaymentInputDTO(
                cart_id="C1", payment_type="webpay", amount="10",
            ))

        assert uow.rolled_back is True

    def test_meio_invalido(self, initiate):
        with pytest.raises(ValidationError) as exc_info:
            initiate(payment_type="bitcoin")

        assert exc_info.value.field == "payment_type"

    def test_valor_invalido(self, initiate, payment_repo):
        with pytest.raises(ValidationError):
            initiate(amount="-5")

        assert payment_repo.list_all() == []


class TestBankTransferScenario:

    def test_transferencia_completa(self, initiate, payment_repo, uow):
        """
        Cenário: carrinho C1, bank_transfer de 10000.00 → comprovante →
        processing → validação → completed com um PaymentCompletedEvent.
        """
        payment = initiate()
        assert payment.status == "pending"

        payment = SubmitProofService(payment_repo, uow).execute(
            SubmitProofInputDTO(payment_id=payment.id, proof_url="https://x/proof.jpg")
        )
        assert payment.status == "processing"
        assert payment.proof_url == "https://x/proof.jpg"
        assert uow.published_events == []

        payment = ValidateProofService(payment_repo, uow).execute(
            ValidateProofInputDTO(payment_id=payment.id, is_valid=True)
        )

        assert payment.status == "completed"
        assert payment.confirmed_at is not None
        assert len(uow.published_events) == 1
        event = uow.published_events[0]
        assert isinstance(event, PaymentCompletedEvent)
        assert event.amount == Decimal("10000.00")
        assert event.cart_id == "C1"
        assert event.payment_id == payment.id
        assert event.payment_type == "bank_transfer"

    def test_comprovante_invalido_emite_falha(self, initiate, payment_repo, uow):
        payment = initiate(payment_type="check")
        SubmitProofService(payment_repo, uow).execute(
            SubmitProofInputDTO(payment_id=payment.id, proof_url="https://x/proof.jpg")
        )

        output = ValidateProofService(payment_repo, uow).execute(
            ValidateProofInputDTO(payment_id=payment.id, is_valid=False)
        )

        assert output.status == "failed"
        event = uow.published_events[-1]
        assert isinstance(event, PaymentFailedEvent)
        assert event.reason == "invalid_proof"

    def test_comprovante_em_webpay(self, initiate, payment_repo, uow):
        payment = initiate(payment_type="webpay")

        with pytest.raises(InvalidTransitionError):
            SubmitProofService(payment_repo, uow).execute(
                SubmitProofInputDTO(payment_id=payment.id, proof_url="https://x/proof.jpg")
            )

        assert payment_repo.get_by_id(payment.id).status == PaymentStatus.PENDING

    def test_pagamento_inexistente(self, payment_repo, uow):
        with pytest.raises(EntityNotFoundError):
            SubmitProofService(payment_repo, uow).execute(
                SubmitProofInputDTO(payment_id="missing", proof_url="https://x/p.jpg")
            )


class TestConfirmPaymentService:

    def test_confirmacao_repetida_emite_um_evento(self, initiate, payment_repo, uow):
        """confirm TXN1 duas vezes: completed, linha inalterada, um evento."""
        payment = initiate(payment_type="webpay")
        service = ConfirmPaymentService(payment_repo, uow)
        dto = ConfirmPaymentInputDTO(payment_id=payment.id, transaction_id="TXN1")

        first = service.execute(dto)
        second = service.execute(dto)

        assert first.status == "completed"
        assert second.status == "completed"
        assert second.version == first.version
        assert second.confirmed_at == first.confirmed_at
        assert len(uow.published_events) == 1

    def test_outra_transacao_em_completed(self, initiate, payment_repo, uow):
        payment = initiate(payment_type="webpay")
        service = ConfirmPaymentService(payment_repo, uow)
        confirmed = service.execute(
            ConfirmPaymentInputDTO(payment_id=payment.id, transaction_id="TXN1")
        )

        with pytest.raises(ConflictError):
            service.execute(
                ConfirmPaymentInputDTO(payment_id=payment.id, transaction_id="TXN2")
            )

        stored = payment_repo.get_by_id(payment.id)
        assert stored.transaction_id == "TXN1"
        assert stored.version == confirmed.version
        assert len(uow.published_events) == 1

    def test_confirmar_apos_redirecionamento(self, initiate, payment_repo, uow):
        payment = initiate(payment_type="webpay")
        StartGatewayRedirectService(payment_repo, uow).execute(
            StartGatewayRedirectInputDTO(payment_id=payment.id, token="tok-1")
        )

        output = ConfirmPaymentService(payment_repo, uow).execute(ConfirmPaymentInputDTO(
            payment_id=payment.id,
            transaction_id="TXN1",
            authorization_code="AUTH-1",
            card_last_four_digits="4242",
            metadata={"gateway_response": "AUTHORIZED"},
        ))

        assert output.status == "completed"
        assert output.authorization_code == "AUTH-1"
        assert output.metadata["gateway_response"] == "AUTHORIZED"
        assert output.metadata["gateway_init"]["token"] == "tok-1"

    def test_conflito_de_versao_reavalia(self, uow):
        repo = StaleVersionPaymentRepository(stale_writes=1)
        payment = InitiatePaymentService(repo, uow).execute(InitiatePaymentInputDTO(
            cart_id="C1", payment_type="webpay", amount="10",
        ))

        output = ConfirmPaymentService(repo, uow).execute(
            ConfirmPaymentInputDTO(payment_id=payment.id, transaction_id="TXN1")
        )

        assert output.status == "completed"
        assert output.notes == "concurrent"
        assert output.version == 3
        assert len(uow.published_events) == 1

    def test_dois_conflitos_de_versao(self, uow):
        repo = StaleVersionPaymentRepository(stale_writes=2)
        payment = InitiatePaymentService(repo, uow).execute(InitiatePaymentInputDTO(
            cart_id="C1", payment_type="webpay", amount="10",
        ))

        with pytest.raises(ConflictError) as exc_info:
            ConfirmPaymentService(repo, uow).execute(
                ConfirmPaymentInputDTO(payment_id=payment.id, transaction_id="TXN1")
            )

        assert exc_info.value.rule == "optimistic_concurrency"
        assert uow.rolled_back is True
        assert uow.published_events == []


class TestStartGatewayRedirectService:

    def test_agenda_expiracao(self, initiate, payment_repo, uow):
        scheduler = Mock()
        scheduler.schedule_expiry.return_value = "task-1"
        payment = initiate(payment_type="webpay")
        service = StartGatewayRedirectService(
            payment_repo, uow, scheduler=scheduler, timeout_seconds=180,
        )

        output = service.execute(StartGatewayRedirectInputDTO(
            payment_id=payment.id, token="tok-1", buy_order="BO-1",
        ))

        assert output.status == "processing"
        scheduler.schedule_expiry.assert_called_once_with(payment.id, 180)

    def test_repetir_token_nao_reagenda(self, initiate, payment_repo, uow):
        scheduler = Mock()
        payment = initiate(payment_type="webpay")
        service = StartGatewayRedirectService(payment_repo, uow, scheduler=scheduler)
        dto = StartGatewayRedirectInputDTO(payment_id=payment.id, token="tok-1")

        service.execute(dto)
        service.execute(dto)

        assert scheduler.schedule_expiry.call_count == 1

    def test_meio_manual(self, initiate, payment_repo, uow):
        payment = initiate()

        with pytest.raises(InvalidTransitionError):
            StartGatewayRedirectService(payment_repo, uow).execute(
                StartGatewayRedirectInputDTO(payment_id=payment.id, token="tok-1")
            )


class TestAuthorizeGatewayPaymentService:

    def _redirected(self, initiate, payment_repo, uow):
        payment = initiate(payment_type="webpay")
        StartGatewayRedirectService(payment_repo, uow).execute(
            StartGatewayRedirectInputDTO(payment_id=payment.id, token="tok-1", buy_order="BO-1")
        )
        return payment

    def test_autoriza_sem_concluir(self, initiate, payment_repo, uow):
        payment = self._redirected(initiate, payment_repo, uow)

        output = AuthorizeGatewayPaymentService(payment_repo, uow).execute(
            AuthorizeGatewayPaymentInputDTO(
                payment_id=payment.id,
                authorization_code="AUTH-1",
                card_last_four_digits="6623",
                response={"vci": "TSY"},
            )
        )

        assert output.status == "processing"
        assert output.authorization_code == "AUTH-1"
        assert output.card_last_four_digits == "6623"
        assert output.metadata["gateway_authorization"]["vci"] == "TSY"
        assert output.confirmed_at is None
        assert uow.published_events == []

    def test_confirmar_apos_autorizacao(self, initiate, payment_repo, uow):
        payment = self._redirected(initiate, payment_repo, uow)
        AuthorizeGatewayPaymentService(payment_repo, uow).execute(
            AuthorizeGatewayPaymentInputDTO(payment_id=payment.id, authorization_code="AUTH-1")
        )

        output = ConfirmPaymentService(payment_repo, uow).execute(
            ConfirmPaymentInputDTO(payment_id=payment.id, transaction_id="BO-1")
        )

        assert output.status == "completed"
        assert output.authorization_code == "AUTH-1"
        assert [e.event_type for e in uow.published_events] == ["PaymentCompletedEvent"]

    def test_repetir_codigo_nao_altera(self, initiate, payment_repo, uow):
        payment = self._redirected(initiate, payment_repo, uow)
        service = AuthorizeGatewayPaymentService(payment_repo, uow)
        dto = AuthorizeGatewayPaymentInputDTO(payment_id=payment.id, authorization_code="AUTH-1")

        first = service.execute(dto)
        second = service.execute(dto)

        assert second.version == first.version

    def test_outro_codigo_e_conflito(self, initiate, payment_repo, uow):
        payment = self._redirected(initiate, payment_repo, uow)
        service = AuthorizeGatewayPaymentService(payment_repo, uow)
        service.execute(
            AuthorizeGatewayPaymentInputDTO(payment_id=payment.id, authorization_code="AUTH-1")
        )

        with pytest.raises(ConflictError):
            service.execute(
                AuthorizeGatewayPaymentInputDTO(payment_id=payment.id, authorization_code="AUTH-2")
            )

    def test_exige_redirecionamento(self, initiate, payment_repo, uow):
        payment = initiate(payment_type="webpay")

        with pytest.raises(InvalidTransitionError):
            AuthorizeGatewayPaymentService(payment_repo, uow).execute(
                AuthorizeGatewayPaymentInputDTO(payment_id=payment.id, authorization_code="AUTH-1")
            )


class TestFailAndCancel:

    def test_marcar_falho(self, initiate, payment_repo, uow):
        payment = initiate(payment_type="webpay")

        output = MarkPaymentFailedService(payment_repo, uow).execute(
            MarkPaymentFailedInputDTO(payment_id=payment.id, reason="card_declined")
        )

        assert output.status == "failed"
        assert output.notes == "card_declined"
        event = uow.published_events[0]
        assert isinstance(event, PaymentFailedEvent)
        assert event.reason == "card_declined"

    def test_cancelar_duas_vezes(self, initiate, payment_repo, uow):
        payment = initiate()
        service = CancelPaymentService(payment_repo, uow)
        dto = CancelPaymentInputDTO(payment_id=payment.id, reason="abandono")

        first = service.execute(dto)
        second = service.execute(dto)

        assert first.status == second.status == "cancelled"
        assert second.version == first.version
        assert len(uow.published_events) == 1
        assert isinstance(uow.published_events[0], PaymentCancelledEvent)

    def test_cancelar_pagamento_completed(self, initiate, payment_repo, uow):
        payment = initiate(payment_type="webpay")
        ConfirmPaymentService(payment_repo, uow).execute(
            ConfirmPaymentInputDTO(payment_id=payment.id, transaction_id="TXN1")
        )

        with pytest.raises(ConflictError):
            CancelPaymentService(payment_repo, uow).execute(
                CancelPaymentInputDTO(payment_id=payment.id, reason="abandono")
            )

        assert payment_repo.get_by_id(payment.id).status == PaymentStatus.COMPLETED


class TestExpireGatewayPaymentService:

    def _redirected(self, initiate, payment_repo, uow):
        payment = initiate(payment_type="webpay")
        StartGatewayRedirectService(payment_repo, uow).execute(
            StartGatewayRedirectInputDTO(payment_id=payment.id, token="tok-1")
        )
        return payment

    def test_expira_pagamento_em_processing(self, initiate, payment_repo, uow):
        payment = self._redirected(initiate, payment_repo, uow)

        output = ExpireGatewayPaymentService(payment_repo, uow).execute(
            ExpireGatewayPaymentInputDTO(payment_id=payment.id, task_id="task-1")
        )

        assert output.status == "failed"
        timeout = output.metadata["gateway_timeout"]
        assert timeout["original_status"] == "processing"
        assert timeout["task_id"] == "task-1"
        assert isinstance(uow.published_events[-1], PaymentFailedEvent)
        assert uow.published_events[-1].reason == "gateway_timeout"

    def test_pagamento_confirmado_nao_expira(self, initiate, payment_repo, uow):
        payment = self._redirected(initiate, payment_repo, uow)
        ConfirmPaymentService(payment_repo, uow).execute(
            ConfirmPaymentInputDTO(payment_id=payment.id, transaction_id="TXN1")
        )

        output = ExpireGatewayPaymentService(payment_repo, uow).execute(
            ExpireGatewayPaymentInputDTO(payment_id=payment.id)
        )

        assert output.status == "completed"
        assert len(uow.published_events) == 1

    def test_meio_manual(self, initiate, payment_repo, uow):
        payment = initiate()

        with pytest.raises(InvalidTransitionError):
            ExpireGatewayPaymentService(payment_repo, uow).execute(
                ExpireGatewayPaymentInputDTO(payment_id=payment.id)
            )

    def test_estorno_de_autorizacao(self, initiate, payment_repo, uow):
        """Autorizado e não confirmado no prazo: o gateway é chamado para estornar."""
        payment = self._redirected(initiate, payment_repo, uow)
        AuthorizeGatewayPaymentService(payment_repo, uow).execute(
            AuthorizeGatewayPaymentInputDTO(payment_id=payment.id, authorization_code="AUTH-1")
        )
        gateway = Mock()
        gateway.reverse.return_value = {"status": "REVERSED"}

        output = ExpireGatewayPaymentService(payment_repo, uow, gateway=gateway).execute(
            ExpireGatewayPaymentInputDTO(payment_id=payment.id)
        )

        gateway.reverse.assert_called_once()
        assert gateway.reverse.call_args[0][0].authorization_code == "AUTH-1"
        timeout = output.metadata["gateway_timeout"]
        assert timeout["reversal_succeeded"] is True
        assert timeout["reversal_response"] == {"status": "REVERSED"}
        assert output.status == "failed"

    def test_falha_no_estorno_e_registrada(self, initiate, payment_repo, uow):
        payment = self._redirected(initiate, payment_repo, uow)
        AuthorizeGatewayPaymentService(payment_repo, uow).execute(
            AuthorizeGatewayPaymentInputDTO(payment_id=payment.id, authorization_code="AUTH-1")
        )
        gateway = Mock()
        gateway.reverse.side_effect = GatewayError("timeout")

        output = ExpireGatewayPaymentService(payment_repo, uow, gateway=gateway).execute(
            ExpireGatewayPaymentInputDTO(payment_id=payment.id)
        )

        timeout = output.metadata["gateway_timeout"]
        assert timeout["reversal_succeeded"] is False
        assert timeout["reversal_error"] == "timeout"
        assert output.status == "failed"
        assert [e.event_type for e in uow.published_events] == ["PaymentFailedEvent"]


class TestAnnotateAndAmount:

    def test_anotar_pagamento_terminal(self, initiate, payment_repo, uow):
        payment = initiate()
        CancelPaymentService(payment_repo, uow).execute(
            CancelPaymentInputDTO(payment_id=payment.id, reason="abandono")
        )

        output = AnnotatePaymentService(payment_repo, uow).execute(
            AnnotatePaymentInputDTO(payment_id=payment.id, metadata={"reviewed": True})
        )

        assert output.status == "cancelled"
        assert output.notes == "abandono"
        assert output.metadata["reviewed"] is True
        assert len(uow.published_events) == 1

    def test_limpar_notas(self, initiate, payment_repo, uow):
        payment = initiate(notes="temporário")

        output = AnnotatePaymentService(payment_repo, uow).execute(
            AnnotatePaymentInputDTO(payment_id=payment.id, notes=None)
        )

        assert output.notes is None

    def test_alterar_valor(self, initiate, payment_repo, uow):
        payment = initiate()

        output = UpdatePaymentAmountService(payment_repo, uow).execute(
            UpdatePaymentAmountInputDTO(payment_id=payment.id, amount="9500.50")
        )

        assert output.amount == Decimal("9500.50")
        assert output.version == 2

    def test_alterar_valor_terminal(self, initiate, payment_repo, uow):
        payment = initiate(payment_type="webpay")
        ConfirmPaymentService(payment_repo, uow).execute(
            ConfirmPaymentInputDTO(payment_id=payment.id, transaction_id="TXN1")
        )

        with pytest.raises(ConflictError):
            UpdatePaymentAmountService(payment_repo, uow).execute(
                UpdatePaymentAmountInputDTO(payment_id=payment.id, amount="1.00")
            )


class TestQueries:

    def test_obter_pagamento(self, initiate, payment_repo):
        payment = initiate()

        assert GetPaymentService(payment_repo).execute(payment.id).id == payment.id

    def test_obter_inexistente(self, payment_repo):
        with pytest.raises(EntityNotFoundError):
            GetPaymentService(payment_repo).execute("missing")

    def test_pagamento_ativo(self, initiate, payment_repo, uow):
        service = GetActivePaymentService(payment_repo)
        assert service.execute("C1") is None

        payment = initiate()
        assert service.execute("C1").id == payment.id

        CancelPaymentService(payment_repo, uow).execute(
            CancelPaymentInputDTO(payment_id=payment.id, reason="abandono")
        )
        assert service.execute("C1") is None

    def test_historico_e_estatisticas(self, initiate, payment_repo, uow):
        failed = initiate(payment_type="webpay", amount="100.00")
        MarkPaymentFailedService(payment_repo, uow).execute(
            MarkPaymentFailedInputDTO(payment_id=failed.id, reason="card_declined")
        )
        cancelled = initiate(amount="50.00")
        CancelPaymentService(payment_repo, uow).execute(
            CancelPaymentInputDTO(payment_id=cancelled.id, reason="abandono")
        )
        completed = initiate(payment_type="webpay", amount="100.00")
        ConfirmPaymentService(payment_repo, uow).execute(
            ConfirmPaymentInputDTO(payment_id=completed.id, transaction_id="TXN1")
        )
        pending = initiate(payment_type="purchase_order", amount="25.00")

        history = ListCartPaymentsService(payment_repo).execute("C1")
        stats = CartPaymentStatsService(payment_repo).execute("C1")

        assert {p.id for p in history} == {failed.id, cancelled.id, completed.id, pending.id}
        assert stats.count == 4
        assert stats.total_paid == Decimal("100.00")
        assert stats.total_pending == Decimal("25.00")
        assert stats.total_failed == Decimal("100.00")
        assert stats.to_dict()["total_paid"] == "100.00"

    def test_buscar_pela_ordem_de_compra(self, initiate, payment_repo, uow):
        payment = initiate(payment_type="webpay")
        StartGatewayRedirectService(payment_repo, uow).execute(
            StartGatewayRedirectInputDTO(payment_id=payment.id, token="tok-1", buy_order="BO-77")
        )
        service = FindPaymentByReferenceService(payment_repo)

        found = service.execute("BO-77")

        assert found.id == payment.id
        assert found.external_reference == "BO-77"
        assert service.execute("BO-missing") is None

    def test_buscar_pela_transacao(self, initiate, payment_repo, uow):
        payment = initiate(payment_type="webpay")
        ConfirmPaymentService(payment_repo, uow).execute(
            ConfirmPaymentInputDTO(payment_id=payment.id, transaction_id="TXN-9")
        )

        assert FindPaymentByReferenceService(payment_repo).execute(" TXN-9 ").id == payment.id

    def test_referencia_vazia(self, payment_repo):
        with pytest.raises(ValidationError):
            FindPaymentByReferenceService(payment_repo).execute("  ")
