"""
Use Cases (Application Services) do Domínio de Pagamentos.

Use Cases implementados:
- InitiatePaymentService: Cria pagamento PENDING para um carrinho
- SubmitProofService: Comprovante de meio manual → PROCESSING
- StartGatewayRedirectService: Redirecionamento WEBPAY → PROCESSING
- AuthorizeGatewayPaymentService: Autorização do gateway (segue PROCESSING)
- ConfirmPaymentService: Confirmação (webhook) → COMPLETED
- ValidateProofService: Revisão do comprovante → COMPLETED/FAILED
- MarkPaymentFailedService: → FAILED
- CancelPaymentService: → CANCELLED
- ExpireGatewayPaymentService: Expiração do retorno do gateway → FAILED
- AnnotatePaymentService: notes/metadata em qualquer estado
- UpdatePaymentAmountService: Altera valor antes do estado terminal
- GetPaymentService / ListCartPaymentsService / GetActivePaymentService
- FindPaymentByReferenceService: Busca pela transação ou ordem de compra
- CartPaymentStatsService: Totais por carrinho

Concorrência:
    Toda mutação é um read-modify-write condicionado à versão lida
    (`update_if_version`). Se a versão mudou, o pagamento é relido e a
    regra reavaliada uma vez; um segundo conflito vira ConflictError.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, List, Optional, Tuple

from src.core.shared.interfaces import UnitOfWork
from src.core.shared.exceptions import (
    ConflictError,
    DuplicateKeyError,
    EntityNotFoundError,
    GatewayError,
    InvalidTransitionError,
    ValidationError,
)
from src.core.shared.patch import changed_fields

from .ports import PaymentRepository, PaymentGateway, PaymentTimeoutScheduler
from .entities import PaymentEntity, PaymentStatus, PaymentType
from .events import terminal_event_for
from .dtos import (
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
    PaymentOutputDTO,
    CartPaymentStatsDTO,
)

logger = logging.getLogger(__name__)

DEFAULT_GATEWAY_TIMEOUT_SECONDS = 3 * 60


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _load_payment(payment_repo: PaymentRepository, payment_id: str) -> PaymentEntity:
    payment = payment_repo.get_by_id(payment_id)
    if not payment:
        raise EntityNotFoundError(
            f"Pagamento {payment_id} não encontrado",
            entity_type="Payment",
            entity_id=payment_id,
        )
    return payment


class InitiatePaymentService:
    """
    Use Case: Iniciar pagamento de um carrinho.

    Fluxo:
    1. Validar meio e valor
    2. Verificar que o carrinho não tem pagamento em andamento
    3. Inserir (a restrição única do armazenamento cobre a corrida)

    Example:
        service = InitiatePaymentService(payment_repo, uow)
        output = service.execute(InitiatePaymentInputDTO(
            cart_id="C1",
            payment_type="bank_transfer",
            amount="10000.00",
        ))
        output.status  # "pending"
    """

    def __init__(self, payment_repo: PaymentRepository, uow: UnitOfWork):
        self.payment_repo = payment_repo
        self.uow = uow

    def execute(self, input_dto: InitiatePaymentInputDTO) -> PaymentOutputDTO:
        """
        Raises:
            ValidationError: Se meio, carrinho ou valor inválidos
            ConflictError: Se o carrinho já tem pagamento não terminal
        """
        try:
            payment_type = PaymentType.from_string(input_dto.payment_type)
        except ValueError:
            raise ValidationError(
                f"Tipo de pagamento inválido: {input_dto.payment_type}",
                field="payment_type",
            )

        payment = PaymentEntity.create(
            cart_id=input_dto.cart_id,
            payment_type=payment_type,
            amount=input_dto.amount,
            organization_id=input_dto.organization_id,
            notes=input_dto.notes,
            metadata=input_dto.metadata,
        )

        with self.uow:
            active = self.payment_repo.get_active_by_cart(payment.cart_id)
            if active:
                raise ConflictError(
                    f"Carrinho {payment.cart_id} já tem pagamento em andamento "
                    f"({active.id}, {active.status.value})",
                    rule="one_active_payment_per_cart",
                )
            try:
                payment = self.payment_repo.insert(payment)
            except DuplicateKeyError:
                logger.warning(
                    f"Concurrent payment initiation for cart {payment.cart_id}"
                )
                raise ConflictError(
                    f"Carrinho {payment.cart_id} já tem pagamento em andamento",
                    rule="one_active_payment_per_cart",
                )

        logger.info(
            f"Payment {payment.id} initiated for cart {payment.cart_id}: "
            f"{payment.payment_type.value} {payment.amount}"
        )
        return PaymentOutputDTO.from_entity(payment)


class PaymentTransitionService:
    """
    Base dos use cases que alteram um pagamento existente.

    `_apply` executa a regra da entidade sobre o estado lido, grava apenas
    os campos alterados condicionados à versão e enfileira o evento
    terminal no UoW. Regra sem efeito (reentrada idempotente) não grava
    nem emite evento. Deve ser chamado dentro de `with self.uow`.
    """

    MAX_ATTEMPTS = 2

    def __init__(self, payment_repo: PaymentRepository, uow: UnitOfWork):
        self.payment_repo = payment_repo
        self.uow = uow

    def _apply(
        self,
        payment_id: str,
        mutate: Callable[[PaymentEntity], None],
        reason: Optional[str] = None,
    ) -> Tuple[PaymentEntity, bool]:
        """
        Returns:
            (pagamento resultante, se houve escrita)

        Raises:
            EntityNotFoundError: Se pagamento não existe
            ConflictError: Se a escrita condicional falhar duas vezes
        """
        payment = _load_payment(self.payment_repo, payment_id)

        for attempt in range(self.MAX_ATTEMPTS):
            previous_status = payment.status
            before = payment.record()
            mutate(payment)
            patch = changed_fields(before, payment.record())
            if not patch:
                return payment, False

            patch["updated_at"] = _utcnow()
            updated = self.payment_repo.update_if_version(
                payment.id, payment.version, patch
            )
            if updated is not None:
                if updated.status != previous_status:
                    logger.info(
                        f"Payment {updated.id} {previous_status.value} -> "
                        f"{updated.status.value}"
                    )
                    event = terminal_event_for(updated, reason=reason)
                    if event is not None:
                        self.uow.publish_event(event)
                return updated, True

            logger.warning(
                f"Version conflict on payment {payment_id} "
                f"(attempt {attempt + 1}/{self.MAX_ATTEMPTS})"
            )
            payment = _load_payment(self.payment_repo, payment_id)

        raise ConflictError(
            f"Pagamento {payment_id} foi modificado concorrentemente",
            rule="optimistic_concurrency",
        )


class SubmitProofService(PaymentTransitionService):
    """
    Use Case: Enviar comprovante (BANK_TRANSFER / CHECK).

    Fluxo:
    1. Buscar pagamento
    2. Registrar proof_url → PROCESSING
    """

    def execute(self, input_dto: SubmitProofInputDTO) -> PaymentOutputDTO:
        """
        Raises:
            EntityNotFoundError: Se pagamento não existe
            InvalidTransitionError: Se meio não manual ou estado != pending
            ValidationError: Se proof_url vazio
        """
        with self.uow:
            payment, _ = self._apply(
                input_dto.payment_id,
                lambda p: p.submit_proof(
                    input_dto.proof_url,
                    external_reference=input_dto.external_reference,
                    notes=input_dto.notes,
                ),
            )
        return PaymentOutputDTO.from_entity(payment)


class StartGatewayRedirectService(PaymentTransitionService):
    """
    Use Case: Cliente redirecionado ao gateway (WEBPAY).

    Após o commit, agenda a expiração do retorno do gateway quando
    um agendador estiver configurado.
    """

    def __init__(
        self,
        payment_repo: PaymentRepository,
        uow: UnitOfWork,
        scheduler: Optional[PaymentTimeoutScheduler] = None,
        timeout_seconds: int = DEFAULT_GATEWAY_TIMEOUT_SECONDS,
    ):
        super().__init__(payment_repo, uow)
        self.scheduler = scheduler
        self.timeout_seconds = timeout_seconds

    def execute(self, input_dto: StartGatewayRedirectInputDTO) -> PaymentOutputDTO:
        """
        Raises:
            InvalidTransitionError: Se não é WEBPAY ou não está em pending
        """
        with self.uow:
            payment, changed = self._apply(
                input_dto.payment_id,
                lambda p: p.start_gateway_redirect(
                    input_dto.token,
                    buy_order=input_dto.buy_order,
                    session_id=input_dto.session_id,
                ),
            )

        if changed and self.scheduler is not None:
            task_id = self.scheduler.schedule_expiry(payment.id, self.timeout_seconds)
            logger.info(
                f"Gateway expiry for payment {payment.id} scheduled in "
                f"{self.timeout_seconds}s (task {task_id})"
            )
        return PaymentOutputDTO.from_entity(payment)


class AuthorizeGatewayPaymentService(PaymentTransitionService):
    """
    Use Case: Gateway autorizou a transação (WEBPAY).

    Registra authorization_code sem concluir o pagamento. Até a
    confirmação, a expiração do gateway pede o estorno desta autorização.
    """

    def execute(self, input_dto: AuthorizeGatewayPaymentInputDTO) -> PaymentOutputDTO:
        """
        Raises:
            InvalidTransitionError: Se não é WEBPAY ou não está em processing
            ConflictError: Se já existe outra autorização
        """
        with self.uow:
            payment, changed = self._apply(
                input_dto.payment_id,
                lambda p: p.authorize_gateway(
                    input_dto.authorization_code,
                    card_last_four_digits=input_dto.card_last_four_digits,
                    response=input_dto.response,
                ),
            )
        if changed:
            logger.info(f"Payment {payment.id} authorized by gateway")
        return PaymentOutputDTO.from_entity(payment)


class ConfirmPaymentService(PaymentTransitionService):
    """
    Use Case: Confirmar pagamento.

    Webhooks do gateway são entregues pelo menos uma vez: repetir com o
    mesmo transaction_id devolve o pagamento inalterado e sem evento.
    """

    def execute(self, input_dto: ConfirmPaymentInputDTO) -> PaymentOutputDTO:
        """
        Raises:
            ConflictError: Se já terminal com outra transação ou outro estado
            ValidationError: Se transaction_id vazio ou cartão malformado
        """
        with self.uow:
            payment, _ = self._apply(
                input_dto.payment_id,
                lambda p: p.confirm(
                    input_dto.transaction_id,
                    authorization_code=input_dto.authorization_code,
                    card_last_four_digits=input_dto.card_last_four_digits,
                    metadata=input_dto.metadata,
                ),
            )
        return PaymentOutputDTO.from_entity(payment)


class ValidateProofService(PaymentTransitionService):
    """Use Case: Equipe revisa o comprovante (válido → COMPLETED, inválido → FAILED)."""

    def execute(self, input_dto: ValidateProofInputDTO) -> PaymentOutputDTO:
        reason = None if input_dto.is_valid else (input_dto.notes or "invalid_proof")
        with self.uow:
            payment, _ = self._apply(
                input_dto.payment_id,
                lambda p: p.validate_proof(input_dto.is_valid, notes=input_dto.notes),
                reason=reason,
            )
        return PaymentOutputDTO.from_entity(payment)


class MarkPaymentFailedService(PaymentTransitionService):
    """Use Case: Marcar pagamento como falho (ex: gateway recusou)."""

    def execute(self, input_dto: MarkPaymentFailedInputDTO) -> PaymentOutputDTO:
        """
        Raises:
            ConflictError: Se já está em outro estado terminal
        """
        with self.uow:
            payment, _ = self._apply(
                input_dto.payment_id,
                lambda p: p.mark_failed(input_dto.reason),
                reason=input_dto.reason,
            )
        return PaymentOutputDTO.from_entity(payment)


class CancelPaymentService(PaymentTransitionService):
    """Use Case: Cancelar pagamento (timeout, abandono do cliente)."""

    def execute(self, input_dto: CancelPaymentInputDTO) -> PaymentOutputDTO:
        """
        Raises:
            ConflictError: Se já está em outro estado terminal
        """
        with self.uow:
            payment, _ = self._apply(
                input_dto.payment_id,
                lambda p: p.cancel(input_dto.reason),
                reason=input_dto.reason,
            )
        return PaymentOutputDTO.from_entity(payment)


class ExpireGatewayPaymentService(PaymentTransitionService):
    """
    Use Case: Retorno do gateway não chegou no prazo.

    Fluxo:
    1. Pagamento terminal → devolvido inalterado
    2. Marca FAILED com metadata["gateway_timeout"]
    3. Com código de autorização (AuthorizeGatewayPaymentService sem
       confirmação posterior), pede estorno ao gateway; falha do gateway
       é registrada em metadata, não propagada
    """

    def __init__(
        self,
        payment_repo: PaymentRepository,
        uow: UnitOfWork,
        gateway: Optional[PaymentGateway] = None,
    ):
        super().__init__(payment_repo, uow)
        self.gateway = gateway

    def execute(self, input_dto: ExpireGatewayPaymentInputDTO) -> PaymentOutputDTO:
        """
        Raises:
            EntityNotFoundError: Se pagamento não existe
            InvalidTransitionError: Se pagamento não é WEBPAY
        """
        payment = _load_payment(self.payment_repo, input_dto.payment_id)
        if not payment.payment_type.is_gateway:
            raise InvalidTransitionError(
                f"Expiração de gateway não se aplica a {payment.payment_type.value}",
                current_status=payment.status.value,
                target_status=PaymentStatus.FAILED.value,
            )
        if payment.is_terminal:
            logger.info(
                f"Payment {payment.id} already {payment.status.value}, "
                f"gateway expiry ignored"
            )
            return PaymentOutputDTO.from_entity(payment)

        timeout_info = {
            "expired_at": _utcnow().isoformat(),
            "reason": input_dto.reason,
            "task_id": input_dto.task_id,
        }
        with self.uow:
            payment, changed = self._apply(
                input_dto.payment_id,
                lambda p: p.expire_gateway(timeout_info),
                reason=input_dto.reason,
            )

        if changed and payment.authorization_code:
            payment = self._reverse(payment)
        return PaymentOutputDTO.from_entity(payment)

    def _reverse(self, payment: PaymentEntity) -> PaymentEntity:
        reversal = {"reversal_attempted": self.gateway is not None}
        if self.gateway is not None:
            try:
                reversal["reversal_response"] = self.gateway.reverse(payment)
                reversal["reversal_succeeded"] = True
            except GatewayError as e:
                logger.error(f"Gateway reversal failed for payment {payment.id}: {e}")
                reversal["reversal_succeeded"] = False
                reversal["reversal_error"] = e.message

        def record_reversal(p: PaymentEntity) -> None:
            timeout_info = dict(p.metadata.get("gateway_timeout") or {})
            timeout_info.update(reversal)
            p.annotate(metadata={"gateway_timeout": timeout_info})

        with self.uow:
            payment, _ = self._apply(payment.id, record_reversal)
        return payment


class AnnotatePaymentService(PaymentTransitionService):
    """Use Case: Atualizar notes/metadata (permitido inclusive em estado terminal)."""

    def execute(self, input_dto: AnnotatePaymentInputDTO) -> PaymentOutputDTO:
        with self.uow:
            payment, _ = self._apply(
                input_dto.payment_id,
                lambda p: p.annotate(notes=input_dto.notes, metadata=input_dto.metadata),
            )
        return PaymentOutputDTO.from_entity(payment)


class UpdatePaymentAmountService(PaymentTransitionService):
    """Use Case: Alterar valor antes da confirmação."""

    def execute(self, input_dto: UpdatePaymentAmountInputDTO) -> PaymentOutputDTO:
        """
        Raises:
            ConflictError: Se pagamento terminal
            ValidationError: Se valor inválido
        """
        with self.uow:
            payment, _ = self._apply(
                input_dto.payment_id,
                lambda p: p.update_amount(input_dto.amount),
            )
        return PaymentOutputDTO.from_entity(payment)


# =============================================================================
# Consultas
# =============================================================================

class GetPaymentService:
    """Use Case: Obter pagamento por ID."""

    def __init__(self, payment_repo: PaymentRepository):
        self.payment_repo = payment_repo

    def execute(self, payment_id: str) -> PaymentOutputDTO:
        """
        Raises:
            EntityNotFoundError: Se pagamento não existe
        """
        return PaymentOutputDTO.from_entity(
            _load_payment(self.payment_repo, payment_id)
        )


class ListCartPaymentsService:
    """Use Case: Histórico de pagamentos de um carrinho (mais recente primeiro)."""

    def __init__(self, payment_repo: PaymentRepository):
        self.payment_repo = payment_repo

    def execute(self, cart_id: str) -> List[PaymentOutputDTO]:
        return [
            PaymentOutputDTO.from_entity(payment)
            for payment in self.payment_repo.list_by_cart(cart_id)
        ]


class GetActivePaymentService:
    """Use Case: Pagamento em andamento do carrinho, ou None."""

    def __init__(self, payment_repo: PaymentRepository):
        self.payment_repo = payment_repo

    def execute(self, cart_id: str) -> Optional[PaymentOutputDTO]:
        payment = self.payment_repo.get_active_by_cart(cart_id)
        return PaymentOutputDTO.from_entity(payment) if payment else None


class FindPaymentByReferenceService:
    """
    Use Case: Localizar pagamento pela referência do gateway.

    No retorno do gateway só se conhece a ordem de compra; ela é gravada
    como external_reference no início do redirecionamento.
    """

    def __init__(self, payment_repo: PaymentRepository):
        self.payment_repo = payment_repo

    def execute(self, reference: str) -> Optional[PaymentOutputDTO]:
        """
        Raises:
            ValidationError: Se referência vazia
        """
        reference = (reference or "").strip()
        if not reference:
            raise ValidationError("Referência é obrigatória", field="reference")

        payment = self.payment_repo.get_by_reference(reference)
        if payment is None:
            logger.warning(f"No payment found for reference {reference}")
            return None
        return PaymentOutputDTO.from_entity(payment)


class CartPaymentStatsService:
    """
    Use Case: Totais de pagamentos de um carrinho.

    PENDING e PROCESSING somam em total_pending; CANCELLED só conta em count.
    """

    def __init__(self, payment_repo: PaymentRepository):
        self.payment_repo = payment_repo

    def execute(self, cart_id: str) -> CartPaymentStatsDTO:
        stats = CartPaymentStatsDTO(cart_id=cart_id)
        total_paid = total_pending = total_failed = Decimal("0.00")

        for payment in self.payment_repo.list_by_cart(cart_id):
            stats.count += 1
            if payment.status == PaymentStatus.COMPLETED:
                total_paid += payment.amount
            elif payment.is_active:
                total_pending += payment.amount
            elif payment.status == PaymentStatus.FAILED:
                total_failed += payment.amount

        stats.total_paid = total_paid
        stats.total_pending = total_pending
        stats.total_failed = total_failed
        return stats
