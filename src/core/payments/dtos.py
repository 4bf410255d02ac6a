"""
Data Transfer Objects (DTOs) do Domínio de Pagamentos.

Tipos de DTOs:
- Input DTOs: uma estrutura por operação do ciclo de vida
- Output DTOs: PaymentOutputDTO e estatísticas por carrinho
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from src.core.shared.patch import UNSET

from .entities import PaymentEntity


# =============================================================================
# INPUT DTOs (Entrada)
# =============================================================================

@dataclass(frozen=True)
class InitiatePaymentInputDTO:
    """
    DTO de entrada para iniciar pagamento de um carrinho.

    Attributes:
        cart_id: Carrinho
        payment_type: Meio (valor ou nome do enum, ex: "bank_transfer")
        amount: Valor (str/Decimal/int)
        organization_id: Organização vendedora
        notes: Observações
        metadata: Dados livres iniciais
    """

    cart_id: str
    payment_type: str
    amount: Any
    organization_id: Optional[int] = None
    notes: Optional[str] = None
    metadata: Optional[dict] = None


@dataclass(frozen=True)
class SubmitProofInputDTO:
    payment_id: str
    proof_url: str
    external_reference: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class StartGatewayRedirectInputDTO:
    """Início do redirecionamento WEBPAY (token/ordem de compra do gateway)."""

    payment_id: str
    token: str
    buy_order: Optional[str] = None
    session_id: Optional[str] = None


@dataclass(frozen=True)
class AuthorizeGatewayPaymentInputDTO:
    """
    Autorização devolvida pelo gateway (WEBPAY), antes da confirmação.

    Attributes:
        payment_id: Pagamento em processing
        authorization_code: Código de autorização do gateway
        card_last_four_digits: Últimos 4 dígitos do cartão
        response: Resposta do gateway (gravada em metadata)
    """

    payment_id: str
    authorization_code: str
    card_last_four_digits: Optional[str] = None
    response: Optional[dict] = None


@dataclass(frozen=True)
class ConfirmPaymentInputDTO:
    payment_id: str
    transaction_id: str
    authorization_code: Optional[str] = None
    card_last_four_digits: Optional[str] = None
    metadata: Optional[dict] = None


@dataclass(frozen=True)
class ValidateProofInputDTO:
    payment_id: str
    is_valid: bool
    notes: Optional[str] = None


@dataclass(frozen=True)
class MarkPaymentFailedInputDTO:
    payment_id: str
    reason: str


@dataclass(frozen=True)
class CancelPaymentInputDTO:
    payment_id: str
    reason: str


@dataclass(frozen=True)
class ExpireGatewayPaymentInputDTO:
    """
    Expiração do retorno do gateway.

    Attributes:
        payment_id: Pagamento WEBPAY
        task_id: ID da tarefa agendada que disparou a expiração
        reason: Motivo registrado em metadata
    """

    payment_id: str
    task_id: Optional[str] = None
    reason: str = "gateway_timeout"


@dataclass(frozen=True)
class AnnotatePaymentInputDTO:
    """notes em três estados (UNSET mantém, None limpa); metadata é mesclado."""

    payment_id: str
    notes: Any = UNSET
    metadata: Optional[dict] = None


@dataclass(frozen=True)
class UpdatePaymentAmountInputDTO:
    payment_id: str
    amount: Any


# =============================================================================
# OUTPUT DTOs (Saída)
# =============================================================================

@dataclass
class PaymentOutputDTO:
    """
    DTO de saída completo com dados do pagamento.

    status e payment_type são os valores dos enums (ex: "pending").
    """

    id: str
    cart_id: str
    organization_id: Optional[int]
    amount: Decimal
    payment_type: str
    status: str
    proof_url: Optional[str]
    external_reference: Optional[str]
    transaction_id: Optional[str]
    authorization_code: Optional[str]
    card_last_four_digits: Optional[str]
    payment_date: Optional[datetime]
    confirmed_at: Optional[datetime]
    metadata: dict
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime
    version: int

    @classmethod
    def from_entity(cls, entity: PaymentEntity) -> "PaymentOutputDTO":
        return cls(
            id=entity.id,
            cart_id=entity.cart_id,
            organization_id=entity.organization_id,
            amount=entity.amount,
            payment_type=entity.payment_type.value,
            status=entity.status.value,
            proof_url=entity.proof_url,
            external_reference=entity.external_reference,
            transaction_id=entity.transaction_id,
            authorization_code=entity.authorization_code,
            card_last_four_digits=entity.card_last_four_digits,
            payment_date=entity.payment_date,
            confirmed_at=entity.confirmed_at,
            metadata=dict(entity.metadata),
            notes=entity.notes,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            version=entity.version,
        )

    def to_dict(self) -> dict:
        """Converte para dicionário (útil para JSON)."""

        def _iso(value: Optional[datetime]) -> Optional[str]:
            return value.isoformat() if value else None

        return {
            "id": self.id,
            "cart_id": self.cart_id,
            "organization_id": self.organization_id,
            "amount": str(self.amount),
            "payment_type": self.payment_type,
            "status": self.status,
            "proof_url": self.proof_url,
            "external_reference": self.external_reference,
            "transaction_id": self.transaction_id,
            "authorization_code": self.authorization_code,
            "card_last_four_digits": self.card_last_four_digits,
            "payment_date": _iso(self.payment_date),
            "confirmed_at": _iso(self.confirmed_at),
            "metadata": self.metadata,
            "notes": self.notes,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "version": self.version,
        }


@dataclass
class CartPaymentStatsDTO:
    """
    Totais de pagamentos de um carrinho.

    Attributes:
        total_paid: Soma dos pagamentos COMPLETED
        total_pending: Soma dos pagamentos PENDING e PROCESSING
        total_failed: Soma dos pagamentos FAILED
        count: Número total de pagamentos (inclui CANCELLED)
    """

    cart_id: str
    total_paid: Decimal = Decimal("0.00")
    total_pending: Decimal = Decimal("0.00")
    total_failed: Decimal = Decimal("0.00")
    count: int = 0

    def to_dict(self) -> dict:
        return {
            "cart_id": self.cart_id,
            "total_paid": str(self.total_paid),
            "total_pending": str(self.total_pending),
            "total_failed": str(self.total_failed),
            "count": self.count,
        }
