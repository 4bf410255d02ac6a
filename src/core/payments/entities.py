"""
Entidades do Domínio de Pagamentos.

Entidades:
- PaymentEntity: Pagamento de um carrinho
- PaymentStatus: Estados do ciclo de vida
- PaymentType: Meios de pagamento

Fluxo de Estados:
    PENDING → PROCESSING → COMPLETED
       │          │      → FAILED
       │          │      → CANCELLED
       └──────────┴──→ COMPLETED / FAILED / CANCELLED

Regras de Negócio Encapsuladas:
- Estados terminais são imutáveis (exceto notes/metadata)
- Comprovante obrigatório antes de PROCESSING para meios manuais
- confirmed_at/payment_date preenchidos se e somente se COMPLETED
- Reentrada idempotente em estado terminal equivalente
"""

import copy
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, Optional
import uuid

from src.core.shared.exceptions import (
    ValidationError,
    ConflictError,
    InvalidTransitionError,
)
from src.core.shared.patch import UNSET, is_set


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PaymentType(Enum):
    """
    Meios de pagamento aceitos no checkout.

    Manuais (exigem comprovante e revisão da equipe):
        BANK_TRANSFER, CHECK
    Gateway (redirecionamento + webhook):
        WEBPAY
    """

    WEBPAY = "webpay"
    BANK_TRANSFER = "bank_transfer"
    PURCHASE_ORDER = "purchase_order"
    CHECK = "check"

    @property
    def requires_proof(self) -> bool:
        """Meios manuais passam por comprovante antes de PROCESSING."""
        return self in (PaymentType.BANK_TRANSFER, PaymentType.CHECK)

    @property
    def is_gateway(self) -> bool:
        return self is PaymentType.WEBPAY

    @classmethod
    def from_string(cls, value: str) -> "PaymentType":
        """
        Converte string para enum (pelo nome ou pelo valor).

        Raises:
            ValueError: Se valor inválido
        """
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).upper()]
        except KeyError:
            pass

        for payment_type in cls:
            if payment_type.value == str(value).lower():
                return payment_type

        raise ValueError(f"Tipo de pagamento inválido: {value}")


class PaymentStatus(Enum):
    """Estados possíveis de um pagamento."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @classmethod
    def from_string(cls, value: str) -> "PaymentStatus":
        """
        Converte string para enum (pelo nome ou pelo valor).

        Raises:
            ValueError: Se valor inválido
        """
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).upper()]
        except KeyError:
            pass

        for status in cls:
            if status.value == str(value).lower():
                return status

        raise ValueError(f"Status inválido: {value}")


TERMINAL_STATUSES = frozenset(
    {PaymentStatus.COMPLETED, PaymentStatus.FAILED, PaymentStatus.CANCELLED}
)

ACTIVE_STATUSES = frozenset({PaymentStatus.PENDING, PaymentStatus.PROCESSING})

ALLOWED_TRANSITIONS = {
    PaymentStatus.PENDING: frozenset({
        PaymentStatus.PROCESSING,
        PaymentStatus.COMPLETED,
        PaymentStatus.FAILED,
        PaymentStatus.CANCELLED,
    }),
    PaymentStatus.PROCESSING: frozenset({
        PaymentStatus.COMPLETED,
        PaymentStatus.FAILED,
        PaymentStatus.CANCELLED,
    }),
    PaymentStatus.COMPLETED: frozenset(),
    PaymentStatus.FAILED: frozenset(),
    PaymentStatus.CANCELLED: frozenset(),
}

# Campos comparados para calcular o patch de cada transição
MUTABLE_FIELDS = (
    "status",
    "amount",
    "proof_url",
    "external_reference",
    "transaction_id",
    "authorization_code",
    "card_last_four_digits",
    "payment_date",
    "confirmed_at",
    "metadata",
    "notes",
)

_CARD_LAST_FOUR = re.compile(r"^\d{4}$")


@dataclass
class PaymentEntity:
    """
    Entidade de Domínio: Pagamento.

    Invariantes:
    - No máximo um pagamento não terminal por cart_id
    - cart_id é obrigatório e imutável
    - amount > 0, duas casas decimais, alterável só antes do estado terminal
    - Transições seguem ALLOWED_TRANSITIONS

    Attributes:
        id: Identificador único (UUID)
        cart_id: Carrinho dono do pagamento
        organization_id: Organização vendedora
        amount: Valor (Decimal, 2 casas)
        payment_type: Meio de pagamento
        status: Estado atual
        proof_url: URL do comprovante (meios manuais)
        external_reference: Referência externa (nº da transferência, cheque)
        transaction_id: ID da transação confirmada no gateway
        authorization_code: Código de autorização do gateway
        card_last_four_digits: Últimos 4 dígitos do cartão
        payment_date / confirmed_at: Momento da confirmação
        metadata: Dados livres (gateway, timeout, revisão)
        notes: Observações livres
        version: Contador de concorrência otimista

    Example:
        payment = PaymentEntity.create(
            cart_id="C1",
            payment_type=PaymentType.BANK_TRANSFER,
            amount="10000.00",
        )
        payment.submit_proof("https://x/proof.jpg")
        payment.validate_proof(is_valid=True)
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    cart_id: str = ""
    organization_id: Optional[int] = None

    amount: Decimal = Decimal("0.00")
    payment_type: PaymentType = PaymentType.WEBPAY
    status: PaymentStatus = PaymentStatus.PENDING

    # Dados específicos por meio
    proof_url: Optional[str] = None
    external_reference: Optional[str] = None
    transaction_id: Optional[str] = None
    authorization_code: Optional[str] = None
    card_last_four_digits: Optional[str] = None

    payment_date: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None

    metadata: Dict[str, Any] = field(default_factory=dict)
    notes: Optional[str] = None

    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    version: int = 1

    MAX_AMOUNT = Decimal("99999999.99")

    # =========================================================================
    # Criação e validação
    # =========================================================================

    @classmethod
    def create(
        cls,
        cart_id: str,
        payment_type: PaymentType,
        amount: Any,
        organization_id: Optional[int] = None,
        notes: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> "PaymentEntity":
        """
        Factory method para criar pagamento em PENDING.

        Raises:
            ValidationError: Se cart_id ausente ou valor inválido
        """
        if not cart_id or not str(cart_id).strip():
            raise ValidationError("Carrinho é obrigatório", field="cart_id")

        return cls(
            cart_id=str(cart_id).strip(),
            organization_id=organization_id,
            amount=cls.parse_amount(amount),
            payment_type=payment_type,
            status=PaymentStatus.PENDING,
            notes=notes,
            metadata=dict(metadata or {}),
        )

    @classmethod
    def parse_amount(cls, value: Any) -> Decimal:
        """
        Converte valor para Decimal com duas casas.

        Raises:
            ValidationError: Se não numérico, não positivo ou acima do limite
        """
        if isinstance(value, float):
            value = str(value)
        try:
            amount = Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError(f"Valor inválido: {value}", field="amount")

        if not amount.is_finite() or amount <= 0:
            raise ValidationError("Valor deve ser maior que zero", field="amount")
        if amount > cls.MAX_AMOUNT:
            raise ValidationError(
                f"Valor deve ser no máximo {cls.MAX_AMOUNT}", field="amount"
            )
        return amount

    # =========================================================================
    # Transições
    # =========================================================================

    def _transition_to(self, target: PaymentStatus) -> None:
        if target not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransitionError(
                f"Transição de {self.status.value} para {target.value} não é permitida",
                current_status=self.status.value,
                target_status=target.value,
            )
        self.status = target

    def _ensure_not_terminal_with(self, target: PaymentStatus) -> bool:
        """
        Trata reentrada em estado terminal.

        Returns:
            True se o pagamento já está em `target` (operação idempotente)

        Raises:
            ConflictError: Se já está em outro estado terminal
        """
        if self.status == target:
            return True
        if self.status.is_terminal:
            raise ConflictError(
                f"Pagamento {self.id} já está {self.status.value}",
                rule="terminal_state_immutable",
            )
        return False

    def _complete(self) -> None:
        self._transition_to(PaymentStatus.COMPLETED)
        now = _utcnow()
        self.confirmed_at = now
        self.payment_date = now

    def _append_note(self, note: Optional[str]) -> None:
        if not note:
            return
        self.notes = f"{self.notes}\n{note}" if self.notes else note

    def submit_proof(
        self,
        proof_url: str,
        external_reference: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> None:
        """
        Registra comprovante de pagamento manual.

        Regras:
        - Apenas BANK_TRANSFER e CHECK
        - Apenas a partir de PENDING
        - Muda status para PROCESSING

        Raises:
            InvalidTransitionError: Se meio ou estado não permitem
            ValidationError: Se proof_url vazio
        """
        if not self.payment_type.requires_proof:
            raise InvalidTransitionError(
                f"Pagamentos {self.payment_type.value} não aceitam comprovante",
                current_status=self.status.value,
                target_status=PaymentStatus.PROCESSING.value,
            )
        if self.status != PaymentStatus.PENDING:
            raise InvalidTransitionError(
                f"Comprovante só pode ser enviado em pending (atual: {self.status.value})",
                current_status=self.status.value,
                target_status=PaymentStatus.PROCESSING.value,
            )
        if not proof_url or not proof_url.strip():
            raise ValidationError("URL do comprovante é obrigatória", field="proof_url")

        self.proof_url = proof_url.strip()
        if external_reference:
            self.external_reference = external_reference
        if notes:
            self.notes = notes
        self._transition_to(PaymentStatus.PROCESSING)

    def start_gateway_redirect(
        self,
        token: str,
        buy_order: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> None:
        """
        Registra o início do redirecionamento ao gateway (WEBPAY).

        A ordem de compra vira external_reference, usada para localizar o
        pagamento no retorno do gateway.

        Repetir com o mesmo token em PROCESSING não altera nada.

        Raises:
            InvalidTransitionError: Se não é WEBPAY ou não está em PENDING
            ValidationError: Se token vazio
        """
        if not self.payment_type.is_gateway:
            raise InvalidTransitionError(
                f"Pagamentos {self.payment_type.value} não usam gateway",
                current_status=self.status.value,
                target_status=PaymentStatus.PROCESSING.value,
            )
        if not token:
            raise ValidationError("Token do gateway é obrigatório", field="token")

        gateway_init = self.metadata.get("gateway_init") or {}
        if self.status == PaymentStatus.PROCESSING and gateway_init.get("token") == token:
            return

        if self.status != PaymentStatus.PENDING:
            raise InvalidTransitionError(
                f"Redirecionamento só pode iniciar em pending (atual: {self.status.value})",
                current_status=self.status.value,
                target_status=PaymentStatus.PROCESSING.value,
            )

        self.metadata["gateway_init"] = {
            "token": token,
            "buy_order": buy_order,
            "session_id": session_id,
            "started_at": _utcnow().isoformat(),
        }
        if buy_order:
            self.external_reference = buy_order
        self._transition_to(PaymentStatus.PROCESSING)

    def authorize_gateway(
        self,
        authorization_code: str,
        card_last_four_digits: Optional[str] = None,
        response: Optional[dict] = None,
    ) -> None:
        """
        Registra a autorização devolvida pelo gateway sem concluir o pagamento.

        O pagamento segue em PROCESSING até `confirm`. Se a confirmação
        não chegar no prazo, a expiração pede o estorno desta autorização.

        Regras:
        - Apenas WEBPAY, apenas em PROCESSING
        - Mesmo código repetido: nada muda
        - Código diferente do já registrado: conflito

        Raises:
            InvalidTransitionError: Se não é WEBPAY ou não está em PROCESSING
            ValidationError: Se código vazio ou cartão malformado
            ConflictError: Se já existe outra autorização
        """
        if not self.payment_type.is_gateway:
            raise InvalidTransitionError(
                f"Pagamentos {self.payment_type.value} não usam gateway",
                current_status=self.status.value,
                target_status=PaymentStatus.PROCESSING.value,
            )
        if not authorization_code:
            raise ValidationError(
                "Código de autorização é obrigatório", field="authorization_code"
            )
        if self.status != PaymentStatus.PROCESSING:
            raise InvalidTransitionError(
                f"Autorização só pode ser registrada em processing (atual: {self.status.value})",
                current_status=self.status.value,
                target_status=PaymentStatus.PROCESSING.value,
            )
        if self.authorization_code == authorization_code:
            return
        if self.authorization_code:
            raise ConflictError(
                f"Pagamento {self.id} já tem outra autorização",
                rule="authorization_code_mismatch",
            )
        if card_last_four_digits is not None and not _CARD_LAST_FOUR.match(
            str(card_last_four_digits)
        ):
            raise ValidationError(
                "Últimos dígitos do cartão devem ter 4 números",
                field="card_last_four_digits",
            )

        self.authorization_code = authorization_code
        if card_last_four_digits is not None:
            self.card_last_four_digits = str(card_last_four_digits)
        self.metadata["gateway_authorization"] = {
            **(response or {}),
            "authorized_at": _utcnow().isoformat(),
        }

    def confirm(
        self,
        transaction_id: str,
        authorization_code: Optional[str] = None,
        card_last_four_digits: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> None:
        """
        Confirma pagamento (webhook do gateway ou confirmação manual).

        Regras:
        - A partir de PENDING ou PROCESSING
        - Mesmo transaction_id em COMPLETED: nada muda (webhook repetido)
        - transaction_id diferente em estado terminal: conflito

        Raises:
            ValidationError: Se transaction_id vazio ou cartão malformado
            ConflictError: Se já terminal com outra transação/estado
        """
        if not transaction_id:
            raise ValidationError(
                "ID da transação é obrigatório", field="transaction_id"
            )

        if self.status == PaymentStatus.COMPLETED:
            if self.transaction_id == transaction_id:
                return
            raise ConflictError(
                f"Pagamento {self.id} já confirmado com outra transação",
                rule="transaction_id_mismatch",
            )
        if self.status.is_terminal:
            raise ConflictError(
                f"Pagamento {self.id} já está {self.status.value}",
                rule="terminal_state_immutable",
            )

        if card_last_four_digits is not None and not _CARD_LAST_FOUR.match(
            str(card_last_four_digits)
        ):
            raise ValidationError(
                "Últimos dígitos do cartão devem ter 4 números",
                field="card_last_four_digits",
            )

        self.transaction_id = transaction_id
        if authorization_code is not None:
            self.authorization_code = authorization_code
        if card_last_four_digits is not None:
            self.card_last_four_digits = str(card_last_four_digits)
        if metadata:
            self.metadata.update(metadata)
        self._complete()

    def validate_proof(self, is_valid: bool, notes: Optional[str] = None) -> None:
        """
        Revisão do comprovante pela equipe.

        Regras:
        - Apenas meios manuais, apenas a partir de PROCESSING
        - Válido → COMPLETED; inválido → FAILED

        Raises:
            InvalidTransitionError: Se meio ou estado não permitem
        """
        target = PaymentStatus.COMPLETED if is_valid else PaymentStatus.FAILED
        if not self.payment_type.requires_proof:
            raise InvalidTransitionError(
                f"Pagamentos {self.payment_type.value} não têm comprovante",
                current_status=self.status.value,
                target_status=target.value,
            )
        if self.status != PaymentStatus.PROCESSING:
            raise InvalidTransitionError(
                f"Comprovante só pode ser validado em processing (atual: {self.status.value})",
                current_status=self.status.value,
                target_status=target.value,
            )

        if notes:
            self.notes = notes
        if is_valid:
            self._complete()
        else:
            self._transition_to(PaymentStatus.FAILED)

    def mark_failed(self, reason: str) -> None:
        """
        Marca pagamento como falho (ex: gateway recusou).

        Idempotente se já FAILED.

        Raises:
            ConflictError: Se já está em outro estado terminal
        """
        if self._ensure_not_terminal_with(PaymentStatus.FAILED):
            return
        self._transition_to(PaymentStatus.FAILED)
        self._append_note(reason)

    def cancel(self, reason: str) -> None:
        """
        Cancela pagamento (ex: cliente abandonou).

        Idempotente se já CANCELLED.

        Raises:
            ConflictError: Se já está em outro estado terminal
        """
        if self._ensure_not_terminal_with(PaymentStatus.CANCELLED):
            return
        self._transition_to(PaymentStatus.CANCELLED)
        self._append_note(reason)

    def expire_gateway(self, timeout_info: dict) -> None:
        """
        Marca como falho um pagamento WEBPAY cujo retorno do gateway expirou.

        Pagamentos já terminais permanecem inalterados.

        Raises:
            InvalidTransitionError: Se não é WEBPAY
        """
        if not self.payment_type.is_gateway:
            raise InvalidTransitionError(
                f"Expiração de gateway não se aplica a {self.payment_type.value}",
                current_status=self.status.value,
                target_status=PaymentStatus.FAILED.value,
            )
        if self.status.is_terminal:
            return

        self.metadata["gateway_timeout"] = {
            "original_status": self.status.value,
            **timeout_info,
        }
        self._transition_to(PaymentStatus.FAILED)

    def annotate(self, notes: Any = UNSET, metadata: Optional[dict] = None) -> None:
        """
        Atualiza notes/metadata; permitido em qualquer estado.

        Args:
            notes: Novo texto (UNSET mantém, None limpa)
            metadata: Chaves mescladas sobre o metadata atual
        """
        if is_set(notes):
            self.notes = notes
        if metadata:
            self.metadata.update(metadata)

    def update_amount(self, amount: Any) -> None:
        """
        Altera o valor antes do estado terminal.

        Raises:
            ConflictError: Se pagamento terminal
            ValidationError: Se valor inválido
        """
        if self.status.is_terminal:
            raise ConflictError(
                f"Valor de pagamento {self.status.value} não pode ser alterado",
                rule="terminal_state_immutable",
            )
        self.amount = self.parse_amount(amount)

    # =========================================================================
    # Consultas
    # =========================================================================

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def is_active(self) -> bool:
        """Pagamento em andamento (ocupa o carrinho)."""
        return self.status in ACTIVE_STATUSES

    def record(self) -> Dict[str, Any]:
        """Snapshot dos campos mutáveis (para cálculo de patch)."""
        snapshot = {name: getattr(self, name) for name in MUTABLE_FIELDS}
        snapshot["metadata"] = copy.deepcopy(self.metadata)
        return snapshot

    def __repr__(self) -> str:
        return (
            f"PaymentEntity("
            f"id={self.id[:8]}..., "
            f"cart_id={self.cart_id}, "
            f"type={self.payment_type.value}, "
            f"status={self.status.value}, "
            f"amount={self.amount}"
            f")"
        )

    def __eq__(self, other: object) -> bool:
        """Comparação por ID (identidade de entidade)."""
        if not isinstance(other, PaymentEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
