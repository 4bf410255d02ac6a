"""
Ports (Interfaces) do Domínio de Pagamentos.

Tipos de Ports:
- PaymentRepository: persistência com escrita condicional por versão
- PaymentGateway: operações no gateway externo (reversão)
- PaymentTimeoutScheduler: agendamento da expiração do gateway

Princípio:
    Core define interfaces → Adapters implementam
    O gateway em si não é implementado aqui (colaborador externo).
"""

import copy
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol, runtime_checkable

from src.core.shared.exceptions import DuplicateKeyError

from .entities import PaymentEntity


@runtime_checkable
class PaymentRepository(Protocol):
    """
    Interface para persistência de Pagamentos.

    Implementações:
    - DjangoPaymentRepository (ORM, restrição única condicional por carrinho)
    - InMemoryPaymentRepository (para testes)
    """

    def get_by_id(self, payment_id: str) -> Optional[PaymentEntity]:
        """Busca pagamento por ID. Retorna None se não existir."""
        ...

    def get_active_by_cart(self, cart_id: str) -> Optional[PaymentEntity]:
        """Pagamento não terminal (PENDING/PROCESSING) do carrinho, se houver."""
        ...

    def list_by_cart(self, cart_id: str) -> List[PaymentEntity]:
        """Todos os pagamentos do carrinho, do mais recente ao mais antigo."""
        ...

    def get_by_reference(self, reference: str) -> Optional[PaymentEntity]:
        """
        Pagamento cujo transaction_id ou external_reference (ordem de
        compra do gateway) é `reference`; o mais recente se houver vários.
        """
        ...

    def insert(self, payment: PaymentEntity) -> PaymentEntity:
        """
        Insere novo pagamento.

        Raises:
            DuplicateKeyError: Se o carrinho já tem pagamento não terminal
            StorageError: Se armazenamento indisponível
        """
        ...

    def update_if_version(
        self,
        payment_id: str,
        expected_version: int,
        patch: dict,
    ) -> Optional[PaymentEntity]:
        """
        Aplica `patch` somente se a versão armazenada for `expected_version`.

        Returns:
            Entidade atualizada (versão incrementada) ou None (sinal de conflito)
        """
        ...


@runtime_checkable
class PaymentGateway(Protocol):
    """Colaborador externo do gateway (ex: Webpay)."""

    def reverse(self, payment: PaymentEntity) -> dict:
        """
        Solicita estorno/anulação de uma autorização.

        Returns:
            Resposta do gateway (serializável em JSON)

        Raises:
            GatewayError: Se o gateway recusar ou estiver indisponível
        """
        ...


@runtime_checkable
class PaymentTimeoutScheduler(Protocol):
    """Agenda a expiração de um pagamento redirecionado ao gateway."""

    def schedule_expiry(self, payment_id: str, delay_seconds: int) -> Optional[str]:
        """
        Returns:
            Identificador da tarefa agendada, se o agendador fornecer
        """
        ...


class InMemoryPaymentRepository:
    """
    Implementação em memória do PaymentRepository.

    Cada chamada é serializada por um lock e as entidades são copiadas
    na entrada e na saída, emulando um armazenamento atômico.

    Não usar em produção!
    """

    def __init__(self):
        self._payments: Dict[str, PaymentEntity] = {}
        self._lock = threading.Lock()

    def _active_for(self, cart_id: str) -> Optional[PaymentEntity]:
        for payment in self._payments.values():
            if payment.cart_id == cart_id and payment.is_active:
                return payment
        return None

    def get_by_id(self, payment_id: str) -> Optional[PaymentEntity]:
        with self._lock:
            payment = self._payments.get(payment_id)
            return copy.deepcopy(payment) if payment else None

    def get_active_by_cart(self, cart_id: str) -> Optional[PaymentEntity]:
        with self._lock:
            payment = self._active_for(cart_id)
            return copy.deepcopy(payment) if payment else None

    def list_by_cart(self, cart_id: str) -> List[PaymentEntity]:
        with self._lock:
            payments = [
                copy.deepcopy(p) for p in self._payments.values()
                if p.cart_id == cart_id
            ]
        return sorted(payments, key=lambda p: p.created_at, reverse=True)

    def get_by_reference(self, reference: str) -> Optional[PaymentEntity]:
        with self._lock:
            matches = [
                p for p in self._payments.values()
                if reference in (p.transaction_id, p.external_reference)
            ]
            if not matches:
                return None
            return copy.deepcopy(max(matches, key=lambda p: p.created_at))

    def insert(self, payment: PaymentEntity) -> PaymentEntity:
        with self._lock:
            if payment.id in self._payments:
                raise DuplicateKeyError(
                    f"Pagamento {payment.id} já existe", key="id"
                )
            if payment.is_active and self._active_for(payment.cart_id):
                raise DuplicateKeyError(
                    f"Carrinho {payment.cart_id} já tem pagamento em andamento",
                    key="active_payment_per_cart",
                )
            self._payments[payment.id] = copy.deepcopy(payment)
            return copy.deepcopy(payment)

    def update_if_version(
        self,
        payment_id: str,
        expected_version: int,
        patch: dict,
    ) -> Optional[PaymentEntity]:
        with self._lock:
            stored = self._payments.get(payment_id)
            if stored is None or stored.version != expected_version:
                return None
            for name, value in patch.items():
                setattr(stored, name, copy.deepcopy(value))
            if "updated_at" not in patch:
                stored.updated_at = datetime.now(timezone.utc)
            stored.version += 1
            return copy.deepcopy(stored)

    def list_all(self) -> List[PaymentEntity]:
        with self._lock:
            return [copy.deepcopy(p) for p in self._payments.values()]

    def clear(self) -> None:
        """Limpa todos os dados (útil para testes)."""
        with self._lock:
            self._payments.clear()
