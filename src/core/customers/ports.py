"""
Ports (Interfaces) do Domínio de Clientes.

Tipos de Ports:
- CustomerRepository: leitura por ID/documento/telefone, inserção e
  atualização condicional por versão

Nenhuma operação de remoção é exposta: clientes vivem enquanto
a organização existir.
"""

import copy
import threading
from datetime import datetime, timezone
from typing import Dict, Optional, Protocol, Tuple, runtime_checkable

from src.core.shared.exceptions import DuplicateKeyError

from .entities import CustomerEntity


@runtime_checkable
class CustomerRepository(Protocol):
    """
    Interface para persistência de Clientes.

    Implementações:
    - DjangoCustomerRepository (ORM, restrição única condicional)
    - InMemoryCustomerRepository (para testes)
    """

    def get_by_id(self, customer_id: str) -> Optional[CustomerEntity]:
        """Busca cliente por ID. Retorna None se não existir."""
        ...

    def get_by_document(
        self,
        organization_id: int,
        document_type: str,
        document_number: str,
    ) -> Optional[CustomerEntity]:
        """Busca cliente pela chave de identidade (organização + documento)."""
        ...

    def get_by_phone(self, organization_id: int, phone: str) -> Optional[CustomerEntity]:
        """
        Busca cliente pelo telefone na organização.

        Telefone não é chave única: devolve o cadastro mais recente.
        """
        ...

    def insert(self, customer: CustomerEntity) -> CustomerEntity:
        """
        Insere novo cliente.

        Raises:
            DuplicateKeyError: Se a identidade já existe na organização
            StorageError: Se armazenamento indisponível
        """
        ...

    def update_if_version(
        self,
        customer_id: str,
        expected_version: int,
        patch: dict,
    ) -> Optional[CustomerEntity]:
        """
        Aplica `patch` somente se a versão armazenada for `expected_version`.

        Returns:
            Entidade atualizada (versão incrementada) ou None quando a
            versão mudou ou o registro não existe (sinal de conflito)
        """
        ...


class InMemoryCustomerRepository:
    """
    Implementação em memória do CustomerRepository.

    Emula um armazenamento atômico: cada chamada é serializada por um
    lock e as entidades são copiadas na entrada e na saída.

    Não usar em produção!
    """

    def __init__(self):
        self._customers: Dict[str, CustomerEntity] = {}
        self._lock = threading.Lock()

    def _find_by_key(self, key: Tuple[int, str, str]) -> Optional[CustomerEntity]:
        for customer in self._customers.values():
            if customer.identity_key == key:
                return customer
        return None

    def get_by_id(self, customer_id: str) -> Optional[CustomerEntity]:
        with self._lock:
            customer = self._customers.get(customer_id)
            return copy.deepcopy(customer) if customer else None

    def get_by_document(
        self,
        organization_id: int,
        document_type: str,
        document_number: str,
    ) -> Optional[CustomerEntity]:
        with self._lock:
            customer = self._find_by_key(
                (organization_id, document_type, document_number)
            )
            return copy.deepcopy(customer) if customer else None

    def get_by_phone(self, organization_id: int, phone: str) -> Optional[CustomerEntity]:
        with self._lock:
            matches = [
                c for c in self._customers.values()
                if c.organization_id == organization_id and c.phone == phone
            ]
            if not matches:
                return None
            return copy.deepcopy(max(matches, key=lambda c: c.created_at))

    def insert(self, customer: CustomerEntity) -> CustomerEntity:
        with self._lock:
            if customer.id in self._customers:
                raise DuplicateKeyError(
                    f"Cliente {customer.id} já existe", key="id"
                )
            key = customer.identity_key
            if key is not None and self._find_by_key(key) is not None:
                raise DuplicateKeyError(
                    f"Documento {customer.document_type}:{customer.document_number} "
                    f"já cadastrado na organização {customer.organization_id}",
                    key="organization_document",
                )
            self._customers[customer.id] = copy.deepcopy(customer)
            return copy.deepcopy(customer)

    def update_if_version(
        self,
        customer_id: str,
        expected_version: int,
        patch: dict,
    ) -> Optional[CustomerEntity]:
        with self._lock:
            stored = self._customers.get(customer_id)
            if stored is None or stored.version != expected_version:
                return None
            for name, value in patch.items():
                setattr(stored, name, value)
            if "updated_at" not in patch:
                stored.updated_at = datetime.now(timezone.utc)
            stored.version += 1
            return copy.deepcopy(stored)

    def list_all(self):
        """Lista todos os clientes (útil para testes)."""
        with self._lock:
            return [copy.deepcopy(c) for c in self._customers.values()]

    def count(self) -> int:
        with self._lock:
            return len(self._customers)

    def clear(self) -> None:
        """Limpa todos os dados (útil para testes)."""
        with self._lock:
            self._customers.clear()
