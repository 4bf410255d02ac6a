"""
Use Cases (Application Services) do Domínio de Clientes.

Use Cases implementados:
- ResolveCustomerService: Busca-ou-cria o cliente de um checkout
- GetCustomerService: Obtém cliente por ID
- FindCustomerByDocumentService: Busca pelo documento na organização
- FindCustomerByPhoneService: Busca pelo telefone na organização

Corrida de "primeira compra":
    Dois checkouts simultâneos com o mesmo documento novo podem ambos
    não encontrar o cliente e tentar inserir. A violação de unicidade
    na inserção é tratada como sinal para repetir busca-e-atualização
    exatamente uma vez antes de qualquer erro.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from src.core.shared.interfaces import UnitOfWork
from src.core.shared.exceptions import (
    ConflictError,
    DuplicateKeyError,
    EntityNotFoundError,
    ValidationError,
)
from src.core.shared.patch import changed_fields

from .ports import CustomerRepository
from .entities import CustomerEntity, normalize_text
from .dtos import ResolveCustomerInputDTO, CustomerOutputDTO

logger = logging.getLogger(__name__)


class ResolveCustomerService:
    """
    Use Case: Resolver o cliente de um checkout.

    Fluxo:
    1. Validar organização e par de documento (nenhuma escrita se inválido)
    2. Com documento: buscar pela identidade e atualizar campos informados
    3. Sem documento ou sem registro: inserir cliente novo
    4. Inserção duplicada (corrida): repetir passo 2 uma vez

    Example:
        service = ResolveCustomerService(customer_repo, uow)
        output = service.execute(ResolveCustomerInputDTO(
            organization_id=42,
            document_type="DNI",
            document_number="12345678",
            email="ana@example.com",
        ))
    """

    def __init__(self, customer_repo: CustomerRepository, uow: UnitOfWork):
        self.customer_repo = customer_repo
        self.uow = uow

    def execute(self, input_dto: ResolveCustomerInputDTO) -> CustomerOutputDTO:
        """
        Executa resolução de cliente.

        Raises:
            ValidationError: Se entrada malformada
            ConflictError: Se a corrida de criação persistir após o retry
            StorageError: Se armazenamento indisponível
        """
        organization_id = input_dto.organization_id
        CustomerEntity.validate_organization(organization_id)
        document_type, document_number = CustomerEntity.normalize_identity(
            input_dto.document_type, input_dto.document_number
        )
        changes = {
            name: normalize_text(value)
            for name, value in input_dto.contact_changes().items()
        }
        has_identity = document_type is not None

        with self.uow:
            customer = None
            if has_identity:
                customer = self._find_and_update(
                    organization_id, document_type, document_number, changes
                )

            if customer is None:
                new_customer = CustomerEntity.create(
                    organization_id=organization_id,
                    document_type=document_type,
                    document_number=document_number,
                    **changes,
                )
                try:
                    customer = self.customer_repo.insert(new_customer)
                    logger.info(
                        f"Customer {customer.id} created for organization {organization_id}"
                    )
                except DuplicateKeyError:
                    if not has_identity:
                        raise
                    logger.warning(
                        f"Concurrent creation for {document_type}:{document_number} "
                        f"in organization {organization_id}, retrying lookup"
                    )
                    customer = self._find_and_update(
                        organization_id, document_type, document_number, changes
                    )
                    if customer is None:
                        raise ConflictError(
                            f"Cliente {document_type}:{document_number} não pôde ser "
                            f"resolvido na organização {organization_id}",
                            rule="customer_identity_race",
                        )

        return CustomerOutputDTO.from_entity(customer)

    def _find_and_update(
        self,
        organization_id: int,
        document_type: str,
        document_number: str,
        changes: dict,
    ) -> Optional[CustomerEntity]:
        """
        Busca pela identidade e aplica os campos informados.

        Returns:
            Cliente atualizado (ou inalterado se nada mudou), ou None se não
            existe ou foi removido concorrentemente

        Raises:
            ConflictError: Se a escrita condicional falhar duas vezes
        """
        existing = self.customer_repo.get_by_document(
            organization_id, document_type, document_number
        )

        for attempt in range(2):
            if existing is None:
                return None

            patch = changed_fields(existing.contact_record(), changes)
            if not patch:
                return existing

            patch["updated_at"] = datetime.now(timezone.utc)
            updated = self.customer_repo.update_if_version(
                existing.id, existing.version, patch
            )
            if updated is not None:
                logger.info(
                    f"Customer {updated.id} updated: {', '.join(sorted(patch))}"
                )
                return updated

            logger.warning(
                f"Version conflict updating customer {existing.id} "
                f"(attempt {attempt + 1})"
            )
            existing = self.customer_repo.get_by_id(existing.id)

        if existing is None:
            return None
        raise ConflictError(
            f"Cliente {existing.id} foi modificado concorrentemente",
            rule="optimistic_concurrency",
        )


class GetCustomerService:
    """Use Case: Obter cliente por ID."""

    def __init__(self, customer_repo: CustomerRepository):
        self.customer_repo = customer_repo

    def execute(self, customer_id: str) -> CustomerOutputDTO:
        """
        Raises:
            EntityNotFoundError: Se cliente não existe
        """
        customer = self.customer_repo.get_by_id(customer_id)
        if not customer:
            raise EntityNotFoundError(
                f"Cliente {customer_id} não encontrado",
                entity_type="Customer",
                entity_id=customer_id,
            )
        return CustomerOutputDTO.from_entity(customer)


class FindCustomerByDocumentService:
    """
    Use Case: Buscar cliente pelo documento (sem criar).

    Example:
        output = service.execute(42, "DNI", " 12345678 ")
        output.document_number  # "12345678"
    """

    def __init__(self, customer_repo: CustomerRepository):
        self.customer_repo = customer_repo

    def execute(
        self,
        organization_id: int,
        document_type: str,
        document_number: str,
    ) -> Optional[CustomerOutputDTO]:
        """
        Returns:
            Cliente encontrado ou None

        Raises:
            ValidationError: Se organização ausente ou documento incompleto
        """
        CustomerEntity.validate_organization(organization_id)
        document_type, document_number = CustomerEntity.normalize_identity(
            document_type, document_number
        )
        if document_type is None:
            raise ValidationError("Documento é obrigatório", field="document_number")

        customer = self.customer_repo.get_by_document(
            organization_id, document_type, document_number
        )
        return CustomerOutputDTO.from_entity(customer) if customer else None


class FindCustomerByPhoneService:
    """Use Case: Buscar cliente pelo telefone (cadastro mais recente)."""

    def __init__(self, customer_repo: CustomerRepository):
        self.customer_repo = customer_repo

    def execute(self, organization_id: int, phone: str) -> Optional[CustomerOutputDTO]:
        CustomerEntity.validate_organization(organization_id)
        phone = normalize_text(phone)
        if not phone:
            raise ValidationError("Telefone é obrigatório", field="phone")

        customer = self.customer_repo.get_by_phone(organization_id, phone)
        return CustomerOutputDTO.from_entity(customer) if customer else None
