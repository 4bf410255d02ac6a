"""
Data Transfer Objects (DTOs) do Domínio de Clientes.

Campos de entrada usam patch em três estados (ver `src.core.shared.patch`):
- UNSET (padrão): campo omitido, valor armazenado é mantido
- None: limpar o valor armazenado
- valor: gravar o valor
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from src.core.shared.patch import UNSET, provided_fields

from .entities import CustomerEntity, CONTACT_FIELDS


# =============================================================================
# INPUT DTOs (Entrada)
# =============================================================================

@dataclass(frozen=True)
class ResolveCustomerInputDTO:
    """
    DTO de entrada para resolver (buscar ou criar) cliente no checkout.

    Attributes:
        organization_id: Organização dona do cliente (obrigatório)
        document_type / document_number: Identidade legal (ambos ou nenhum)
        demais campos: contato e endereço de entrega, todos opcionais
    """

    organization_id: int
    document_type: Any = UNSET
    document_number: Any = UNSET
    full_name: Any = UNSET
    email: Any = UNSET
    phone: Any = UNSET
    delivery_street: Any = UNSET
    delivery_street_number: Any = UNSET
    delivery_apartment: Any = UNSET
    delivery_city: Any = UNSET
    delivery_region: Any = UNSET
    delivery_postal_code: Any = UNSET
    delivery_country: Any = UNSET
    delivery_office: Any = UNSET

    @classmethod
    def from_dict(cls, organization_id: int, data: dict) -> "ResolveCustomerInputDTO":
        """
        Constrói o DTO a partir de um payload, preservando chaves ausentes
        como UNSET e chaves com `null` como limpeza explícita.
        """
        allowed = ("document_type", "document_number") + CONTACT_FIELDS
        return cls(
            organization_id=organization_id,
            **{key: data[key] for key in allowed if key in data},
        )

    def contact_changes(self) -> dict:
        """Campos de contato/entrega explicitamente informados."""
        return provided_fields(self, CONTACT_FIELDS)


# =============================================================================
# OUTPUT DTOs (Saída)
# =============================================================================

@dataclass
class CustomerOutputDTO:
    """DTO de saída com dados do cliente."""

    id: str
    organization_id: int
    document_type: Optional[str]
    document_number: Optional[str]
    full_name: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    delivery_address: dict
    created_at: datetime
    updated_at: datetime
    version: int

    @classmethod
    def from_entity(cls, entity: CustomerEntity) -> "CustomerOutputDTO":
        return cls(
            id=entity.id,
            organization_id=entity.organization_id,
            document_type=entity.document_type,
            document_number=entity.document_number,
            full_name=entity.full_name,
            email=entity.email,
            phone=entity.phone,
            delivery_address=entity.delivery_address,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            version=entity.version,
        )

    def to_dict(self) -> dict:
        """Converte para dicionário (útil para JSON)."""
        return {
            "id": self.id,
            "organization_id": self.organization_id,
            "document_type": self.document_type,
            "document_number": self.document_number,
            "full_name": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "delivery_address": dict(self.delivery_address),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "version": self.version,
        }
