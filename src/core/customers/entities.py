"""
Entidades do Domínio de Clientes.

Entidades:
- CustomerEntity: Cliente de uma organização, identificado pelo
  documento legal (tipo + número), não por IDs externos

Regras de Negócio Encapsuladas:
- Tipo e número de documento andam juntos (ambos ou nenhum)
- Strings em branco são normalizadas para ausência
- Documento nunca muda após a criação
- Campos de contato/entrega: a submissão mais recente vence
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple
import uuid

from src.core.shared.exceptions import ValidationError
from src.core.shared.patch import UNSET


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_text(value: Any) -> Any:
    """Remove espaços e converte string vazia em None (preserva UNSET)."""
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


# Campos atualizáveis a cada checkout
CONTACT_FIELDS: Tuple[str, ...] = (
    "full_name",
    "email",
    "phone",
    "delivery_street",
    "delivery_street_number",
    "delivery_apartment",
    "delivery_city",
    "delivery_region",
    "delivery_postal_code",
    "delivery_country",
    "delivery_office",
)

DELIVERY_FIELDS: Tuple[str, ...] = tuple(
    name for name in CONTACT_FIELDS if name.startswith("delivery_")
)


@dataclass
class CustomerEntity:
    """
    Entidade de Domínio: Cliente.

    Invariantes:
    - No máximo um cliente por (organization_id, document_type,
      document_number) quando ambos os campos de documento existem
    - Sem documento, o cliente não tem chave de identidade estável
    - `version` cresce a cada escrita (concorrência otimista)

    Example:
        customer = CustomerEntity.create(
            organization_id=42,
            document_type="DNI",
            document_number="12345678",
            full_name="Ana Pérez",
        )
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    organization_id: int = 0

    # Identidade
    document_type: Optional[str] = None
    document_number: Optional[str] = None

    # Contato
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    # Endereço de entrega
    delivery_street: Optional[str] = None
    delivery_street_number: Optional[str] = None
    delivery_apartment: Optional[str] = None
    delivery_city: Optional[str] = None
    delivery_region: Optional[str] = None
    delivery_postal_code: Optional[str] = None
    delivery_country: Optional[str] = None
    delivery_office: Optional[str] = None

    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    version: int = 1

    @classmethod
    def create(
        cls,
        organization_id: int,
        document_type: Optional[str] = None,
        document_number: Optional[str] = None,
        **contact: Any,
    ) -> "CustomerEntity":
        """
        Factory method para criar cliente.

        Todo campo não informado (UNSET) é gravado como ausência explícita.

        Raises:
            ValidationError: Se organização ausente, documento incompleto
                ou campo desconhecido
        """
        cls.validate_organization(organization_id)
        document_type, document_number = cls.normalize_identity(
            document_type, document_number
        )

        unknown = set(contact) - set(CONTACT_FIELDS)
        if unknown:
            raise ValidationError(
                f"Campos desconhecidos: {', '.join(sorted(unknown))}",
                field=sorted(unknown)[0],
            )

        values = {}
        for name in CONTACT_FIELDS:
            value = normalize_text(contact.get(name, UNSET))
            values[name] = None if value is UNSET else value

        return cls(
            organization_id=organization_id,
            document_type=document_type,
            document_number=document_number,
            **values,
        )

    @staticmethod
    def validate_organization(organization_id: Any) -> None:
        if organization_id is None or organization_id == "":
            raise ValidationError(
                "Organização é obrigatória",
                field="organization_id",
            )

    @staticmethod
    def normalize_identity(
        document_type: Any,
        document_number: Any,
    ) -> Tuple[Optional[str], Optional[str]]:
        """
        Normaliza o par de documento.

        Returns:
            (document_type, document_number), ambos preenchidos ou ambos None

        Raises:
            ValidationError: Se apenas um dos dois foi informado
        """
        document_type = normalize_text(document_type)
        document_number = normalize_text(document_number)
        if document_type is UNSET:
            document_type = None
        if document_number is UNSET:
            document_number = None

        if document_number is not None and document_type is None:
            raise ValidationError(
                "Tipo de documento é obrigatório quando o número é informado",
                field="document_type",
            )
        if document_type is not None and document_number is None:
            raise ValidationError(
                "Número de documento é obrigatório quando o tipo é informado",
                field="document_number",
            )
        return document_type, document_number

    @property
    def has_identity(self) -> bool:
        """Verifica se o cliente tem chave de identidade por documento."""
        return self.document_type is not None and self.document_number is not None

    @property
    def identity_key(self) -> Optional[Tuple[int, str, str]]:
        if not self.has_identity:
            return None
        return (self.organization_id, self.document_type, self.document_number)

    @property
    def delivery_address(self) -> Dict[str, Optional[str]]:
        """Endereço de entrega sem o prefixo `delivery_`."""
        return {
            name[len("delivery_"):]: getattr(self, name)
            for name in DELIVERY_FIELDS
        }

    def contact_record(self) -> Dict[str, Any]:
        """Snapshot dos campos atualizáveis (para cálculo de patch)."""
        return {name: getattr(self, name) for name in CONTACT_FIELDS}

    def __repr__(self) -> str:
        return (
            f"CustomerEntity("
            f"id={self.id[:8]}..., "
            f"organization_id={self.organization_id}, "
            f"document={self.document_type}:{self.document_number}, "
            f"version={self.version}"
            f")"
        )

    def __eq__(self, other: object) -> bool:
        """Comparação por ID (identidade de entidade)."""
        if not isinstance(other, CustomerEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
