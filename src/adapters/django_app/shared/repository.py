"""
Base Repository - Funcionalidade comum para repositórios Django.

Fornece a implementação padrão das operações que o Core exige de
todo repositório versionado:
- get_by_id
- insert (violação de unicidade → DuplicateKeyError)
- update_if_version (UPDATE ... WHERE id = ? AND version = ?)

Erros do banco são traduzidos para exceções de domínio:
    IntegrityError → DuplicateKeyError
    DatabaseError (OperationalError, etc) → StorageError
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Generic, Optional, Type, TypeVar
import logging

from django.db import DatabaseError, IntegrityError, models, transaction
from django.db.models import F
from django.utils import timezone

from src.core.shared.exceptions import DuplicateKeyError, StorageError

logger = logging.getLogger(__name__)

# Type variables
T = TypeVar("T")  # Entity type
M = TypeVar("M", bound=models.Model)  # Model type


@contextmanager
def storage_errors(operation: str):
    """
    Traduz erros de infraestrutura do Django para StorageError.

    Example:
        with storage_errors("get payment"):
            PaymentModel.objects.get(id=payment_id)
    """
    try:
        yield
    except IntegrityError:
        raise
    except DatabaseError as e:
        logger.error(f"Storage failure during {operation}: {e}")
        raise StorageError(f"Falha de armazenamento em {operation}: {e}")


class VersionedRepository(ABC, Generic[T, M]):
    """
    Classe base abstrata para repositórios com concorrência otimista.

    Type Parameters:
        T: Tipo da entidade de domínio
        M: Tipo do Model Django

    Example:
        class DjangoPaymentRepository(VersionedRepository[PaymentEntity, PaymentModel]):
            model_class = PaymentModel
            entity_name = "payment"

            def to_entity(self, model):
                return PaymentMapper.to_entity(model)

            def to_model(self, entity):
                return PaymentMapper.to_model(entity)
    """

    # Classe do model Django (definir na subclasse)
    model_class: Type[M]

    # Nome usado em logs e mensagens
    entity_name: str = "entity"

    @abstractmethod
    def to_entity(self, model: M) -> T:
        """Converte Model Django para Entity de domínio."""
        raise NotImplementedError

    @abstractmethod
    def to_model(self, entity: T) -> M:
        """Converte Entity de domínio para Model Django (não salvo)."""
        raise NotImplementedError

    def to_db_patch(self, patch: Dict[str, Any]) -> Dict[str, Any]:
        """Converte valores do patch de domínio para colunas (override opcional)."""
        return dict(patch)

    def get_by_id(self, entity_id: str) -> Optional[T]:
        """
        Busca entidade por ID.

        Returns:
            Entidade encontrada ou None
        """
        with storage_errors(f"get {self.entity_name}"):
            model = self.model_class.objects.filter(id=entity_id).first()
        return self.to_entity(model) if model else None

    def insert(self, entity: T) -> T:
        """
        Insere entidade nova.

        Executa em savepoint próprio: uma violação de unicidade não
        invalida a transação externa do Unit of Work.

        Raises:
            DuplicateKeyError: Se restrição única violada
            StorageError: Se banco indisponível
        """
        model = self.to_model(entity)
        try:
            with storage_errors(f"insert {self.entity_name}"):
                with transaction.atomic():
                    model.save(force_insert=True)
        except IntegrityError as e:
            logger.info(f"Duplicate {self.entity_name} on insert: {e}")
            raise DuplicateKeyError(
                f"{self.entity_name} viola restrição única: {e}",
                key=self.entity_name,
            )

        logger.debug(f"{self.model_class.__name__} inserted: {model.pk}")
        return self.to_entity(model)

    def update_if_version(
        self,
        entity_id: str,
        expected_version: int,
        patch: Dict[str, Any],
    ) -> Optional[T]:
        """
        Atualização condicional atômica (compare-and-swap pela versão).

        Returns:
            Entidade atualizada ou None se a versão mudou / registro sumiu
        """
        values = self.to_db_patch(patch)
        values.setdefault("updated_at", timezone.now())

        try:
            with storage_errors(f"update {self.entity_name}"):
                with transaction.atomic():
                    updated = self.model_class.objects.filter(
                        id=entity_id,
                        version=expected_version,
                    ).update(version=F("version") + 1, **values)
        except IntegrityError as e:
            raise DuplicateKeyError(
                f"{self.entity_name} viola restrição única: {e}",
                key=self.entity_name,
            )

        if updated == 0:
            logger.debug(
                f"Conditional update missed for {self.entity_name} {entity_id} "
                f"(expected version {expected_version})"
            )
            return None

        return self.get_by_id(entity_id)
