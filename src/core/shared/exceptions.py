"""
Exceções de Domínio do Checkout Core.

Este módulo define exceções específicas do domínio que permitem
comunicar erros de forma clara e tipada entre as camadas.

Hierarquia:
    DomainException (base)
    ├── ValidationError (entrada malformada, nada foi escrito)
    ├── EntityNotFoundError (entidade não existe)
    ├── ConflictError (invariante de estado seria violada)
    ├── InvalidTransitionError (transição ilegal a partir do estado atual)
    ├── DuplicateKeyError (violação de chave única no armazenamento)
    ├── StorageError (falha transitória de infraestrutura)
    └── GatewayError (falha do gateway de pagamento externo)

Mapeamento para a camada de API (fora deste core):
    ValidationError, InvalidTransitionError → erro do cliente
    ConflictError → conflito (re-buscar e decidir)
    StorageError → erro do servidor (retry com backoff)
"""


class DomainException(Exception):
    """
    Exceção base para todos os erros de domínio.

    Todas as exceções específicas do domínio devem herdar desta classe.
    Isso permite capturar qualquer erro de domínio de forma genérica.

    Example:
        try:
            service.execute(input_dto)
        except DomainException as e:
            logger.error(f"Erro de domínio: {e}")
    """

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        """Serializa exceção para dicionário (útil para APIs)."""
        return {
            "error": self.code,
            "message": self.message,
        }


class ValidationError(DomainException):
    """
    Erro de validação de dados de entrada.

    Lançada antes de qualquer escrita. O chamador deve corrigir
    os dados e reenviar.

    Example:
        if document_number and not document_type:
            raise ValidationError(
                "Tipo de documento é obrigatório", field="document_type"
            )
    """

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class EntityNotFoundError(DomainException):
    """
    Entidade não encontrada no repositório.

    Example:
        payment = repo.get_by_id(payment_id)
        if not payment:
            raise EntityNotFoundError(f"Pagamento {payment_id} não encontrado")
    """

    def __init__(self, message: str, entity_type: str = None, entity_id: str = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message, "ENTITY_NOT_FOUND")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.entity_type:
            result["entity_type"] = self.entity_type
        if self.entity_id:
            result["entity_id"] = self.entity_id
        return result


class ConflictError(DomainException):
    """
    Invariante de estado seria violada.

    Lançada quando:
    - já existe pagamento não terminal para o carrinho
    - um pagamento terminal recebe um estado terminal diferente
    - a escrita condicional falhou duas vezes seguidas (concorrência)

    O chamador deve re-buscar a entidade e decidir.
    """

    def __init__(self, message: str, rule: str = None):
        self.rule = rule
        super().__init__(message, "CONFLICT")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.rule:
            result["rule"] = self.rule
        return result


class InvalidTransitionError(DomainException):
    """
    Transição de estado não permitida a partir do estado atual.

    Sempre indica erro do chamador; nunca é re-tentada automaticamente.

    Example:
        payment.submit_proof("https://x/proof.jpg")  # pagamento webpay
        # InvalidTransitionError
    """

    def __init__(self, message: str, current_status: str = None, target_status: str = None):
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(message, "INVALID_TRANSITION")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.current_status:
            result["current_status"] = self.current_status
        if self.target_status:
            result["target_status"] = self.target_status
        return result


class DuplicateKeyError(DomainException):
    """
    Violação de restrição de unicidade no armazenamento.

    Lançada pelos repositórios em `insert`. Os serviços tratam este
    sinal (corrida de criação) e nunca o propagam cru ao chamador.
    """

    def __init__(self, message: str, key: str = None):
        self.key = key
        super().__init__(message, "DUPLICATE_KEY")


class StorageError(DomainException):
    """
    Falha transitória de infraestrutura (banco indisponível, timeout).

    Segura para retry com backoff pelo chamador.
    """

    def __init__(self, message: str):
        super().__init__(message, "STORAGE_ERROR")


class GatewayError(DomainException):
    """Falha ao comunicar com o gateway de pagamento externo."""

    def __init__(self, message: str):
        super().__init__(message, "GATEWAY_ERROR")
