"""
Campos de patch em três estados.

Um campo de entrada pode estar:
- omitido (`UNSET`): mantém o valor armazenado
- limpo explicitamente (`None`): grava ausência
- definido (qualquer outro valor): grava o valor

No caminho de criação, `UNSET` e `None` viram ambos ausência explícita.
"""

from typing import Any, Dict, Iterable


class _Unset:
    """Sentinela para campo omitido pelo chamador."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (_Unset, ())


UNSET: Any = _Unset()


def is_set(value: Any) -> bool:
    """Retorna True se o campo foi informado (inclusive como None)."""
    return value is not UNSET


def provided_fields(source: Any, names: Iterable[str]) -> Dict[str, Any]:
    """
    Extrai de `source` apenas os campos informados.

    Args:
        source: Objeto (ex: DTO de entrada) com os atributos
        names: Nomes dos campos a considerar

    Returns:
        Dicionário campo → valor, sem os campos `UNSET`
    """
    result = {}
    for name in names:
        value = getattr(source, name, UNSET)
        if is_set(value):
            result[name] = value
    return result


def changed_fields(before: Dict[str, Any], after: Dict[str, Any]) -> Dict[str, Any]:
    """
    Calcula o patch mínimo entre dois snapshots.

    Returns:
        Campos de `after` cujo valor difere de `before`
    """
    return {
        key: value
        for key, value in after.items()
        if before.get(key, UNSET) != value
    }
