# src/opflow/core/operation/registry.py
"""
Registro nomeado de tipos de Operation.

Este módulo define o `OperationRegistry`, responsável por associar nomes
estáveis a tipos de Operation, para que Pipelines possam ser declarados
de forma textual (YAML/JSON) e resolvidos pelo builder.

O registry atua como uma camada de proteção antecipada, garantindo que:
    - cada Operation possua um nome válido
    - não existam nomes duplicados
    - a ordem de registro seja preservada explicitamente

Decisões arquiteturais:
    - Funções comuns são convertidas em Operations no momento do registro
    - Erros estruturais são tratados como falhas fatais
    - A ordem de registro é mantida separadamente da estrutura de armazenamento

Invariantes:
    - Cada nome registrado é único
    - `list()` reflete exatamente a ordem de registro

Limites explícitos:
    - Não executa Operations
    - Não monta Pipelines (ver `opflow.core.pipeline.builder`)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Type

from ..exceptions import DuplicateOperationError, OperationNotRegisteredError
from .base import Operation
from .functional import operation_from_function


@dataclass
class OperationRegistry:
    """
    Registro canônico de tipos de Operation por nome.

    Uso:
        registry = OperationRegistry()
        registry.add("upcase", Upcase)

        @registry.register("strip")
        def strip(text):
            return text.strip()
    """

    _operations: Dict[str, Type[Operation]] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)

    def add(self, name: str, operation: Any) -> Type[Operation]:
        if not isinstance(name, str) or not name.strip():
            raise ValueError("operation name must be a non-empty string")

        if name in self._operations:
            raise DuplicateOperationError(
                f"Duplicate operation name: {name}",
                details={"name": name},
            )

        op_type = operation_from_function(operation)
        self._operations[name] = op_type
        self._order.append(name)
        return op_type

    def register(self, name: str) -> Callable[[Any], Any]:
        """Decorator: registra a classe/função e a retorna inalterada."""

        def decorate(operation: Any) -> Any:
            self.add(name, operation)
            return operation

        return decorate

    def get(self, name: str) -> Type[Operation]:
        try:
            return self._operations[name]
        except KeyError:
            raise OperationNotRegisteredError(
                f"Operation not registered: {name}",
                details={"name": name, "registered": list(self._order)},
            ) from None

    def __contains__(self, name: object) -> bool:
        return name in self._operations

    def names(self) -> List[str]:
        return list(self._order)

    def list(self) -> List[Type[Operation]]:
        return [self._operations[name] for name in self._order]
