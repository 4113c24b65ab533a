# src/opflow/core/pipeline/stage.py
"""
Stage bindings de Pipelines.

Um stage liga um tipo de Operation a opções de configuração. Cada opção é
uma variante explícita:

    - Literal(value): valor estático
    - Computed(fn): calculado no momento em que o stage é instanciado,
      recebendo a instância do Pipeline em execução

    stage(Multiply, factor=computed(lambda pipeline: pipeline.factor), separator=" - ")

Valores simples passados a `stage()` viram `Literal`. Opções sempre
sobrepõem valores de mesmo nome repassados pelo stage anterior.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Type, Union

from ..exceptions import PipelineDefinitionError
from ..operation.base import Operation
from ..operation.functional import operation_from_function


@dataclass(frozen=True)
class Literal:
    value: Any

    def resolve(self, pipeline: Any) -> Any:
        return self.value


@dataclass(frozen=True)
class Computed:
    fn: Callable[[Any], Any]

    def resolve(self, pipeline: Any) -> Any:
        return self.fn(pipeline)


OptionValue = Union[Literal, Computed]


def computed(fn: Callable[[Any], Any]) -> Computed:
    """Marca uma opção como calculada contra o Pipeline em execução."""
    if not callable(fn):
        raise PipelineDefinitionError(f"computed() espera um callable, recebido: {type(fn).__name__}")
    return Computed(fn)


def _as_option(value: Any) -> OptionValue:
    if isinstance(value, (Literal, Computed)):
        return value
    return Literal(value)


@dataclass(frozen=True)
class Stage:
    """Tipo de Operation + opções de uma posição do Pipeline."""

    operation: Type[Operation]
    options: Mapping[str, OptionValue] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.operation.__name__

    def resolve_options(self, pipeline: Any) -> Dict[str, Any]:
        return {key: option.resolve(pipeline) for key, option in self.options.items()}

    def build(self, data: Any, pipeline: Any, forwarded: Optional[Mapping[str, Any]] = None) -> Operation:
        """
        Instancia a Operation do stage.

        `data` em lista/tupla é espalhado como argumentos posicionais; qualquer
        outro valor é um único argumento. Apenas tantos valores quanto o stage
        declara posicionalmente são mantidos. Valores nomeados repassados só
        chegam ao stage quando ele declara a propriedade correspondente.
        """
        args: Sequence[Any] = list(data) if isinstance(data, (list, tuple)) else [data]
        positional = [d.name for d in self.operation.positional_inputs()]
        schema = self.operation.property_schema

        values: Dict[str, Any] = dict(zip(positional, args))
        values.update({k: v for k, v in (forwarded or {}).items() if k in schema})
        values.update(self.resolve_options(pipeline))
        return self.operation(**values)


def stage(operation: Any, **options: Any) -> Stage:
    """Cria um Stage; funções comuns são convertidas em Operations."""
    if isinstance(operation, Stage):
        if not options:
            return operation
        return Stage(operation.operation, {**operation.options, **{k: _as_option(v) for k, v in options.items()}})

    op_type = operation_from_function(operation)
    unknown = [key for key in options if key not in op_type.property_schema]
    if unknown:
        raise PipelineDefinitionError(
            f"{op_type.__name__} não declara as opções: {', '.join(sorted(unknown))}",
            details={"operation": op_type.__name__, "unknown": sorted(unknown)},
        )
    return Stage(op_type, {key: _as_option(value) for key, value in options.items()})
