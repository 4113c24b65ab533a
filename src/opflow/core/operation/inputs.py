# src/opflow/core/operation/inputs.py
"""
Declaração de propriedades e Inputs de Operations.

Este módulo define os descritores usados no corpo de uma Operation para
declarar atributos armazenados no Property Store:

    class Greet(Operation):
        name = Input()
        greeting = Input(default="hello", keyword=True)
        punctuation = Property(default="!")

Componentes:
    - Property        → atributo armazenado (default, required, accepts, converts)
    - Input           → Property ligada a argumentos de construção
    - InputDescriptor → registro imutável (nome, tipo, declaração)

Decisões arquiteturais:
    - O descritor não guarda valores; leitura e escrita delegam ao
      Property Store da instância
    - Inputs posicionais são sempre obrigatórios
    - Um default chamável é tratado como factory (avaliado por instância)

Limites explícitos:
    - Não valida valores (responsabilidade do Property Store)
    - Não faz ligação de argumentos (ver `binding`)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from .types import InputKind


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


Accepts = Union[type, tuple, Callable[[Any], bool], Any]
Converts = Union[Callable[[Any], Any], str]


class Property:
    """
    Atributo declarado de uma Operation, armazenado no Property Store.

    Args:
        default: valor estático ou factory sem argumentos.
        required: rejeita `None` (na construção e em atribuições).
        accepts: tipo (ou tupla de tipos), predicado, ou coleção de valores válidos.
        converts: chamável (ou nome de método do valor) aplicado a cada atribuição.
        annotation: tipo pydantic do campo (default: Any, preserva identidade).
    """

    kind: Optional[InputKind] = None

    def __init__(
        self,
        default: Any = MISSING,
        *,
        required: bool = False,
        accepts: Optional[Accepts] = None,
        converts: Optional[Converts] = None,
        annotation: Any = Any,
        doc: Optional[str] = None,
    ) -> None:
        self.default = default
        self.required = required
        self.accepts = accepts
        self.converts = converts
        self.annotation = annotation
        self.name: Optional[str] = None
        self.__doc__ = doc

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING

    @property
    def is_input(self) -> bool:
        return self.kind is not None

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        return instance._properties.get(self.name)

    def __set__(self, instance: Any, value: Any) -> None:
        instance._properties.set(self.name, value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, required={self.required!r})"


class Input(Property):
    """
    Property ligada aos argumentos de construção da Operation.

    Inputs posicionais (default) consomem argumentos da esquerda para a
    direita e são obrigatórios. Inputs `keyword=True` vêm de argumentos
    nomeados (ou de um mapping final) e podem ser opcionais.
    """

    def __init__(
        self,
        default: Any = MISSING,
        *,
        keyword: bool = False,
        required: Optional[bool] = None,
        accepts: Optional[Accepts] = None,
        converts: Optional[Converts] = None,
        annotation: Any = Any,
        doc: Optional[str] = None,
    ) -> None:
        if required is None:
            required = not keyword
        super().__init__(
            default,
            required=required,
            accepts=accepts,
            converts=converts,
            annotation=annotation,
            doc=doc,
        )
        self.kind = InputKind.KEYWORD if keyword else InputKind.POSITIONAL

    @property
    def positional(self) -> bool:
        return self.kind is InputKind.POSITIONAL

    @property
    def keyword(self) -> bool:
        return self.kind is InputKind.KEYWORD


@dataclass(frozen=True)
class InputDescriptor:
    """Input declarado: nome, forma de ligação e declaração no Property Store."""

    name: str
    kind: InputKind
    property: Property

    @property
    def positional(self) -> bool:
        return self.kind is InputKind.POSITIONAL

    @property
    def keyword(self) -> bool:
        return self.kind is InputKind.KEYWORD

    @classmethod
    def of(cls, prop: Input) -> "InputDescriptor":
        return cls(name=prop.name, kind=prop.kind, property=prop)
