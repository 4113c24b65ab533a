# src/opflow/core/operation/store.py
"""
Property Store — armazenamento validado de atributos de Operations.

O Property Store é o colaborador que guarda, por instância, os valores
declarados via `Property`/`Input`. A validação é delegada ao pydantic:
cada tipo de Operation possui um `PropertySchema`, que gera (uma única vez)
um modelo pydantic com `validate_assignment=True`.

Comportamentos externamente visíveis:
    - required: `None` (ou ausência sem default) é rejeitado
    - accepts / annotation: valores fora do domínio declarado são rejeitados
    - converts: aplicado antes da validação, a cada atribuição
    - default: estático ou factory, avaliado por instância

Decisões arquiteturais:
    - O schema é imutável; `extend` copia e acrescenta (nunca muta o pai)
    - Toda falha de validação vira `InvalidPropertyError`
    - O campo `Any` preserva a identidade do objeto atribuído

Limites explícitos:
    - Não conhece Inputs posicionais nem argumentos de construção
    - Não executa hooks nem corpo de Operations
"""

from __future__ import annotations

from collections.abc import Collection
from typing import Annotated, Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple, Type

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    create_model,
)

from ..exceptions import InvalidPropertyError
from .inputs import Property


def _converter(prop: Property):
    converts = prop.converts

    def convert(value: Any) -> Any:
        if value is None or converts is None:
            return value
        if isinstance(converts, str):
            return getattr(value, converts)()
        return converts(value)

    return convert


def _checker(prop: Property):
    accepts = prop.accepts

    def check(value: Any) -> Any:
        if value is None:
            if prop.required:
                raise ValueError(f"'{prop.name}' é obrigatório")
            return value
        if accepts is None:
            return value
        if isinstance(accepts, type) or (
            isinstance(accepts, tuple) and accepts and all(isinstance(t, type) for t in accepts)
        ):
            ok = isinstance(value, accepts)
        elif callable(accepts):
            ok = bool(accepts(value))
        elif isinstance(accepts, Collection):
            ok = value in accepts
        else:
            ok = value == accepts
        if not ok:
            raise ValueError(f"'{prop.name}' não aceita o valor {value!r}")
        return value

    return check


def _field_definition(prop: Property) -> Tuple[Any, Any]:
    annotation = prop.annotation
    if not prop.required and annotation is not Any:
        annotation = Optional[annotation]
    annotation = Annotated[
        annotation,
        BeforeValidator(_converter(prop)),
        AfterValidator(_checker(prop)),
    ]

    if prop.has_default:
        if callable(prop.default):
            return annotation, Field(default_factory=prop.default, validate_default=True)
        return annotation, Field(default=prop.default, validate_default=True)
    if prop.required:
        return annotation, Field(...)
    return annotation, Field(default=None)


def _flatten(exc: ValidationError) -> Dict[str, Any]:
    return {
        "errors": [
            {
                "property": ".".join(str(p) for p in err.get("loc", ())),
                "message": err.get("msg"),
                "type": err.get("type"),
            }
            for err in exc.errors()
        ]
    }


class PropertySchema:
    """
    Conjunto ordenado e imutável de declarações de propriedades de um tipo.

    `extend` é o único caminho para derivar o schema de um subtipo: copia as
    declarações herdadas e acrescenta (ou substitui, mantendo a posição) as
    declarações próprias.
    """

    def __init__(self, owner: str = "Operation", properties: Iterable[Tuple[str, Property]] = ()) -> None:
        self._owner = owner
        self._properties: Tuple[Tuple[str, Property], ...] = tuple(properties)
        self._model: Optional[Type[BaseModel]] = None

    def extend(self, owner: str, properties: Iterable[Tuple[str, Property]]) -> "PropertySchema":
        merged: Dict[str, Property] = dict(self._properties)
        for name, prop in properties:
            merged[name] = prop
        return PropertySchema(owner, merged.items())

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self._properties)

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def __iter__(self) -> Iterator[Tuple[str, Property]]:
        return iter(self._properties)

    def __len__(self) -> int:
        return len(self._properties)

    def __getitem__(self, name: str) -> Property:
        for key, prop in self._properties:
            if key == name:
                return prop
        raise KeyError(name)

    @property
    def model(self) -> Type[BaseModel]:
        if self._model is None:
            fields = {name: _field_definition(prop) for name, prop in self._properties}
            self._model = create_model(
                f"{self._owner}Properties",
                __config__=ConfigDict(
                    validate_assignment=True,
                    arbitrary_types_allowed=True,
                    extra="forbid",
                    protected_namespaces=(),
                ),
                **fields,
            )
        return self._model

    def instantiate(self, values: Mapping[str, Any]) -> "PropertyStore":
        return PropertyStore(self, values)


class PropertyStore:
    """Valores de propriedades de uma instância, com leitura e escrita validadas."""

    def __init__(self, schema: PropertySchema, values: Mapping[str, Any]) -> None:
        self._schema = schema
        try:
            self._model = schema.model(**dict(values))
        except ValidationError as exc:
            raise InvalidPropertyError(
                f"Valores inválidos para {schema.model.__name__}",
                details=_flatten(exc),
                hint="Verifique required/accepts/converts das propriedades declaradas",
            ) from exc

    def get(self, name: str) -> Any:
        return getattr(self._model, name)

    def set(self, name: str, value: Any) -> None:
        try:
            setattr(self._model, name, value)
        except ValidationError as exc:
            raise InvalidPropertyError(
                f"Valor inválido para a propriedade '{name}'",
                details=_flatten(exc),
            ) from exc

    def is_set(self, name: str) -> bool:
        """True quando o valor veio de atribuição explícita (não de default)."""
        return name in self._model.model_fields_set

    def values(self) -> Dict[str, Any]:
        return {name: getattr(self._model, name) for name in self._schema.names}
