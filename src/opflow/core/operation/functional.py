# src/opflow/core/operation/functional.py
"""
Conversão de funções comuns em tipos de Operation de uso único.

A assinatura da função define os Inputs:
    - parâmetro posicional sem default       → Input posicional (obrigatório)
    - parâmetro posicional com default       → Input keyword com default
    - parâmetro keyword-only                 → Input keyword (obrigatório sem default)
    - *args / **kwargs                       → OperationDefinitionError

O corpo gerado chama a função com os valores correntes dos Inputs.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Dict, List, Optional, Type

from ..exceptions import OperationDefinitionError
from .base import Operation
from .inputs import MISSING, Input


def _class_name(fn: Callable[..., Any]) -> str:
    name = getattr(fn, "__name__", "") or ""
    if not name.isidentifier():
        return "LambdaOperation"
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part) or "FunctionOperation"


def _static_default(value: Any) -> Any:
    # Property trata defaults chamáveis como factory
    if callable(value):
        return lambda: value
    return value


def operation_from_function(fn: Callable[..., Any], *, name: Optional[str] = None) -> Type[Operation]:
    if isinstance(fn, type) and issubclass(fn, Operation):
        return fn
    if not callable(fn):
        raise OperationDefinitionError(
            f"Esperado callable ou tipo de Operation, recebido: {type(fn).__name__}"
        )

    signature = inspect.signature(fn)
    namespace: Dict[str, Any] = {}
    positional: List[str] = []
    keyword: List[str] = []

    for param in signature.parameters.values():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            raise OperationDefinitionError(
                f"{getattr(fn, '__name__', fn)!r}: parâmetros variádicos não podem virar Inputs",
                details={"parameter": param.name},
            )
        has_default = param.default is not param.empty
        if param.kind is param.KEYWORD_ONLY or has_default:
            namespace[param.name] = Input(
                _static_default(param.default) if has_default else MISSING,
                keyword=True,
                required=not has_default,
            )
            keyword.append(param.name)
        else:
            namespace[param.name] = Input()
            positional.append(param.name)

    def execute(self: Operation) -> Any:
        args = [getattr(self, p) for p in positional]
        kwargs = {k: getattr(self, k) for k in keyword}
        return fn(*args, **kwargs)

    namespace["execute"] = execute
    namespace["__doc__"] = getattr(fn, "__doc__", None)
    namespace["__module__"] = getattr(fn, "__module__", __name__)
    namespace["__wrapped__"] = staticmethod(fn)

    return type(Operation)(name or _class_name(fn), (Operation,), namespace)
