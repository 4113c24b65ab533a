# src/opflow/core/operation/binding.py
"""
Ligação de argumentos de construção aos Inputs declarados.

Regras:
    - os primeiros argumentos posicionais ligam os Inputs posicionais,
      da esquerda para a direita
    - um único `Mapping` restante é tratado como argumentos nomeados
    - qualquer outro argumento restante é erro de aridade
    - argumentos nomeados do Python sobrepõem o mapping final
    - um Input posicional pode ser fornecido por nome; se não vier de
      nenhuma forma, a construção falha
    - nomes desconhecidos (fora do Property Store) são rejeitados

Todas as falhas são `InvalidArgumentsError`, levantadas antes de qualquer
hook ou corpo ser executado.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Collection, Dict, Sequence

from ..exceptions import InvalidArgumentsError
from .inputs import InputDescriptor


def bind_arguments(
    descriptors: Sequence[InputDescriptor],
    args: Sequence[Any],
    kwargs: Mapping,
    *,
    known: Collection[str],
    operation: str,
) -> Dict[str, Any]:
    positional = [d.name for d in descriptors if d.positional]

    values: Dict[str, Any] = dict(zip(positional, args))
    leftover = list(args[len(positional):])

    options: Dict[str, Any] = {}
    if leftover:
        if len(leftover) == 1 and isinstance(leftover[0], Mapping):
            options.update(leftover[0])
        else:
            raise InvalidArgumentsError(
                f"{operation} recebeu argumentos posicionais em excesso",
                details={
                    "operation": operation,
                    "expected": len(positional),
                    "received": len(args),
                },
                hint="Passe opções nomeadas como keyword arguments ou como um único dict final",
            )
    options.update(kwargs)

    non_str = [k for k in options if not isinstance(k, str)]
    if non_str:
        raise InvalidArgumentsError(
            f"{operation} recebeu chaves de opção não textuais",
            details={"operation": operation, "keys": [repr(k) for k in non_str]},
        )

    unknown = [k for k in options if k not in known]
    if unknown:
        raise InvalidArgumentsError(
            f"{operation} não declara: {', '.join(sorted(unknown))}",
            details={"operation": operation, "unknown": sorted(unknown), "known": list(known)},
        )

    duplicated = [k for k in options if k in values]
    if duplicated:
        raise InvalidArgumentsError(
            f"{operation} recebeu múltiplos valores para: {', '.join(duplicated)}",
            details={"operation": operation, "duplicated": duplicated},
        )

    values.update(options)

    missing = [name for name in positional if name not in values]
    if missing:
        raise InvalidArgumentsError(
            f"{operation} exige o(s) input(s) posicional(is): {', '.join(missing)}",
            details={"operation": operation, "missing": missing},
        )

    return values
