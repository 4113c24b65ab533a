# src/opflow/core/config/merge.py
"""
Deep-merge determinístico de definições.

Política (v1), aplicada chave a chave:
    - dict + dict            → merge recursivo
    - None em qualquer lado  → vale o override
    - list + list            → override integral
    - escalares do mesmo tipo → vale o override
    - qualquer outro par     → ConfigTypeConflictError

Nenhum dos argumentos é mutado; o resultado não compartilha objetos
aninhados com eles.
"""

from copy import deepcopy
from typing import Any, Dict

from .errors import ConfigTypeConflictError


def _resolve(path: str, current: Any, incoming: Any) -> Any:
    if isinstance(current, dict) and isinstance(incoming, dict):
        return deep_merge(current, incoming, _path=path)
    if current is None or incoming is None or type(current) is type(incoming):
        return deepcopy(incoming)
    raise ConfigTypeConflictError(
        f"Conflito de tipo em '{path}': {type(current).__name__} (base) "
        f"vs {type(incoming).__name__} (override)"
    )


def deep_merge(base: Dict[str, Any], override: Dict[str, Any], *, _path: str = "") -> Dict[str, Any]:
    """
    Mescla `override` sobre `base`.

    Raises:
        ConfigTypeConflictError: algum dos lados não é dict, ou uma chave
            presente nos dois lados tem estruturas incompatíveis.
    """
    for side in (base, override):
        if not isinstance(side, dict):
            raise ConfigTypeConflictError(
                f"Deep-merge requer dicts em '{_path or '<raiz>'}', recebido: {type(side).__name__}"
            )

    merged: Dict[str, Any] = {key: deepcopy(value) for key, value in base.items()}
    for key, incoming in override.items():
        path = f"{_path}.{key}" if _path else str(key)
        merged[key] = _resolve(path, merged[key], incoming) if key in merged else deepcopy(incoming)
    return merged
