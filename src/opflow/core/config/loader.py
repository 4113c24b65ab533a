# src/opflow/core/config/loader.py
"""
Leitura de arquivos de definição de Pipelines.

Um conjunto de definições é resolvido a partir de dois arquivos:

    pipelines.yaml         → base obrigatória
    pipelines.local.yaml   → overrides opcionais (ignorado se não existir)

A extensão escolhe o parser: `.yaml`/`.yml` via PyYAML (`safe_load`) e
`.json` via o módulo `json`. O documento lido precisa ter um mapa como raiz;
um documento vazio vale `{}`.

Invariantes:
    - O retorno é sempre um `dict` novo
    - O override local nunca muta a base (ver `deep_merge`)
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

import yaml  # PyYAML

from .errors import (
    ConfigFileNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge

PathLike = Union[str, Path]

_PARSERS: Dict[str, Callable[[str], Any]] = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.loads,
}


def read_definitions(path: PathLike) -> Dict[str, Any]:
    """
    Lê um único arquivo de definições.

    Raises:
        ConfigFileNotFoundError: o arquivo não existe.
        UnsupportedConfigFormatError: extensão fora de `.yaml`, `.yml`, `.json`.
        InvalidConfigRootTypeError: a raiz do documento não é um mapa.
    """
    path = Path(path)
    parse = _PARSERS.get(path.suffix.lower())
    if parse is None:
        raise UnsupportedConfigFormatError(
            f"Formato não suportado: {path.suffix or '(sem extensão)'} ({path.name})"
        )
    if not path.is_file():
        raise ConfigFileNotFoundError(f"Arquivo de definições não encontrado: {path}")

    document = parse(path.read_text(encoding="utf-8"))
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise InvalidConfigRootTypeError(
            f"{path.name}: a raiz deve ser um mapa, recebido {type(document).__name__}"
        )
    return document


def load_config(
    *,
    base_path: PathLike,
    local_path: Optional[PathLike] = None,
) -> Dict[str, Any]:
    """
    Resolve a configuração efetiva (base + override local).

    Raises:
        ConfigTypeConflictError: base e override divergem estruturalmente.
    """
    resolved = read_definitions(base_path)
    if local_path is None or not Path(local_path).is_file():
        return resolved
    return deep_merge(resolved, read_definitions(local_path))
