# src/opflow/core/config/hashing.py
"""
Hash canônico de definições.

O hash representa a identidade estrutural de uma definição de Pipeline
(ou de qualquer configuração resolvida) e é anexado ao tipo construído
como `definition_hash`.

Política (v1):
    - JSON canônico: chaves ordenadas, separadores compactos, UTF-8
    - SHA-256, hexdigest de 64 caracteres
    - independente da ordem original das chaves
"""

import hashlib
import json
from typing import Any, Dict


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Hash SHA-256 determinístico de um dicionário de configuração.

    Raises:
        TypeError: se `config` não for um dict.
    """
    if not isinstance(config, dict):
        raise TypeError(f"Config para hashing deve ser dict, recebido: {type(config).__name__}")

    canonical = json.dumps(config, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
