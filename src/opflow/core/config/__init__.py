# src/opflow/core/config/__init__.py

"""
Camada de configuração do opflow.

Este pacote carrega, mescla e identifica arquivos de definição de
Pipelines (YAML ou JSON). A configuração é:
    - declarativa
    - determinística
    - explicitamente versionável

Responsabilidades do pacote:
    - Carregamento de arquivos (base obrigatória + override local opcional)
    - Resolução da configuração final via deep-merge determinístico
    - Hash canônico de definições para rastreabilidade

Limites explícitos:
    - Não resolve nomes de Operations (ver `opflow.core.pipeline.builder`)
    - Não executa Pipelines
"""

from .errors import (
    ConfigError,
    ConfigFileNotFoundError,
    ConfigTypeConflictError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import load_config
from .merge import deep_merge

__all__ = [
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigTypeConflictError",
    "InvalidConfigRootTypeError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "deep_merge",
    "load_config",
]
