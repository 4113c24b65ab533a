# src/opflow/core/config/errors.py
"""
Exceções da camada de configuração do opflow.

Todas herdam de `ConfigError` e representam falhas estruturais de
arquivos de definição (ausência, formato, tipo raiz, conflito de merge),
nunca falhas de execução de Operations.
"""


class ConfigError(Exception):
    """Base para erros de carregamento e resolução de configuração."""


class ConfigFileNotFoundError(ConfigError):
    """
    O arquivo base de definições não existe.

    O arquivo base é obrigatório; apenas o override local é opcional.
    """


class UnsupportedConfigFormatError(ConfigError):
    """Extensão de arquivo não suportada (aceitos: .yaml, .yml, .json)."""


class InvalidConfigRootTypeError(ConfigError):
    """O conteúdo raiz do arquivo não é um mapa chave-valor."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo:
        - base:     {"pipelines": {"shout": {...}}}
        - override: {"pipelines": ["shout"]}

    Nenhum merge parcial é produzido.
    """
