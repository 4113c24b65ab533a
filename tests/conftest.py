# tests/conftest.py
"""
Fixtures compartilhados para testes do opflow.

Este módulo define fixtures reutilizáveis que fornecem:
- um log ordenado para registrar a intercalação de hooks e corpo
- Operations mínimas (Upcase, Strip, Repeat) usadas por testes de Pipeline
- um OperationRegistry pré-populado para testes do builder declarativo
- YAMLs de definição (base + override local)

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas
    - Operations de fixture são definidas dentro da fixture, evitando
      estado compartilhado entre testes

Invariantes:
    - Nenhuma fixture executa Operations
    - Nenhuma fixture realiza I/O
    - Todas as fixtures são determinísticas

Limites explícitos:
    - Não substituir testes de integração
    - Não conter lógica condicional complexa

Este módulo existe como infraestrutura de teste e não
como validação funcional do framework.
"""

from datetime import datetime, timezone

import pytest


# =====================================================
# Ciclo de vida — log ordenado
# =====================================================

@pytest.fixture
def call_log() -> list:
    """
    Lista vazia usada como trace ordenado de hooks/corpo.

    Operations de teste acrescentam rótulos (ex.: "B1", "F", "H1") para
    que a ordem de execução possa ser verificada por igualdade de listas.
    """
    return []


@pytest.fixture
def fixed_ts() -> datetime:
    return datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc)


# =====================================================
# Operations mínimas para Pipelines
# =====================================================

@pytest.fixture
def text_operations():
    """
    Fábrica de Operations textuais mínimas.

    Retorna um dict com:
        - Strip: remove espaços das bordas do input posicional `text`
        - Upcase: converte `text` para maiúsculas
        - Repeat: repete `text` `times` vezes unindo com `separator`

    Decisões arquiteturais:
        - Import lazy de `Operation`/`Input`
        - Classes novas a cada teste (nenhum estado compartilhado)
    """
    from opflow.core.operation import Input, Operation

    class Strip(Operation):
        text = Input()

        def execute(self):
            return self.text.strip()

    class Upcase(Operation):
        text = Input()

        def execute(self):
            return self.text.upper()

    class Repeat(Operation):
        text = Input()
        times = Input(default=2, keyword=True)
        separator = Input(default=" ", keyword=True)

        def execute(self):
            return self.separator.join([self.text] * self.times)

    return {"Strip": Strip, "Upcase": Upcase, "Repeat": Repeat}


@pytest.fixture
def text_registry(text_operations):
    """OperationRegistry com `strip`, `upcase` e `repeat` registrados."""
    from opflow.core.operation import OperationRegistry

    registry = OperationRegistry()
    registry.add("strip", text_operations["Strip"])
    registry.add("upcase", text_operations["Upcase"])
    registry.add("repeat", text_operations["Repeat"])
    return registry


# =====================================================
# Definições declarativas (YAML)
# =====================================================

@pytest.fixture
def pipelines_base_yaml() -> str:
    """
    YAML base de definições de Pipelines.

    Representa o conteúdo típico de um `pipelines.yaml`, sobre o qual
    overrides locais são aplicados via deep-merge.
    """
    return """\
pipelines:
  shout:
    stages:
      - strip
      - operation: upcase
  echo:
    inputs:
      text: {}
      times: {keyword: true, default: 3}
    stages:
      - operation: repeat
        options:
          times: {$ref: times}
          separator: " - "
"""


@pytest.fixture
def pipelines_local_yaml() -> str:
    """YAML de override local: substitui integralmente a lista de stages de `shout`."""
    return """\
pipelines:
  shout:
    stages:
      - operation: upcase
      - operation: repeat
        options:
          times: 2
"""
