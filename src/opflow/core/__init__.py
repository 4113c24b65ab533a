# src/opflow/core/__init__.py
"""
Núcleo do opflow.

Subpacotes:
    - operation: Inputs, Property Store, hooks e máquina de estados
    - pipeline: composição de Operations em Pipelines
    - config: carregamento/merge/hash de definições declarativas
    - traceability: Execution Trace e Event Log
"""
