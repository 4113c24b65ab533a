# src/opflow/core/pipeline/__init__.py
"""Composição de Operations em Pipelines (stages, composição e builder declarativo)."""

from .builder import build_pipeline, load_pipelines
from .pipeline import Pipeline
from .stage import Computed, Literal, Stage, computed, stage

__all__ = [
    "Computed",
    "Literal",
    "Pipeline",
    "Stage",
    "build_pipeline",
    "computed",
    "load_pipelines",
    "stage",
]
