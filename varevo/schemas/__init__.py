"""
数据模型包 - 分模块定义的 Pydantic 数据结构
"""

from .base import now_iso, sha256_text
from .annotations import (
    AnnotationNode,
    AnnotationStyle,
    BlockNode,
    DirectoryNode,
    FileNode,
)
from .variants import Configuration, Variant
from .ground_truth import (
    AnnotationGroundTruth,
    BlockMatch,
    GroundTruth,
    LineRun,
    SkippedFile,
)
from .history import (
    Commit,
    EvolutionStep,
    ExtractionStatus,
    VariabilityHistory,
)

__all__ = [
    "now_iso",
    "sha256_text",
    "AnnotationNode",
    "AnnotationStyle",
    "BlockNode",
    "DirectoryNode",
    "FileNode",
    "Configuration",
    "Variant",
    "AnnotationGroundTruth",
    "BlockMatch",
    "GroundTruth",
    "LineRun",
    "SkippedFile",
    "Commit",
    "EvolutionStep",
    "ExtractionStatus",
    "VariabilityHistory",
]
