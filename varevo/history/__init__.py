"""
历史模块 - 演化历史排序、数据集加载与提交检出
"""

from .cache import LazyTree
from .checkout import GitCheckout
from .dataset import VariabilityCommit, VariabilityDataset
from .sequencer import (
    BranchBoundarySequences,
    LongestNonOverlappingSequences,
    SequenceExtractor,
    build_commit_graph,
    extractor_from_name,
    sequence_history,
)

__all__ = [
    "LazyTree",
    "GitCheckout",
    "VariabilityCommit",
    "VariabilityDataset",
    "SequenceExtractor",
    "LongestNonOverlappingSequences",
    "BranchBoundarySequences",
    "build_commit_graph",
    "extractor_from_name",
    "sequence_history",
]
