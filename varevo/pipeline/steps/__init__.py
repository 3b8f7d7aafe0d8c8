"""
Pipeline step modules.
"""
from .load_dataset import LoadDatasetStep
from .sequence import SequenceHistoryStep
from .generation import VariantGenerationStep

__all__ = [
    "LoadDatasetStep",
    "SequenceHistoryStep",
    "VariantGenerationStep",
]
