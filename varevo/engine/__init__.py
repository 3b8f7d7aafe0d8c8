"""
生成引擎模块 - 变体生成、地面真值与配置采样

核心组件：
- generator: 按注解树从产品线生成变体
- ground_truth: 汇总并持久化每个变体的地面真值
- sampling: 选择要生成的变体配置
"""

from .generator import ArtefactFilter, ErrorPolicy, GenerationOptions, VariantGenerator
from .ground_truth import GroundTruthAssembler, write_ground_truth
from .sampling import AllSelectedSampler, ConstantSampler, RandomSampler, Sampler, sampler_from_config

__all__ = [
    "ArtefactFilter",
    "ErrorPolicy",
    "GenerationOptions",
    "VariantGenerator",
    "GroundTruthAssembler",
    "write_ground_truth",
    "Sampler",
    "AllSelectedSampler",
    "ConstantSampler",
    "RandomSampler",
    "sampler_from_config",
]
