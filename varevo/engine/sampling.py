"""
Sampling Utilities - 变体配置采样

Stand-ins for a real feature-model sampler: they only know feature names and,
optionally, one constraint formula that every sampled configuration must
satisfy.
"""
import random
from abc import ABC, abstractmethod
from typing import Iterable

from sympy.logic.boolalg import Boolean

from varevo.schemas.variants import Configuration, Variant
from varevo.utils.logger import get_logger
from varevo.variability.presence import evaluate, parse_condition

logger = get_logger(__name__)


class Sampler(ABC):
    """Produces the variants to generate for one commit."""

    @abstractmethod
    def sample(self, features: Iterable[str]) -> list[Variant]:
        raise NotImplementedError


class ConstantSampler(Sampler):
    """Always returns the same variants."""

    def __init__(self, variants: Iterable[Variant]):
        self.variants = list(variants)

    def sample(self, features: Iterable[str]) -> list[Variant]:
        return list(self.variants)


class AllSelectedSampler(Sampler):
    """The single variant with every feature selected."""

    def __init__(self, name: str = "all"):
        self.name = name

    def sample(self, features: Iterable[str]) -> list[Variant]:
        return [Variant(name=self.name, configuration=Configuration.all_selected())]


class RandomSampler(Sampler):
    """
    Uniform random feature selections, seeded for reproducibility.

    Selections violating ``constraint`` are rejected; after
    ``max_attempts`` rejections in a row sampling stops early.
    """

    def __init__(
        self,
        size: int,
        seed: int = 42,
        constraint: Boolean | None = None,
        max_attempts: int = 1000,
        prefix: str = "Variant",
    ):
        self.size = size
        self.seed = seed
        self.constraint = constraint
        self.max_attempts = max_attempts
        self.prefix = prefix

    def sample(self, features: Iterable[str]) -> list[Variant]:
        rng = random.Random(self.seed)
        ordered = sorted(set(features))
        variants: list[Variant] = []
        attempts = 0
        while len(variants) < self.size:
            selected = {name for name in ordered if rng.random() < 0.5}
            if self.constraint is not None and not evaluate(self.constraint, selected):
                attempts += 1
                if attempts >= self.max_attempts:
                    logger.warning(
                        f"Gave up after {attempts} rejected samples; "
                        f"returning {len(variants)} of {self.size} variants"
                    )
                    break
                continue
            attempts = 0
            variants.append(Variant(
                name=f"{self.prefix}{len(variants)}",
                configuration=Configuration(selected=selected),
            ))
        return variants


def sampler_from_config(sampling_config: dict | None) -> Sampler:
    """
    Build a sampler from the ``sampling`` section of the pipeline config.

    Strategies: ``all`` (default), ``random`` and ``fixed``.
    """
    sampling_config = sampling_config or {}
    strategy = sampling_config.get("strategy", "all")

    if strategy == "all":
        return AllSelectedSampler()
    if strategy == "random":
        constraint_text = sampling_config.get("constraint")
        return RandomSampler(
            size=int(sampling_config.get("sample_size", 5)),
            seed=int(sampling_config.get("seed", 42)),
            constraint=parse_condition(constraint_text) if constraint_text else None,
        )
    if strategy == "fixed":
        variants = [
            Variant(
                name=entry["name"],
                configuration=Configuration(
                    selected=entry.get("features", []),
                    select_all=entry.get("select_all", False),
                ),
            )
            for entry in sampling_config.get("variants", [])
        ]
        return ConstantSampler(variants)

    raise ValueError(f"Unsupported sampling strategy: {strategy}. Supported: all, random, fixed")
