from pydantic import BaseModel, Field, field_validator
from sympy.logic.boolalg import Boolean

from varevo.variability.presence import evaluate


class Configuration(BaseModel):
    """Feature configuration: selected features are true, all others false"""
    selected: frozenset[str] = Field(default_factory=frozenset, description="Selected feature names")
    select_all: bool = Field(default=False, description="Treat every feature as selected")

    @field_validator("selected", mode="before")
    @classmethod
    def _to_frozenset(cls, value):
        if value is None:
            return frozenset()
        if isinstance(value, str):
            return frozenset([value])
        return frozenset(value)

    def evaluate(self, condition: Boolean) -> bool:
        """Evaluate a presence condition under this configuration"""
        return evaluate(condition, self.selected, self.select_all)

    def is_selected(self, feature_name: str) -> bool:
        return self.select_all or feature_name in self.selected

    def sorted_features(self) -> list[str]:
        return sorted(self.selected)

    @classmethod
    def all_selected(cls) -> "Configuration":
        """Configuration that says yes to every feature"""
        return cls(select_all=True)

    class Config:
        frozen = True


class Variant(BaseModel):
    """A named product derived from a configuration"""
    name: str = Field(..., min_length=1, description="Variant name, also its output directory")
    configuration: Configuration = Field(default_factory=Configuration)

    def evaluate(self, condition: Boolean) -> bool:
        return self.configuration.evaluate(condition)

    class Config:
        frozen = True
