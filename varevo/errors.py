"""
Exception taxonomy for annotation trees, variant generation and history
reconstruction.

Sequencing gaps are not errors: a history that cannot be sequenced into one
chain is represented by several shorter chains.
"""
from pathlib import Path


class VarevoError(Exception):
    """Root of all errors raised by varevo."""


class DataIntegrityError(VarevoError, ValueError):
    """Persisted or constructed data violates a structural invariant.

    Always fatal for the affected commit and never retried: it points at a
    bug in the upstream extraction.
    """


class IllFormedTraceError(DataIntegrityError):
    """Annotation blocks overlap, are out of order, or have ``start > end``."""

    def __init__(self, message: str, path: str | None = None,
                 start: int | None = None, end: int | None = None):
        self.path = path
        self.start = start
        self.end = end
        location = ""
        if path is not None:
            location = f" [{path}"
            if start is not None:
                location += f":{start}-{end}"
            location += "]"
        super().__init__(f"{message}{location}")


class ConditionSyntaxError(DataIntegrityError):
    """A presence condition could not be parsed."""

    def __init__(self, message: str, text: str, position: int | None = None):
        self.text = text
        self.position = position
        where = f" at position {position}" if position is not None else ""
        super().__init__(f"{message}{where}: {text!r}")


class NotFoundError(VarevoError, LookupError):
    """A queried file or line is not part of an annotation tree."""


class VariantGenerationIOError(VarevoError, OSError):
    """A materialized product-line file is missing or unreadable."""

    def __init__(self, message: str, path: Path | str, missing: bool = False):
        self.path = Path(path)
        self.missing = missing
        super().__init__(f"{message}: {self.path}")


class CheckoutError(VarevoError):
    """A product-line commit could not be materialized."""
