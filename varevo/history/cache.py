import threading
from pathlib import Path
from typing import Callable, Optional

from varevo.io.kernelhaven import PresenceConditionIO, io_for
from varevo.schemas.annotations import AnnotationNode
from varevo.utils.logger import get_logger

logger = get_logger(__name__)


class LazyTree:
    """
    Cache cell for the annotation tree of one commit.

    Loading is pure and repeatable, so a forgotten tree is simply loaded
    again on the next ``get``. Trees can be huge; callers must ``forget``
    them once the commit is done.
    """

    def __init__(self, loader: Callable[[], AnnotationNode], label: str = ""):
        self._loader = loader
        self._value: Optional[AnnotationNode] = None
        self._lock = threading.Lock()
        self.label = label

    @classmethod
    def from_file(cls, path: Path | str, reader: PresenceConditionIO | None = None) -> "LazyTree":
        path = Path(path)
        reader = reader or io_for(path)
        return cls(lambda: reader.load(path), label=str(path))

    def get(self) -> AnnotationNode:
        with self._lock:
            if self._value is None:
                logger.debug(f"Loading annotation tree {self.label}")
                self._value = self._loader()
            return self._value

    @property
    def is_loaded(self) -> bool:
        return self._value is not None

    def forget(self) -> None:
        with self._lock:
            if self._value is not None:
                logger.debug(f"Forgetting annotation tree {self.label}")
            self._value = None
