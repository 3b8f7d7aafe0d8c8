"""
Variant generation - derive one variant of a product line from its annotation tree.

For every file the annotation blocks are walked in pre-order. A block is kept
iff its condition and the conditions of all its ancestors hold under the
variant's configuration. Kept content lines are copied in order and
renumbered from 1; directive lines of INTERNAL blocks are never copied.
While copying, the generator records which product-line lines ended up where
(``LineRun``) and which blocks survived (``BlockMatch``).
"""
import shutil
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Callable, Iterable

from pydantic import BaseModel, Field
from sympy.logic.boolalg import Boolean

from varevo.errors import DataIntegrityError, VariantGenerationIOError
from varevo.io.file_ops import read_lines, write_lines
from varevo.schemas.annotations import AnnotationNode, AnnotationStyle, BlockNode, FileNode
from varevo.schemas.ground_truth import AnnotationGroundTruth, BlockMatch, GroundTruth, LineRun
from varevo.schemas.variants import Configuration, Variant
from varevo.utils.logger import get_logger
from varevo.variability.presence import simplify
from varevo.variability.tree import check_well_formed, iter_files

from .ground_truth import GroundTruthAssembler

logger = get_logger(__name__)


class ErrorPolicy(str, Enum):
    """What to do when a materialized product-line file cannot be used"""
    ABORT = "abort"
    SKIP_FILE = "skip_file"
    TOLERATE_MISSING_FILES = "tolerate_missing_files"

    @classmethod
    def from_name(cls, name: str) -> "ErrorPolicy":
        normalized = name.strip().lower().replace("-", "_")
        if normalized == "tolerate_missing":
            normalized = cls.TOLERATE_MISSING_FILES.value
        return cls(normalized)

    def tolerates(self, error: VariantGenerationIOError) -> bool:
        return self is not ErrorPolicy.ABORT

    def logs_skip_as_warning(self, error: VariantGenerationIOError) -> bool:
        # files come and go between commits
        return not (self is ErrorPolicy.TOLERATE_MISSING_FILES and error.missing)


class ArtefactFilter:
    """
    Keep/skip decision per file path.

    A path is skipped if it contains one of ``ignore_paths`` or, when
    ``file_extensions`` is given, does not end with one of them.
    """

    def __init__(self, ignore_paths: Iterable[str] = (), file_extensions: Iterable[str] = ()):
        self.ignore_paths = list(ignore_paths or [])
        self.file_extensions = tuple(file_extensions or ())

    def __call__(self, path: str) -> bool:
        for pattern in self.ignore_paths:
            if pattern in path:
                return False
        if self.file_extensions and not path.endswith(self.file_extensions):
            return False
        return True

    @classmethod
    def keep_all(cls) -> "ArtefactFilter":
        return cls()


class GenerationOptions(BaseModel):
    """Options of one generation call"""
    error_policy: ErrorPolicy = Field(default=ErrorPolicy.SKIP_FILE)
    file_filter: Callable[[str], bool] = Field(default_factory=ArtefactFilter.keep_all)
    simplify_conditions: bool = Field(default=False, description="Minimize variant block conditions")

    @classmethod
    def from_config(cls, generation_config: dict) -> "GenerationOptions":
        """Build options from the ``generation`` section of the pipeline config"""
        generation_config = generation_config or {}
        return cls(
            error_policy=ErrorPolicy.from_name(generation_config.get("error_policy", "skip_file")),
            file_filter=ArtefactFilter(
                ignore_paths=generation_config.get("ignore_paths", []),
                file_extensions=generation_config.get("file_extensions", []),
            ),
            simplify_conditions=generation_config.get("simplify_conditions", False),
        )

    class Config:
        frozen = True
        arbitrary_types_allowed = True


class _FileEmitter:
    """Copies the kept lines of one file and records their provenance."""

    def __init__(self, lines: list[str], configuration: Configuration, simplify_conditions: bool):
        self.lines = lines
        self.configuration = configuration
        self.simplify_conditions = simplify_conditions
        self.output: list[str] = []
        self.runs: list[LineRun] = []
        self.matches: list[BlockMatch] = []
        self._run_start: int | None = None
        self._run_variant_start = 0
        self._run_last: int = 0
        self._run_skipped: list[int] = []
        self._pending_directives: list[int] = []

    def keep(self, line: int) -> None:
        if self._run_start is None:
            self._run_start = line
            self._run_variant_start = len(self.output) + 1
            self._run_skipped = []
        else:
            self._run_skipped.extend(self._pending_directives)
        self._pending_directives = []
        self.output.append(self.lines[line - 1])
        self._run_last = line

    def directive(self, line: int) -> None:
        if self._run_start is not None:
            self._pending_directives.append(line)

    def drop(self) -> None:
        if self._run_start is None:
            return
        self.runs.append(LineRun(
            source_start=self._run_start,
            source_end=self._run_last,
            variant_start=self._run_variant_start,
            variant_end=len(self.output),
            skipped_source_lines=tuple(self._run_skipped),
        ))
        self._run_start = None
        self._pending_directives = []

    def plain_lines(self, first: int, last: int, active: bool) -> None:
        if first > last:
            return
        if active:
            for line in range(first, last + 1):
                self.keep(line)
        else:
            self.drop()

    def blocks(self, blocks: tuple[BlockNode, ...], first: int, last: int,
               active: bool, variant_blocks: list[BlockNode]) -> None:
        cursor = first
        for block in blocks:
            self.plain_lines(cursor, block.start - 1, active)
            self.block(block, active, variant_blocks)
            cursor = block.end + 1
        self.plain_lines(cursor, last, active)

    def block(self, block: BlockNode, parent_active: bool, variant_blocks: list[BlockNode]) -> None:
        kept = parent_active and self.configuration.evaluate(block.condition)
        internal = block.style == AnnotationStyle.INTERNAL
        if internal:
            self.directive(block.start)
        first_output = len(self.output) + 1
        children: list[BlockNode] = []
        self.blocks(block.children, block.content_start, block.content_end, kept, children)
        if internal and block.end > block.start:
            self.directive(block.end)
        last_output = len(self.output)

        if not kept or last_output < first_output:
            return
        condition = self._variant_condition(block.condition)
        variant_blocks.append(BlockNode(
            condition=condition,
            start=first_output,
            end=last_output,
            style=AnnotationStyle.EXTERNAL,
            children=tuple(children),
        ))
        self.matches.append(BlockMatch(
            condition=block.condition,
            source_start=block.start,
            source_end=block.end,
            variant_start=first_output,
            variant_end=last_output,
        ))

    def _variant_condition(self, condition: Boolean) -> Boolean:
        if self.simplify_conditions:
            return simplify(condition)
        return condition

    def finish(self) -> None:
        self.drop()


def _relative_path(path: str) -> PurePosixPath:
    relative = PurePosixPath(path)
    if relative.is_absolute() or ".." in relative.parts or not relative.parts:
        raise DataIntegrityError(f"Annotated file path escapes the product line: {path!r}")
    return relative


class VariantGenerator:
    """
    Generates variants of a product line from its annotation tree.

    The generator holds no state between calls; concurrent calls for
    different variants are safe as long as their output directories differ
    and the product-line checkout is not modified meanwhile.
    """

    def generate(
        self,
        tree: AnnotationNode,
        spl_root: Path | str,
        output_root: Path | str,
        variant: Variant,
        options: GenerationOptions | None = None,
    ) -> GroundTruth:
        """
        Generate ``variant`` into ``output_root``.

        Args:
            tree: Annotation tree of the product line at one commit
            spl_root: Root of the materialized product-line sources
            output_root: Directory that receives the variant's files
            variant: Variant to generate
            options: Error policy, file filter and simplification switch

        Returns:
            GroundTruth: variant presence conditions, per-file provenance and skipped files

        Raises:
            IllFormedTraceError: the tree violates the nesting invariants (nothing is written)
            VariantGenerationIOError: a file could not be used under ABORT (the partial output is removed)
        """
        options = options or GenerationOptions()
        spl_root = Path(spl_root)
        output_root = Path(output_root)

        check_well_formed(tree)

        # output of an earlier run must not leak into this variant
        if output_root.exists():
            shutil.rmtree(output_root)

        assembler = GroundTruthAssembler(variant.name)
        for file_node in iter_files(tree):
            if not options.file_filter(file_node.path):
                logger.debug(f"Filtered out {file_node.path}")
                continue
            if not variant.evaluate(file_node.condition):
                logger.debug(f"{file_node.path} is not part of variant {variant.name}")
                continue
            try:
                assembler.add(self.generate_file(file_node, spl_root, output_root, variant, options))
            except VariantGenerationIOError as e:
                if not options.error_policy.tolerates(e):
                    logger.error(f"Generating {variant.name} failed: {e}")
                    shutil.rmtree(output_root, ignore_errors=True)
                    raise
                if options.error_policy.logs_skip_as_warning(e):
                    logger.warning(f"Skipping {file_node.path} for variant {variant.name}: {e}")
                else:
                    logger.debug(f"Skipping {file_node.path} for variant {variant.name}: {e}")
                assembler.skip(file_node.path, str(e))

        ground_truth = assembler.assemble()
        logger.info(
            f"Generated variant {variant.name}: {len(ground_truth.files)} files, "
            f"{len(ground_truth.skipped_files)} skipped"
        )
        return ground_truth

    def generate_file(
        self,
        file_node: FileNode,
        spl_root: Path,
        output_root: Path,
        variant: Variant,
        options: GenerationOptions,
    ) -> AnnotationGroundTruth:
        """
        Generate a single file of ``variant``.

        Raises:
            VariantGenerationIOError: the source is missing, unreadable, shorter than
                its annotations, or the output cannot be written
        """
        relative = _relative_path(file_node.path)
        source = spl_root / relative
        try:
            lines = read_lines(source)
        except FileNotFoundError as e:
            raise VariantGenerationIOError("Missing product-line file", source, missing=True) from e
        except OSError as e:
            raise VariantGenerationIOError("Cannot read product-line file", source) from e

        if file_node.last_line > len(lines):
            raise VariantGenerationIOError(
                f"Annotations reach line {file_node.last_line} but the file has {len(lines)} lines",
                source,
            )

        emitter = _FileEmitter(lines, variant.configuration, options.simplify_conditions)
        roots: list[BlockNode] = []
        emitter.blocks(file_node.children, 1, len(lines), True, roots)
        emitter.finish()

        target = output_root / relative
        try:
            write_lines(target, emitter.output)
        except OSError as e:
            raise VariantGenerationIOError("Cannot write variant file", target) from e

        return AnnotationGroundTruth(
            path=file_node.path,
            runs=tuple(emitter.runs),
            block_matches=tuple(emitter.matches),
            variant_file=FileNode(
                path=file_node.path,
                condition=file_node.condition,
                children=tuple(roots),
            ),
        )
