"""
History sequencing - turn an unordered set of evolution steps into disjoint
commit chains that can be replayed one commit after another.

Only commits whose extraction (partially) succeeded take part; a failed
commit breaks every chain that would run through it.
"""
from abc import ABC, abstractmethod
from typing import Iterable, Mapping

import networkx as nx

from varevo.errors import DataIntegrityError
from varevo.schemas.history import Commit, EvolutionStep, ExtractionStatus, VariabilityHistory
from varevo.utils.logger import get_logger

logger = get_logger(__name__)


def build_commit_graph(
    steps: Iterable[EvolutionStep],
    statuses: Mapping[str, ExtractionStatus] | None = None,
) -> nx.DiGraph:
    """
    Directed graph of usable commits (node = commit id) and the steps between them.

    Args:
        steps: Recorded parent -> child steps
        statuses: Extraction status per commit id. ``None`` treats every commit
            as successful; commits missing from the mapping are not usable.

    Raises:
        DataIntegrityError: the steps contain a cycle
    """
    graph = nx.DiGraph()

    def usable(commit: Commit) -> bool:
        if statuses is None:
            return True
        status = statuses.get(commit.id)
        return status is not None and status.is_usable

    dropped = 0
    for step in steps:
        for commit in (step.parent, step.child):
            if usable(commit) and commit.id not in graph:
                graph.add_node(commit.id)
        if step.parent == step.child:
            raise DataIntegrityError(f"Commit {step.parent} is its own parent")
        if usable(step.parent) and usable(step.child):
            graph.add_edge(step.parent.id, step.child.id)
        else:
            dropped += 1

    if dropped:
        logger.info(f"Dropped {dropped} steps touching commits without usable variability data")

    if not nx.is_directed_acyclic_graph(graph):
        cycle = nx.find_cycle(graph)
        raise DataIntegrityError(f"Evolution steps contain a cycle: {cycle}")
    return graph


class SequenceExtractor(ABC):
    """Partitions the commits of a commit graph into disjoint ordered chains."""

    @abstractmethod
    def sequence(self, graph: nx.DiGraph) -> list[list[str]]:
        """
        Args:
            graph: Acyclic commit graph from ``build_commit_graph``

        Returns:
            Chains of commit ids; every node is in exactly one chain and
            consecutive ids in a chain are edges of ``graph``
        """
        raise NotImplementedError


def _topological_order(graph: nx.DiGraph) -> list[str]:
    return list(nx.lexicographical_topological_sort(graph, key=str))


class LongestNonOverlappingSequences(SequenceExtractor):
    """
    Greedy longest chains.

    Takes the longest path among the commits not used yet, removes it and
    repeats until every commit is used. Among equally long continuations the
    child with the smallest id wins; among equally long paths the one whose
    first commit comes first in lexicographic topological order wins.
    """

    def sequence(self, graph: nx.DiGraph) -> list[list[str]]:
        remaining = graph.copy()
        sequences: list[list[str]] = []
        while remaining.number_of_nodes():
            path = self._longest_path(remaining)
            sequences.append(path)
            remaining.remove_nodes_from(path)
        return sequences

    @staticmethod
    def _longest_path(graph: nx.DiGraph) -> list[str]:
        order = _topological_order(graph)
        length: dict[str, int] = {}
        successor: dict[str, str | None] = {}
        for node in reversed(order):
            best, best_child = 1, None
            for child in sorted(graph.successors(node)):
                if length[child] + 1 > best:
                    best, best_child = length[child] + 1, child
            length[node] = best
            successor[node] = best_child

        start = order[0]
        for node in order:
            if length[node] > length[start]:
                start = node

        path = [start]
        while successor[path[-1]] is not None:
            path.append(successor[path[-1]])
        return path


class BranchBoundarySequences(SequenceExtractor):
    """
    Chains that stop at every branch and merge point.

    A chain continues from X to Y only if X has exactly one child and Y has
    exactly one parent, so no chain ever passes a fork or a merge.
    """

    def sequence(self, graph: nx.DiGraph) -> list[list[str]]:
        assigned: set[str] = set()
        sequences: list[list[str]] = []
        for node in _topological_order(graph):
            if node in assigned:
                continue
            chain = [node]
            current = node
            while graph.out_degree(current) == 1:
                child = next(iter(graph.successors(current)))
                if graph.in_degree(child) != 1 or child in assigned:
                    break
                chain.append(child)
                current = child
            assigned.update(chain)
            sequences.append(chain)
        return sequences


EXTRACTORS: dict[str, type[SequenceExtractor]] = {
    "longest": LongestNonOverlappingSequences,
    "branch_boundaries": BranchBoundarySequences,
}


def extractor_from_name(name: str | None) -> SequenceExtractor:
    name = (name or "longest").strip().lower()
    if name not in EXTRACTORS:
        raise ValueError(f"Unsupported sequencing strategy: {name}. Supported: {', '.join(EXTRACTORS)}")
    return EXTRACTORS[name]()


def sequence_history(
    steps: Iterable[EvolutionStep],
    statuses: Mapping[str, ExtractionStatus] | None = None,
    extractor: SequenceExtractor | None = None,
) -> VariabilityHistory:
    """
    Reconstruct the variability history from recorded evolution steps.

    Without any steps the history is empty; callers then have to fall back
    to handling commits one by one.
    """
    steps = list(steps)
    if not steps:
        logger.warning("No evolution steps recorded; the variability history is empty")
        return VariabilityHistory()

    graph = build_commit_graph(steps, statuses)
    extractor = extractor or LongestNonOverlappingSequences()
    chains = extractor.sequence(graph)

    history = VariabilityHistory(sequences=tuple(
        tuple(Commit(id=commit_id) for commit_id in chain) for chain in chains
    ))
    logger.info(
        f"Sequenced {graph.number_of_nodes()} commits into {len(history.sequences)} chains "
        f"(longest: {max((len(chain) for chain in chains), default=0)})"
    )
    return history
