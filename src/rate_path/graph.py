"""Directed relation graph keyed by dense endpoint index pairs."""
from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, Optional, Tuple

Edge = Tuple[int, int, Any]


class RelationGraph:
    """At most one weight per ordered (src, dst) pair.

    A later ``upsert`` for the same ordered pair replaces the weight. A->B and
    B->A are independent edges. Endpoints are implied by indices; the graph
    only tracks how many there are so the engine can size its table.
    """

    def __init__(self, endpoint_count: int = 0) -> None:
        self._weights: Dict[Tuple[int, int], Any] = {}
        self._size = int(endpoint_count)

    @classmethod
    def from_edges(cls, edges: Iterable[Edge], endpoint_count: int = 0) -> "RelationGraph":
        graph = cls(endpoint_count)
        for src, dst, weight in edges:
            graph.upsert(src, dst, weight)
        return graph

    def upsert(self, src: int, dst: int, weight: Any) -> None:
        if src < 0 or dst < 0:
            raise IndexError(f"negative endpoint index in edge ({src}, {dst})")
        self._weights[(src, dst)] = weight
        top = max(src, dst) + 1
        if top > self._size:
            self._size = top

    def edge_weight(self, src: int, dst: int) -> Optional[Any]:
        return self._weights.get((src, dst))

    def contains_edge(self, src: int, dst: int) -> bool:
        return (src, dst) in self._weights

    def endpoint_count(self) -> int:
        return self._size

    def edge_count(self) -> int:
        return len(self._weights)

    def edges(self) -> Iterator[Edge]:
        for (src, dst), weight in self._weights.items():
            yield src, dst, weight
