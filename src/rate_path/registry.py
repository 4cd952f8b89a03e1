"""Dense integer indices for (exchange, currency) endpoints."""
from __future__ import annotations

from typing import Dict, Generic, Hashable, Iterator, List, NamedTuple, Optional, TypeVar

L = TypeVar("L", bound=Hashable)


class Endpoint(NamedTuple):
    exchange: str
    currency: str

    def __str__(self) -> str:
        return f"{self.exchange}, {self.currency}"


class EndpointRegistry(Generic[L]):
    """Assigns 0-based contiguous indices to labels in first-seen order.

    Entries are never removed, so an index stays valid for the lifetime of
    the registry.
    """

    def __init__(self) -> None:
        self._index: Dict[L, int] = {}
        self._labels: List[L] = []

    def intern(self, label: L) -> int:
        idx = self._index.get(label)
        if idx is None:
            idx = len(self._labels)
            self._index[label] = idx
            self._labels.append(label)
        return idx

    def index_of(self, label: L) -> Optional[int]:
        return self._index.get(label)

    def resolve(self, index: int) -> L:
        if index < 0 or index >= len(self._labels):
            raise IndexError(f"endpoint index {index} out of range (size {len(self._labels)})")
        return self._labels[index]

    def __contains__(self, label: object) -> bool:
        return label in self._index

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self) -> Iterator[L]:
        return iter(self._labels)
