"""Path algebras: how weights combine along a path and how paths are ranked.

An algebra pairs an associative ``compose`` with a strict ``is_better``
ordering. ``is_better(x, x)`` must be False so ties keep the first path
found. A non-associative ``compose`` makes Floyd-Warshall results
meaningless; ``check_contract`` catches both misuses on sample weights.
"""
from __future__ import annotations

import itertools
import math
import operator
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

import numpy as np

from .errors import AlgebraContractViolation

# Triples grow cubically; keep the associativity check small.
MAX_CONTRACT_SAMPLES = 8


@dataclass(frozen=True)
class PathAlgebra:
    name: str
    compose: Callable[[Any, Any], Any]
    is_better: Callable[[Any, Any], bool]
    identity: Optional[Any] = None
    # numpy ufuncs with the same semantics, used for whole-matrix relaxation
    vector_compose: Optional[Callable[..., Any]] = None
    vector_is_better: Optional[Callable[..., Any]] = None

    @property
    def has_identity(self) -> bool:
        return self.identity is not None

    @property
    def vectorizable(self) -> bool:
        return self.vector_compose is not None and self.vector_is_better is not None

    def best(self, a: Any, b: Any) -> Any:
        """Return ``b`` only when strictly better than ``a``."""
        return b if self.is_better(b, a) else a


MAX_PRODUCT = PathAlgebra(
    name="max_product",
    compose=operator.mul,
    is_better=operator.gt,
    identity=1.0,
    vector_compose=np.multiply,
    vector_is_better=np.greater,
)

MIN_SUM = PathAlgebra(
    name="min_sum",
    compose=operator.add,
    is_better=operator.lt,
    identity=0.0,
    vector_compose=np.add,
    vector_is_better=np.less,
)

ALGEBRAS: Dict[str, PathAlgebra] = {a.name: a for a in (MAX_PRODUCT, MIN_SUM)}


def get_algebra(name: str) -> PathAlgebra:
    try:
        return ALGEBRAS[name]
    except KeyError:
        raise ValueError(
            f"Unknown algebra {name!r}; expected one of {sorted(ALGEBRAS)}"
        ) from None


def _same(a: Any, b: Any) -> bool:
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return math.isclose(a, b, rel_tol=1e-9, abs_tol=1e-12)
    return a == b


def check_contract(algebra: PathAlgebra, samples: Iterable[Any]) -> None:
    """Probe irreflexivity and associativity on ``samples``.

    Raises AlgebraContractViolation on the first counterexample.
    """
    values: List[Any] = []
    for s in samples:
        if s not in values:
            values.append(s)
        if len(values) >= MAX_CONTRACT_SAMPLES:
            break
    if algebra.identity is not None and algebra.identity not in values:
        values.append(algebra.identity)

    for x in values:
        if algebra.is_better(x, x):
            raise AlgebraContractViolation(
                f"{algebra.name}: is_better must be irreflexive, but is_better({x!r}, {x!r}) is true"
            )

    for a, b, c in itertools.product(values, repeat=3):
        left = algebra.compose(algebra.compose(a, b), c)
        right = algebra.compose(a, algebra.compose(b, c))
        if not _same(left, right):
            raise AlgebraContractViolation(
                f"{algebra.name}: compose is not associative for ({a!r}, {b!r}, {c!r}): "
                f"{left!r} != {right!r}"
            )
