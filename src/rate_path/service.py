"""Glue between observations, the best-path engine and rate queries."""
from __future__ import annotations

import logging
from typing import Any, Dict, Hashable, Iterable, List, Optional

from .algebra import MAX_PRODUCT, PathAlgebra
from .engine import BestPathEngine, BestPathTable, PathReconstructionError
from .errors import NoPath, UnknownEndpoint
from .graph import RelationGraph
from .models import BestRatePath, PriceUpdate, RateRequest, Request
from .registry import Endpoint, EndpointRegistry

logger = logging.getLogger("rate_path.service")


class BestRateService:
    """Records rate observations and answers best-rate queries.

    Each ``build()`` runs the engine once over the whole graph. Recording an
    observation afterwards marks the table stale; the next query rebuilds.
    """

    def __init__(
        self,
        algebra: PathAlgebra = MAX_PRODUCT,
        link_venues: bool = True,
        vectorize: Optional[bool] = None,
    ) -> None:
        if link_venues and not algebra.has_identity:
            raise ValueError(
                f"Algebra {algebra.name!r} has no identity weight; cannot link venues"
            )
        self.algebra = algebra
        self.link_venues = link_venues
        self.vectorize = vectorize
        self.registry: EndpointRegistry[Hashable] = EndpointRegistry()
        self.graph = RelationGraph()
        # currency -> venues quoting it, in first-seen order
        self._venues: Dict[str, Dict[str, None]] = {}
        self._table: Optional[BestPathTable] = None

    @property
    def table(self) -> Optional[BestPathTable]:
        return self._table

    @property
    def stale(self) -> bool:
        return self._table is None

    def record_observation(
        self,
        source_label: Hashable,
        destination_label: Hashable,
        forward_weight: Any,
        backward_weight: Any,
    ) -> None:
        src = self.registry.intern(source_label)
        dst = self.registry.intern(destination_label)
        self.graph.upsert(src, dst, forward_weight)
        self.graph.upsert(dst, src, backward_weight)
        self._table = None

    def record_price_update(self, update: PriceUpdate) -> None:
        self.record_observation(
            update.source,
            update.destination,
            update.forward_factor,
            update.backward_factor,
        )
        for currency in (update.source_currency, update.destination_currency):
            self._venues.setdefault(currency, {})[update.exchange] = None

    def record_price_updates(self, updates: Iterable[PriceUpdate]) -> None:
        for update in updates:
            self.record_price_update(update)

    def _link_venues(self) -> int:
        added = 0
        weight = self.algebra.identity
        for currency, venues in self._venues.items():
            names = list(venues)
            for pos, first in enumerate(names):
                for second in names[pos + 1:]:
                    a = self.registry.intern(Endpoint(first, currency))
                    b = self.registry.intern(Endpoint(second, currency))
                    for u, v in ((a, b), (b, a)):
                        # explicit observations take precedence over free transfers
                        if not self.graph.contains_edge(u, v):
                            self.graph.upsert(u, v, weight)
                            added += 1
        return added

    def build(self) -> BestPathTable:
        if self.link_venues:
            added = self._link_venues()
            if added:
                logger.debug("Added %d cross-venue link edges", added)
        engine = BestPathEngine(self.graph, self.algebra, vectorize=self.vectorize)
        self._table = engine.compute()
        return self._table

    def _ensure_table(self) -> BestPathTable:
        if self._table is None:
            return self.build()
        return self._table

    def require(self, source_label: Hashable, destination_label: Hashable) -> BestRatePath:
        """Like ``resolve`` but raises UnknownEndpoint / NoPath."""
        src = self.registry.index_of(source_label)
        if src is None:
            raise UnknownEndpoint(source_label)
        dst = self.registry.index_of(destination_label)
        if dst is None:
            raise UnknownEndpoint(destination_label)
        table = self._ensure_table()
        weight = table.weight(src, dst)
        if weight is None:
            raise NoPath(source_label, destination_label)
        indices = table.path(src, dst)
        return BestRatePath(
            source=source_label,
            destination=destination_label,
            rate=weight,
            path=[self.registry.resolve(i) for i in indices],
        )

    def resolve(
        self, source_label: Hashable, destination_label: Hashable
    ) -> Optional[BestRatePath]:
        try:
            return self.require(source_label, destination_label)
        except (UnknownEndpoint, NoPath) as e:
            logger.debug("resolve: %s", e)
            return None
        except PathReconstructionError as e:
            logger.warning("resolve: %s", e)
            return None

    def resolve_request(self, request: RateRequest) -> Optional[BestRatePath]:
        return self.resolve(request.source, request.destination)

    def process(self, request: Request) -> List[Optional[BestRatePath]]:
        """Record every price update of ``request``, build once, answer all queries.

        Updates are applied oldest first so that, for edges written by both
        ``A B`` and ``B A`` lines, the newest observation wins.
        """
        updates = sorted(request.price_updates.values(), key=lambda u: u.timestamp)
        self.record_price_updates(updates)
        self.build()
        return [self.resolve_request(r) for r in request.rate_requests.values()]
