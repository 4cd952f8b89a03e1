from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Tuple

from .registry import Endpoint


@dataclass(frozen=True)
class PriceUpdate:
    timestamp: datetime
    exchange: str
    source_currency: str
    destination_currency: str
    forward_factor: float
    backward_factor: float

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.exchange, self.source_currency, self.destination_currency)

    @property
    def source(self) -> Endpoint:
        return Endpoint(self.exchange, self.source_currency)

    @property
    def destination(self) -> Endpoint:
        return Endpoint(self.exchange, self.destination_currency)


@dataclass(frozen=True)
class RateRequest:
    source_exchange: str
    source_currency: str
    destination_exchange: str
    destination_currency: str

    @property
    def key(self) -> Tuple[str, str, str, str]:
        return (
            self.source_exchange,
            self.source_currency,
            self.destination_exchange,
            self.destination_currency,
        )

    @property
    def source(self) -> Endpoint:
        return Endpoint(self.source_exchange, self.source_currency)

    @property
    def destination(self) -> Endpoint:
        return Endpoint(self.destination_exchange, self.destination_currency)


@dataclass
class Request:
    # insertion-ordered; newest update per key wins
    price_updates: Dict[Tuple[str, str, str], PriceUpdate] = field(default_factory=dict)
    rate_requests: Dict[Tuple[str, str, str, str], RateRequest] = field(default_factory=dict)
    skipped_lines: int = 0


@dataclass
class BestRatePath:
    source: Any
    destination: Any
    rate: Any
    path: List[Any]

    @property
    def hops(self) -> int:
        return max(len(self.path) - 1, 0)
