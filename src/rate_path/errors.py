from __future__ import annotations

from typing import Hashable, List, Sequence


class RatePathError(Exception):
    """Base class for rate_path errors."""


class UnknownEndpoint(RatePathError, KeyError):
    def __init__(self, label: Hashable):
        super().__init__(label)
        self.label = label

    def __str__(self) -> str:
        return f"endpoint {self.label!r} was never observed"


class NoPath(RatePathError):
    def __init__(self, source: Hashable, destination: Hashable):
        super().__init__(source, destination)
        self.source = source
        self.destination = destination

    def __str__(self) -> str:
        return f"no path from {self.source!r} to {self.destination!r}"


class AlgebraContractViolation(RatePathError, ValueError):
    """Raised when a path algebra breaks irreflexivity or associativity."""


class LineParseError(RatePathError, ValueError):
    def __init__(self, line: str, errors: Sequence[str]):
        self.line = line
        self.errors: List[str] = list(errors)
        super().__init__(f"Errors while parsing line {line!r}: {'; '.join(self.errors)}")


class ConfigError(RatePathError, ValueError):
    pass
