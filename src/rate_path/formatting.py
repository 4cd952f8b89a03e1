from __future__ import annotations

from typing import Hashable, Iterable, List, Optional, Sequence, Tuple

from tabulate import tabulate

from .engine import BestPathTable, PathReconstructionError
from .models import BestRatePath, RateRequest
from .registry import EndpointRegistry

BEGIN = "BEST_RATES_BEGIN"
END = "BEST_RATES_END"


def format_best_rate(
    request: RateRequest,
    result: Optional[BestRatePath],
    rate_format: str = "{}",
    missing_rate_text: str = "NONE",
) -> List[str]:
    rate = missing_rate_text if result is None else rate_format.format(result.rate)
    lines = [
        f"{BEGIN} {request.source_exchange} {request.source_currency} "
        f"{request.destination_exchange} {request.destination_currency} {rate}"
    ]
    if result is not None:
        lines.extend(str(endpoint) for endpoint in result.path)
    lines.append(END)
    return lines


def format_response(
    answers: Iterable[Tuple[RateRequest, Optional[BestRatePath]]],
    rate_format: str = "{}",
    missing_rate_text: str = "NONE",
) -> str:
    out: List[str] = []
    for request, result in answers:
        out.extend(format_best_rate(request, result, rate_format, missing_rate_text))
    return "\n".join(out) + ("\n" if out else "")


def format_table(
    table: BestPathTable,
    registry: EndpointRegistry[Hashable],
    rate_format: str = "{}",
    include_self: bool = False,
) -> str:
    """Render every resolved pair as a github-style table, for diagnostics."""
    rows: List[Sequence[str]] = []
    for i, j, weight in table.pairs():
        if i == j and not include_self:
            continue
        try:
            path = " -> ".join(str(registry.resolve(p)) for p in table.path(i, j) or [])
        except PathReconstructionError:
            path = "<unbounded>"
        rows.append(
            (
                str(registry.resolve(i)),
                str(registry.resolve(j)),
                rate_format.format(weight),
                path,
            )
        )
    return tabulate(rows, headers=["source", "destination", "rate", "path"], tablefmt="github")
