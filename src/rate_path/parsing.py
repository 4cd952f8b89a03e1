"""Line parsing for price updates and exchange rate requests.

Price update::

    <timestamp> <exchange> <source_currency> <destination_currency> <forward_factor> <backward_factor>
    2017-11-01T09:42:23+00:00 KRAKEN BTC USD 1000.0 0.0009

Rate request::

    EXCHANGE_RATE_REQUEST <source_exchange> <source_currency> <destination_exchange> <destination_currency>
"""
from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Iterable, List, Optional, Union

from .errors import LineParseError
from .models import PriceUpdate, RateRequest, Request

logger = logging.getLogger("rate_path.parsing")

RATE_REQUEST_TYPE = "EXCHANGE_RATE_REQUEST"

PRICE_UPDATE_ITEMS = (
    "timestamp",
    "exchange",
    "source_currency",
    "destination_currency",
    "forward_factor",
    "backward_factor",
)
RATE_REQUEST_ITEMS = (
    "line_type",
    "source_exchange",
    "source_currency",
    "destination_exchange",
    "destination_currency",
)


def _split(line: str, items: tuple, errors: List[str]) -> dict:
    tokens = line.split()
    values = {}
    for pos, item in enumerate(items):
        if pos < len(tokens):
            values[item] = tokens[pos]
        else:
            errors.append(f"The line item <{item}> is missing!")
    return values


def _bad_format(item: str) -> str:
    return f"The line item <{item}> can not be parsed (wrong format)!"


def parse_timestamp(text: str) -> Optional[datetime]:
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        ts = datetime.fromisoformat(text)
    except ValueError:
        return None
    if ts.tzinfo is None:
        return None
    return ts


def _parse_factor(text: str) -> Optional[float]:
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value) or value <= 0.0:
        return None
    return value


def parse_price_update(line: str) -> PriceUpdate:
    errors: List[str] = []
    values = _split(line, PRICE_UPDATE_ITEMS, errors)
    if errors:
        raise LineParseError(line, errors)

    timestamp = parse_timestamp(values["timestamp"])
    if timestamp is None:
        errors.append(_bad_format("timestamp"))
    forward = _parse_factor(values["forward_factor"])
    if forward is None:
        errors.append(_bad_format("forward_factor"))
    backward = _parse_factor(values["backward_factor"])
    if backward is None:
        errors.append(_bad_format("backward_factor"))
    if errors:
        raise LineParseError(line, errors)

    return PriceUpdate(
        timestamp=timestamp,
        exchange=values["exchange"].upper(),
        source_currency=values["source_currency"].upper(),
        destination_currency=values["destination_currency"].upper(),
        forward_factor=forward,
        backward_factor=backward,
    )


def parse_rate_request(line: str) -> RateRequest:
    errors: List[str] = []
    values = _split(line, RATE_REQUEST_ITEMS, errors)
    if errors:
        raise LineParseError(line, errors)
    if values["line_type"].upper() != RATE_REQUEST_TYPE:
        raise LineParseError(
            line,
            [f"The line type identifier at the beginning of the line must be {RATE_REQUEST_TYPE}!"],
        )
    return RateRequest(
        source_exchange=values["source_exchange"].upper(),
        source_currency=values["source_currency"].upper(),
        destination_exchange=values["destination_exchange"].upper(),
        destination_currency=values["destination_currency"].upper(),
    )


def parse_line(line: str) -> Optional[Union[PriceUpdate, RateRequest]]:
    """Parse one input line; blank lines give None."""
    stripped = line.strip()
    if not stripped:
        return None
    if stripped.split(None, 1)[0].upper() == RATE_REQUEST_TYPE:
        return parse_rate_request(stripped)
    return parse_price_update(stripped)


def add_price_update(request: Request, update: PriceUpdate) -> bool:
    """Keep the newest update per (exchange, source, destination); ties keep the first."""
    existing = request.price_updates.get(update.key)
    if existing is not None and update.timestamp <= existing.timestamp:
        return False
    request.price_updates[update.key] = update
    return True


def read_request(lines: Iterable[str], strict: bool = False) -> Request:
    request = Request()
    for lineno, raw in enumerate(lines, start=1):
        try:
            item = parse_line(raw)
        except LineParseError as e:
            if strict:
                raise
            request.skipped_lines += 1
            logger.warning("Skipping line %d: %s", lineno, "; ".join(e.errors))
            continue
        if item is None:
            continue
        if isinstance(item, RateRequest):
            request.rate_requests.setdefault(item.key, item)
        elif not add_price_update(request, item):
            logger.debug("Ignoring older price update on line %d for %s", lineno, item.key)
    logger.info(
        "Read %d price updates and %d rate requests (%d lines skipped)",
        len(request.price_updates),
        len(request.rate_requests),
        request.skipped_lines,
    )
    return request
