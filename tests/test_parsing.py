import io
from datetime import datetime, timedelta, timezone

import pytest

from rate_path.errors import LineParseError
from rate_path.models import PriceUpdate, RateRequest
from rate_path.parsing import (
    parse_line,
    parse_price_update,
    parse_rate_request,
    read_request,
)


def test_parse_price_update():
    pu = parse_price_update("2017-11-01T09:42:23+00:00 kraken btc USD 1000.0 0.0009")
    assert pu.timestamp == datetime(2017, 11, 1, 9, 42, 23, tzinfo=timezone.utc)
    assert pu.key == ("KRAKEN", "BTC", "USD")
    assert pu.forward_factor == 1000.0
    assert pu.backward_factor == 0.0009


def test_parse_price_update_accepts_zulu_and_offsets():
    pu = parse_price_update("2017-11-01T09:42:23Z KRAKEN BTC USD 1000.0 0.0009")
    assert pu.timestamp.utcoffset() == timedelta(0)
    pu = parse_price_update("2017-11-01T11:42:23+02:00 KRAKEN BTC USD 1000.0 0.0009")
    assert pu.timestamp == datetime(2017, 11, 1, 9, 42, 23, tzinfo=timezone.utc)


def test_parse_price_update_missing_items():
    with pytest.raises(LineParseError) as exc:
        parse_price_update("2017-11-01T09:42:23+00:00 KRAKEN")
    assert exc.value.errors == [
        "The line item <source_currency> is missing!",
        "The line item <destination_currency> is missing!",
        "The line item <forward_factor> is missing!",
        "The line item <backward_factor> is missing!",
    ]


def test_parse_price_update_collects_format_errors():
    line = "201--11-01T09:42:23+00:00 KRAKEN BTC USD thousand zero-point-something-small"
    with pytest.raises(LineParseError) as exc:
        parse_price_update(line)
    assert exc.value.errors == [
        "The line item <timestamp> can not be parsed (wrong format)!",
        "The line item <forward_factor> can not be parsed (wrong format)!",
        "The line item <backward_factor> can not be parsed (wrong format)!",
    ]
    assert exc.value.line == line


@pytest.mark.parametrize("bad", ["0", "-1.5", "nan", "inf"])
def test_parse_price_update_rejects_non_positive_factors(bad):
    with pytest.raises(LineParseError):
        parse_price_update(f"2017-11-01T09:42:23+00:00 KRAKEN BTC USD {bad} 0.0009")


def test_parse_price_update_requires_offset():
    with pytest.raises(LineParseError):
        parse_price_update("2017-11-01T09:42:23 KRAKEN BTC USD 1000.0 0.0009")


def test_parse_rate_request():
    rr = parse_rate_request("exchange_rate_request kraken BTC GDAX eth")
    assert rr == RateRequest("KRAKEN", "BTC", "GDAX", "ETH")


def test_parse_rate_request_wrong_type_and_missing():
    with pytest.raises(LineParseError) as exc:
        parse_rate_request("WRONG_LINE_TYPE KRAKEN BTC GDAX ETH")
    assert len(exc.value.errors) == 1
    with pytest.raises(LineParseError) as exc:
        parse_rate_request("")
    assert exc.value.errors == [
        "The line item <line_type> is missing!",
        "The line item <source_exchange> is missing!",
        "The line item <source_currency> is missing!",
        "The line item <destination_exchange> is missing!",
        "The line item <destination_currency> is missing!",
    ]


def test_parse_line_dispatches_on_line_type():
    assert parse_line("   ") is None
    assert isinstance(parse_line("EXCHANGE_RATE_REQUEST KRAKEN BTC GDAX ETH"), RateRequest)
    assert isinstance(
        parse_line("2017-11-01T09:42:23+00:00 KRAKEN BTC USD 1000.0 0.0009\n"), PriceUpdate
    )


def test_read_request_skips_empty_lines():
    text = """2017-11-01T09:42:23+00:00 KRAKEN BTC USD 1000.0 0.0009


2018-11-01T09:42:23+00:00 KRAKEN ETH USD 100.0 0.001

EXCHANGE_RATE_REQUEST KRAKEN BTC GDAX ETH
EXCHANGE_RATE_REQUEST KRAKEN ETH GDAX USD
EXCHANGE_RATE_REQUEST KRAKEN COIN GDAX USD
EXCHANGE_RATE_REQUEST GDAX BTC KRAKEN USD
EXCHANGE_RATE_REQUEST GDAX BTC KRAKEN USD
"""
    req = read_request(io.StringIO(text))
    assert len(req.price_updates) == 2
    assert len(req.rate_requests) == 4
    assert req.skipped_lines == 0


def test_read_request_keeps_newest_update():
    lines = [
        "2017-11-01T09:42:23+00:00 KRAKEN BTC USD 1000.0 0.0009",
        "2017-11-01T09:44:00+00:00 KRAKEN BTC USD 1100.0 0.0008",
        "2017-11-01T09:43:00+00:00 KRAKEN BTC USD 900.0 0.001",
        "2017-11-01T09:44:00+00:00 KRAKEN BTC USD 1200.0 0.0007",
    ]
    req = read_request(lines)
    (pu,) = req.price_updates.values()
    assert pu.forward_factor == 1100.0


def test_read_request_skips_bad_lines_unless_strict(caplog):
    lines = [
        "2017-11-01T09:42:23+00:00 KRAKEN BTC USD 1000.0",
        "EXCHANGE_RATE_REQUEST KRAKEN BTC GDAX ETH",
    ]
    with caplog.at_level("WARNING", logger="rate_path.parsing"):
        req = read_request(lines)
    assert req.skipped_lines == 1
    assert len(req.rate_requests) == 1
    assert "Skipping line 1" in caplog.text
    with pytest.raises(LineParseError):
        read_request(lines, strict=True)
