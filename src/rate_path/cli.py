from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from dotenv import load_dotenv

from .config_loader import ServiceConfig, build_config
from .errors import ConfigError, LineParseError
from .formatting import format_response, format_table
from .logging_utils import setup_logger
from .parsing import read_request
from .service import BestRateService

logger = logging.getLogger("rate_path.cli")

EXIT_OK = 0
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rate-path",
        description="Best exchange rate paths from price updates and rate requests",
    )
    parser.add_argument("input", nargs="?", type=Path, default=None, help="Input file (default: stdin)")
    parser.add_argument("--config", dest="config", type=Path, default=None, help="YAML configuration file")
    parser.add_argument("--algebra", choices=["max_product", "min_sum"], default=None, help="Path algebra")
    parser.add_argument("--no-link-venues", dest="link_venues", action="store_false", default=None, help="Do not connect the same currency across exchanges")
    parser.add_argument("--strict", action="store_true", default=None, help="Fail on the first malformed line")
    parser.add_argument("--log-file", dest="log_file", type=Path, default=None, help="Optional log file path")
    parser.add_argument("--log-level", dest="log_level", default=None, help="Logging level (DEBUG, INFO, ...)")
    parser.add_argument("--dump-table", dest="dump_table", action="store_true", help="Log the full best-path table")
    return parser


def run(config: ServiceConfig, stream: TextIO, out: TextIO, dump_table: bool = False) -> int:
    request = read_request(stream, strict=config.strict)
    service = BestRateService(
        algebra=config.path_algebra(),
        link_venues=config.link_venues,
        vectorize=config.vectorize,
    )
    answers = service.process(request)
    if dump_table and service.table is not None:
        logger.info(
            "Best-path table:\n%s",
            format_table(service.table, service.registry, config.rate_format),
        )
    out.write(
        format_response(
            zip(request.rate_requests.values(), answers),
            rate_format=config.rate_format,
            missing_rate_text=config.missing_rate_text,
        )
    )
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    load_dotenv(override=False)

    try:
        config = build_config(
            args.config,
            overrides={
                "algebra": args.algebra,
                "link_venues": args.link_venues,
                "strict": args.strict,
                "log_level": args.log_level.upper() if args.log_level else None,
            },
        )
    except ConfigError as e:
        setup_logger(args.log_file).error("%s", e)
        return EXIT_USAGE

    log = setup_logger(args.log_file, config.log_level)
    log.debug("Configuration: %s", config.to_dict())

    try:
        if args.input is not None:
            with open(args.input, "r", encoding="utf-8") as fh:
                return run(config, fh, sys.stdout, args.dump_table)
        return run(config, sys.stdin, sys.stdout, args.dump_table)
    except LineParseError as e:
        log.error("%s", e)
        return EXIT_USAGE


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
