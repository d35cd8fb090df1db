"""
Market Radar - Command-Line Entrypoint

Configures structlog, runs one market analysis and prints the report as JSON.

Run via:
    python -m src.main "iphone 13" --official-stores --limit 100
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import structlog

from src.config import settings
from src.errors import NoDataError
from src.models.analysis import MarketAnalysis
from src.pipeline.meli import MercadoLibreClient
from src.pipeline.orchestrator import MarketAnalyzer


# ---------------------------------------------------------------------------
# Structlog Configuration
# ---------------------------------------------------------------------------


def _configure_logging(log_level: str = "INFO") -> None:
    """
    Set up structured logging with JSON output on stderr.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
    """
    level = getattr(logging, log_level.upper())

    # Configure stdlib logging first (for third-party libraries)
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    # stdout is reserved for the report itself
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Analyze the MercadoLibre market for a search keyword.",
    )
    parser.add_argument("query", help="Search keyword, e.g. 'iphone 13'.")
    parser.add_argument(
        "--official-stores",
        action="store_true",
        help="Only analyze listings from official stores.",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help=f"Listings to analyze (capped at {settings.MAX_LISTINGS}).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser.parse_args(argv)


async def run(query: str, official_stores_only: bool, limit: int | None) -> MarketAnalysis:
    async with MercadoLibreClient() as client:
        analyzer = MarketAnalyzer(client)
        return await analyzer.analyze_market(
            query,
            official_stores_only,
            access_token=settings.MELI_ACCESS_TOKEN or None,
            limit=limit,
        )


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.log_level)
    logger = structlog.get_logger(__name__)

    if not settings.MELI_ACCESS_TOKEN:
        logger.warning("config_meli_access_token_missing", note="calling API anonymously")

    try:
        report = asyncio.run(run(args.query, args.official_stores, args.limit))
    except NoDataError as e:
        logger.error("market_analysis_failed", query=args.query, error=str(e))
        return 1

    print(report.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
