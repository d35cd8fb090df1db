"""Tests for the command-line entrypoint (src/main.py)."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from structlog.testing import capture_logs

from src.config import CompetitionLevel, settings
from src.errors import NoDataError
from src.main import main, parse_args
from src.models.analysis import (
    ConditionDistribution,
    MarketAnalysis,
    OfficialStoreSummary,
    PriceRange,
)


def _report() -> MarketAnalysis:
    return MarketAnalysis(
        query="tv",
        generated_at=datetime(2026, 5, 1, tzinfo=timezone.utc),
        average_price=10.0,
        price_range=PriceRange(min=5.0, max=15.0),
        total_sellers=2,
        total_listings=2,
        analyzed_listings=2,
        condition_distribution=ConditionDistribution(new=2),
        official_stores=OfficialStoreSummary(),
        competition_level=CompetitionLevel.LOW,
    )


def test_parse_args_defaults() -> None:
    args = parse_args(["iphone 13"])
    assert args.query == "iphone 13"
    assert args.official_stores is False
    assert args.limit is None
    assert args.log_level == "INFO"


def test_parse_args_flags() -> None:
    args = parse_args(["tv", "--official-stores", "--limit", "40", "--log-level", "DEBUG"])
    assert args.official_stores is True
    assert args.limit == 40
    assert args.log_level == "DEBUG"


@pytest.fixture
def quiet_cli():
    """Skip global logging setup and capture structlog events instead."""
    with patch("src.main._configure_logging"), patch.object(
        settings, "MELI_ACCESS_TOKEN", "APP_USR-test"
    ), capture_logs() as logs:
        yield logs


def test_main_prints_report_json(quiet_cli, capsys) -> None:
    with patch("src.main.run", new=AsyncMock(return_value=_report())) as run:
        exit_code = main(["tv", "--limit", "20"])

    assert exit_code == 0
    run.assert_awaited_once_with("tv", False, 20)
    printed = json.loads(capsys.readouterr().out)
    assert printed["query"] == "tv"
    assert printed["competition_level"] == "low"


def test_main_no_data_exits_1(quiet_cli, capsys) -> None:
    with patch("src.main.run", new=AsyncMock(side_effect=NoDataError("tv"))):
        exit_code = main(["tv"])

    assert exit_code == 1
    assert capsys.readouterr().out == ""
    assert [e["event"] for e in quiet_cli] == ["market_analysis_failed"]


def test_main_warns_without_token(capsys) -> None:
    with patch("src.main._configure_logging"), patch.object(
        settings, "MELI_ACCESS_TOKEN", ""
    ), capture_logs() as logs, patch(
        "src.main.run", new=AsyncMock(return_value=_report())
    ):
        assert main(["tv"]) == 0

    assert logs[0]["event"] == "config_meli_access_token_missing"
    assert logs[0]["log_level"] == "warning"
