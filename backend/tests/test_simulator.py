"""Tests for the autoheal-simulate command."""

import json
from unittest.mock import patch

import httpx
from click.testing import CliRunner

from autoheal.cli.simulator import build_failures, simulate
from autoheal.schemas.failure import FailureCreate


def test_build_failures_cycles_scenarios() -> None:
    failures = build_failures(3, "demo")

    assert [f["suite"] for f in failures] == ["authentication", "dashboard", "authentication"]
    assert all(f["repo"] == "demo" for f in failures)
    assert failures[0]["currentSelector"] in failures[0]["errorMessage"]
    # Every payload is accepted by the ingestion schema
    for failure in failures:
        FailureCreate.model_validate(failure)


def test_text_output() -> None:
    result = CliRunner().invoke(simulate, [])

    assert result.exit_code == 0
    assert "Selector:   [data-testid=\"login-submit-button\"]" in result.output
    assert "2 failure(s) generated" in result.output


def test_json_output() -> None:
    result = CliRunner().invoke(simulate, ["--json", "--count", "3", "--repo", "shop"])

    assert result.exit_code == 0
    failures = json.loads(result.output)
    assert len(failures) == 3
    assert {f["repo"] for f in failures} == {"shop"}


def test_count_must_be_positive() -> None:
    assert CliRunner().invoke(simulate, ["--count", "0"]).exit_code != 0


def test_submit_posts_each_failure() -> None:
    with patch("autoheal.cli.simulator.submit_failure", side_effect=["id-1", "id-2"]) as submit:
        result = CliRunner().invoke(simulate, ["--submit", "http://localhost:8000"])

    assert result.exit_code == 0
    assert submit.call_count == 2
    assert "-> id-1" in result.output
    assert "-> id-2" in result.output


def test_submit_failure_exits_nonzero() -> None:
    error = httpx.ConnectError("connection refused")
    with patch("autoheal.cli.simulator.submit_failure", side_effect=error):
        result = CliRunner().invoke(simulate, ["--submit", "http://localhost:9"])

    assert result.exit_code == 1
    assert "Failed to submit" in result.output
