from __future__ import annotations

import pytest

from prize_wheel.verify import (
    MAX_REPORTED_ANOMALIES,
    DistributionReport,
    format_report,
    main,
    run_distribution_check,
)
from prize_wheel.wheel_core import InvalidConfiguration


def test_six_prize_distribution_is_uniform_and_in_range() -> None:
    report = run_distribution_check(6, 60_000, seed=1234)

    assert report.prize_count == 6
    assert sum(report.histogram) == 60_000
    assert report.anomalies == ()
    for freq in report.frequencies():
        assert freq == pytest.approx(1 / 6, abs=0.01)
    assert report.max_deviation() < 0.01


def test_same_seed_same_histogram() -> None:
    a = run_distribution_check(5, 5_000, seed=42)
    b = run_distribution_check(5, 5_000, seed=42)
    assert a == b


def test_rejects_invalid_prize_count_before_spinning() -> None:
    with pytest.raises(InvalidConfiguration):
        run_distribution_check(0, 10, seed=1)


def test_zero_iterations_is_an_empty_report() -> None:
    report = run_distribution_check(3, 0, seed=1)
    assert report.histogram == (0, 0, 0)
    assert report.frequencies() == (0.0, 0.0, 0.0)


def test_format_report_lists_anomalies_when_present() -> None:
    clean = DistributionReport(prize_count=2, iterations=4, histogram=(2, 2), anomalies=())
    assert format_report(clean) == [
        "Prize distribution after 4 spins:",
        "  [0] => 2",
        "  [1] => 2",
        "No index anomalies detected.",
    ]

    dirty = DistributionReport(
        prize_count=2,
        iterations=4,
        histogram=(2, 1),
        anomalies=("BAD_INDEX 7 for rot 1800",),
    )
    lines = format_report(dirty)
    assert lines[-2:] == ["Anomalies:", "BAD_INDEX 7 for rot 1800"]


def test_cli_prints_histogram(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["4", "1000", "--seed", "7"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "Prize distribution after 1000 spins:"
    assert [line.split("=>")[0].strip() for line in out[1:5]] == ["[0]", "[1]", "[2]", "[3]"]
    assert sum(int(line.split("=>")[1]) for line in out[1:5]) == 1000
    assert out[-1] == "No index anomalies detected."


def test_cli_defaults_to_six_segments() -> None:
    assert main([]) == 0


def test_cli_reports_invalid_configuration(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["0", "10"]) == 2
    assert "prize_count" in capsys.readouterr().err


def test_format_report_caps_listed_anomalies() -> None:
    anomalies = tuple(f"BAD_INDEX {i} for rot {1800 + i}" for i in range(MAX_REPORTED_ANOMALIES + 10))
    report = DistributionReport(prize_count=2, iterations=30, histogram=(15, 15), anomalies=anomalies)

    lines = format_report(report)
    assert len(lines) == 1 + 2 + 1 + MAX_REPORTED_ANOMALIES
    assert lines[4:] == list(anomalies[:MAX_REPORTED_ANOMALIES])
    assert anomalies[-1] not in lines
