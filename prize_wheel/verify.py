"""Offline verification harness for the wheel resolver.

Spins the resolver many times with independently drawn rotations and prints a
per-index histogram plus any out-of-range results. This is a calibration
tool, not part of the game:

    python -m prize_wheel.verify [prize_count] [iterations]
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from dataclasses import dataclass

from .wheel_core import DEFAULT_POINTER_OFFSET_DEG, InvalidConfiguration, resolve

logger = logging.getLogger(__name__)

MAX_REPORTED_ANOMALIES = 20


@dataclass(frozen=True, slots=True)
class DistributionReport:
    prize_count: int
    iterations: int
    histogram: tuple[int, ...]
    anomalies: tuple[str, ...]

    def frequencies(self) -> tuple[float, ...]:
        if self.iterations == 0:
            return tuple(0.0 for _ in self.histogram)
        return tuple(c / self.iterations for c in self.histogram)

    def max_deviation(self) -> float:
        """Largest absolute gap between an observed frequency and 1/prize_count."""

        expected = 1.0 / self.prize_count
        return max((abs(f - expected) for f in self.frequencies()), default=0.0)


def run_distribution_check(
    prize_count: int = 6,
    iterations: int = 200_000,
    *,
    seed: int | None = None,
    full_turns: int = 5,
    pointer_offset: float = DEFAULT_POINTER_OFFSET_DEG,
) -> DistributionReport:
    if iterations < 0:
        raise InvalidConfiguration("iterations must be >= 0")
    # Resolve once up front so an invalid prize_count fails before the loop.
    resolve(0.0, prize_count, pointer_offset)

    rng = random.Random(seed)
    histogram = [0] * prize_count
    anomalies: list[str] = []
    seen: set[str] = set()

    for _ in range(iterations):
        degrees = rng.randint(0, 359)
        total_rotation = full_turns * 360 + degrees
        r = resolve(total_rotation, prize_count, pointer_offset)
        if 0 <= r.index < prize_count:
            histogram[r.index] += 1
        else:
            msg = f"BAD_INDEX {r.index} for rot {total_rotation}"
            if msg not in seen:
                seen.add(msg)
                anomalies.append(msg)

    logger.debug("distribution check done: %d spins, %d anomalies", iterations, len(anomalies))
    return DistributionReport(
        prize_count=prize_count,
        iterations=iterations,
        histogram=tuple(histogram),
        anomalies=tuple(anomalies),
    )


def format_report(report: DistributionReport) -> list[str]:
    lines = [f"Prize distribution after {report.iterations} spins:"]
    lines.extend(f"  [{i}] => {c}" for i, c in enumerate(report.histogram))
    if report.anomalies:
        lines.append("Anomalies:")
        lines.extend(report.anomalies[:MAX_REPORTED_ANOMALIES])
    else:
        lines.append("No index anomalies detected.")
    return lines


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Histogram wheel outcomes over many random spins")
    parser.add_argument("prize_count", nargs="?", type=int, default=6, help="number of segments (default: 6)")
    parser.add_argument("iterations", nargs="?", type=int, default=20000, help="number of spins (default: 20000)")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed for a reproducible run")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

    try:
        report = run_distribution_check(args.prize_count, args.iterations, seed=args.seed)
    except InvalidConfiguration as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    for line in format_report(report):
        print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
