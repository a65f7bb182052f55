#!/usr/bin/env python3
"""Benchmark script for stackfold performance testing.

Outputs results in JSON format compatible with github-action-benchmark.
"""

from __future__ import annotations

import argparse
import json
import time
from pathlib import Path

_BLOCK = """goroutine {id} [chan receive, {minutes} minutes]:
main.worker(0xc0000{id:05x}, 0x{arg:x})
\t/home/user/src/app/worker.go:{line} +0x1d
main.pool.func1()
\t/home/user/src/app/pool.go:42 +0x2b
created by main.pool in goroutine 1
\t/home/user/src/app/pool.go:40 +0x55

"""


def synthetic_dump(goroutines: int) -> str:
    """Build a dump where goroutines fall into a handful of groups."""
    blocks = [
        _BLOCK.format(id=i + 1, minutes=i % 7, arg=i % 3, line=10 + i % 5)
        for i in range(goroutines)
    ]
    return "panic: benchmark\n\n" + "".join(blocks)


def benchmark_import_time() -> float:
    """Measure import time of stackfold package."""
    start = time.perf_counter()
    import stackfold  # noqa: F401

    return time.perf_counter() - start


def benchmark_parse(text: str) -> float:
    """Measure lenient parsing of a dump."""
    from stackfold import scan_dump

    start = time.perf_counter()
    scan_dump(text)
    return time.perf_counter() - start


def benchmark_aggregate(text: str) -> float:
    """Measure aggregation of a parsed dump."""
    from stackfold import SimilarityPolicy, aggregate, parse_dump

    goroutines = parse_dump(text)
    start = time.perf_counter()
    aggregate(goroutines, SimilarityPolicy.ANY_VALUE)
    return time.perf_counter() - start


def main() -> None:
    """Run benchmarks and output results."""
    parser = argparse.ArgumentParser(description="Run stackfold benchmarks")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("benchmark-results.json"),
        help="Output file for benchmark results",
    )
    parser.add_argument(
        "--goroutines",
        type=int,
        default=10000,
        help="Goroutines in the synthetic dump",
    )
    args = parser.parse_args()

    text = synthetic_dump(args.goroutines)
    results = []

    # Import time
    import_time = benchmark_import_time()
    results.append(
        {
            "name": "Import Time",
            "unit": "seconds",
            "value": import_time,
        }
    )

    # Parsing
    results.append(
        {
            "name": f"Parse ({args.goroutines} goroutines)",
            "unit": "seconds",
            "value": benchmark_parse(text),
        }
    )

    # Aggregation
    results.append(
        {
            "name": f"Aggregate ({args.goroutines} goroutines)",
            "unit": "seconds",
            "value": benchmark_aggregate(text),
        }
    )

    # Write results
    args.output.write_text(json.dumps(results, indent=2))
    print(f"Benchmark results written to {args.output}")
    for r in results:
        print(f"  {r['name']}: {r['value']:.4f} {r['unit']}")


if __name__ == "__main__":
    main()
