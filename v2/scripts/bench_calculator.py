#!/usr/bin/env python3
"""Benchmark the visibility engine and the pairwise adapter path.

Usage (from v2/):
    python scripts/bench_calculator.py              # default: 3 iterations, 20 tokens
    python scripts/bench_calculator.py -n 5         # 5 iterations
    python scripts/bench_calculator.py -t 40        # 40 tokens (1560 pairs)
    python scripts/bench_calculator.py --sources 50 # 50 darkness sources
"""

import argparse
import asyncio
import random
import statistics
import sys
import time
from pathlib import Path

# Add v2/ to path
SCRIPT_DIR = Path(__file__).resolve().parent
V2_DIR = SCRIPT_DIR.parent
sys.path.insert(0, str(V2_DIR))

from extraction.batch import calculate_pairwise  # noqa: E402
from extraction.collaborators import AdapterDependencies  # noqa: E402
from golden.scenarios import GOLDEN_SCENARIOS  # noqa: E402
from visibility.calculator import calculate  # noqa: E402
from visibility.types import CalculationInput  # noqa: E402


class _Senses:
    def get_senses(self, token):
        return {
            "precise": {"vision": {"range": "Infinity"}, "darkvision": {"range": 60}},
            "imprecise": {"tremorsense": {"range": 30}},
        }


class _Sources:
    def __init__(self, sources):
        self.sources = sources

    def get_darkness_sources(self):
        return self.sources


def _tokens(count: int, rng: random.Random) -> list[dict]:
    return [
        {"id": f"t{i}", "x": rng.randrange(0, 4000, 100), "y": rng.randrange(0, 4000, 100)}
        for i in range(count)
    ]


def _sources(count: int, rng: random.Random) -> list[dict]:
    return [
        {
            "id": f"d{i}",
            "x": rng.uniform(0, 4000),
            "y": rng.uniform(0, 4000),
            "radius": rng.uniform(50, 300),
            "rank": rng.choice([None, 1, 2, 4]),
        }
        for i in range(count)
    ]


def _time_runs(label: str, iterations: int, fn) -> None:
    print(f"{label}")
    print("  Warmup...", end=" ", flush=True)
    fn()
    print("done")
    times_ms = []
    for i in range(iterations):
        start = time.perf_counter()
        fn()
        elapsed_ms = (time.perf_counter() - start) * 1000
        times_ms.append(elapsed_ms)
        print(f"  Run {i + 1}: {elapsed_ms:.1f} ms")
    print(f"  Median: {statistics.median(times_ms):.1f} ms")
    print(f"  Mean:   {statistics.mean(times_ms):.1f} ms")
    if len(times_ms) > 1:
        print(f"  Stdev:  {statistics.stdev(times_ms):.1f} ms")
    print()


def main():
    parser = argparse.ArgumentParser(
        description="Benchmark the visibility calculator"
    )
    parser.add_argument(
        "-n",
        "--iterations",
        type=int,
        default=3,
        help="Number of iterations (default: 3)",
    )
    parser.add_argument(
        "-t",
        "--tokens",
        type=int,
        default=20,
        help="Number of tokens for the pairwise run (default: 20)",
    )
    parser.add_argument(
        "--sources",
        type=int,
        default=10,
        help="Number of circular darkness sources (default: 10)",
    )
    parser.add_argument(
        "--repeat",
        type=int,
        default=1000,
        help="Passes over the golden inputs per engine run (default: 1000)",
    )
    parser.add_argument("--seed", type=int, default=1)
    args = parser.parse_args()

    rng = random.Random(args.seed)
    inputs = [CalculationInput.from_dict(s.input) for s in GOLDEN_SCENARIOS]

    def run_engine():
        for _ in range(args.repeat):
            for inp in inputs:
                calculate(inp)

    calls = args.repeat * len(inputs)
    _time_runs(f"Engine: {calls} calculations", args.iterations, run_engine)

    tokens = _tokens(args.tokens, rng)
    deps = AdapterDependencies(
        senses=_Senses(), darkness_sources=_Sources(_sources(args.sources, rng))
    )

    def run_pairwise():
        asyncio.run(calculate_pairwise(tokens, tokens, deps))

    pairs = args.tokens * (args.tokens - 1)
    _time_runs(
        f"Pairwise: {pairs} pairs, {args.sources} darkness sources",
        args.iterations,
        run_pairwise,
    )


if __name__ == "__main__":
    main()
