#!/usr/bin/env python3
"""Run the unit tests (engine, adapter, golden scenarios) with coverage.

Produces a terminal summary and an HTML report under ``v2/coverage_py/``.

Usage (from anywhere):
    python scripts/run_coverage.py            # terminal + HTML report
    python scripts/run_coverage.py --open     # also open HTML report in browser
    python scripts/run_coverage.py --fail-under 90
"""

import argparse
import subprocess
import sys
from pathlib import Path

SCRIPT_DIR = Path(__file__).resolve().parent
V2_DIR = SCRIPT_DIR.parent
REPO_DIR = V2_DIR.parent
COV_DIR = V2_DIR / "coverage_py"
PACKAGES = ("visibility", "extraction", "golden")


def run(*args: str) -> None:
    """Run ``python -m ...`` from the repo root, exiting on failure."""
    result = subprocess.run([sys.executable, "-m", *args], cwd=str(REPO_DIR))
    if result.returncode != 0:
        sys.exit(result.returncode)


def main() -> None:
    parser = argparse.ArgumentParser(description="Run tests with coverage")
    parser.add_argument(
        "--open", action="store_true", help="Open the HTML report"
    )
    parser.add_argument(
        "--fail-under",
        type=float,
        default=0.0,
        metavar="PCT",
        help="Exit non-zero if total coverage is below PCT",
    )
    args = parser.parse_args()

    data_file = str(COV_DIR / ".coverage")
    source = ",".join(str(V2_DIR / p) for p in PACKAGES)

    print("Running unit tests with coverage...")
    run(
        "coverage",
        "run",
        f"--data-file={data_file}",
        f"--source={source}",
        "--omit=*_test.py",
        "-m",
        "pytest",
        *(str(V2_DIR / p) for p in PACKAGES),
    )

    print("\n=== Coverage Report ===")
    run(
        "coverage",
        "report",
        f"--data-file={data_file}",
        f"--fail-under={args.fail_under}",
    )

    html_dir = str(COV_DIR / "html")
    print("\nGenerating HTML report...")
    run("coverage", "html", f"--data-file={data_file}", f"--directory={html_dir}")

    index = COV_DIR / "html" / "index.html"
    print(f"HTML report: {index}")

    if args.open:
        import webbrowser

        webbrowser.open(index.as_uri())


if __name__ == "__main__":
    main()
