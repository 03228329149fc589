#!/usr/bin/env python3
"""Run the visibility engine on a JSON input.

Usage (from v2/):
    python scripts/calculate.py pair.json                # result to stdout
    python scripts/calculate.py pair.json -o result.json # result to a file
    cat pair.json | python scripts/calculate.py -        # input from stdin
    python scripts/calculate.py pair.json --echo-input   # also print normalized input
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add v2/ to path
SCRIPT_DIR = Path(__file__).resolve().parent
V2_DIR = SCRIPT_DIR.parent
sys.path.insert(0, str(V2_DIR))

from visibility.calculator import calculate  # noqa: E402
from visibility.input_io import load_input_dict, save_result  # noqa: E402
from visibility.types import CalculationInput  # noqa: E402

logger = logging.getLogger("calculate")


def _read_input(source: str) -> dict:
    if source == "-":
        data = json.load(sys.stdin)
        if not isinstance(data, dict):
            raise ValueError("Expected a JSON object on stdin")
        return data
    return load_input_dict(Path(source))


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Calculate a visibility state from a JSON input"
    )
    parser.add_argument("input", help="Input JSON file, or - for stdin")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Write the result to this file instead of stdout",
    )
    parser.add_argument(
        "--echo-input",
        action="store_true",
        help="Print the normalized input before the result",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        raw = _read_input(args.input)
    except (OSError, ValueError) as e:
        logger.error("Could not read input: %s", e)
        return 1

    inp = CalculationInput.from_dict(raw)
    logger.debug("Normalized input: %s", inp.to_dict())
    if args.echo_input:
        print(json.dumps(inp.to_dict(), indent=2))

    result = calculate(inp)
    if args.output:
        save_result(result, args.output)
        logger.debug("Wrote %s", args.output)
    else:
        print(json.dumps(result.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
