"""Load calculation inputs from, and save results to, JSON files.

Provides helpers for reading an input JSON file into a typed
``CalculationInput`` (via ``types.py``) or a raw dict, and for writing a
``DetectionResult`` back out in the wire shape.

Used by ``scripts/calculate.py``, the command-line calculator.
"""

from __future__ import annotations

import json
from pathlib import Path

from .types import CalculationInput, DetectionResult


def load_input_dict(path: Path) -> dict:
    """Load a JSON input file and return the raw dict.

    Raises ValueError if the file is not ``.json`` or its top level is not
    an object.
    """
    path = Path(path)
    if path.suffix.lower() != ".json":
        raise ValueError(f"Unsupported file extension: {path}")
    with open(path) as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object at the top of {path}")
    return data


def load_input(path: Path) -> CalculationInput:
    """Load a JSON input file and return a normalized ``CalculationInput``."""
    return CalculationInput.from_dict(load_input_dict(path))


def save_result(result: DetectionResult, path: Path) -> None:
    """Write a result to a JSON file.

    Creates parent directories if they don't exist.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(result.to_dict(), f, indent=2)
        f.write("\n")
