"""Golden scenarios for the visibility engine.

Pins the arbitration model's behaviour on named, hand-checked cases: each
scenario is a wire-shaped input plus the exact result it must produce. The
list doubles as a regression suite (``scenarios_test.py`` parametrizes over
it) and as a command-line checker for comparing engine revisions.

Edge cases where a first-match engine would disagree with arbitration
(tremorsense against hearing, see-invisibility, the dazzled gate) are
included on purpose.
"""

import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# Add v2/ to path for direct script runs
sys.path.insert(0, str(Path(__file__).parent.parent))

from visibility.calculator import calculate_json

INF = "Infinity"


def _observed(sense: str, state: str = "observed", precise: bool = True) -> dict:
    return {"state": state, "detection": {"isPrecise": precise, "sense": sense}}


def _hidden(sense: str) -> dict:
    return _observed(sense, "hidden", precise=False)


UNDETECTED = {"state": "undetected", "detection": None}


def make_input(
    lighting: str = "bright",
    precise: Optional[dict] = None,
    imprecise: Optional[dict] = None,
    conditions: Optional[dict] = None,
    auxiliary: Optional[list[str]] = None,
    traits: Optional[list[str]] = None,
    target_movement: object = 0,
    observer_movement: object = 0,
    observer_lighting: str = "bright",
    concealment: bool = False,
    **extra: object,
) -> dict:
    """Build a wire-shaped input with senses given as ``{name: range}``."""
    inp = {
        "target": {
            "lightingLevel": lighting,
            "concealment": concealment,
            "auxiliary": auxiliary or [],
            "traits": traits or [],
            "movementAction": target_movement,
        },
        "observer": {
            "precise": {k: {"range": v} for k, v in (precise or {}).items()},
            "imprecise": {
                k: {"range": v} for k, v in (imprecise or {}).items()
            },
            "conditions": conditions or {},
            "lightingLevel": observer_lighting,
            "movementAction": observer_movement,
        },
    }
    inp.update(extra)
    return inp


@dataclass
class GoldenScenario:
    """One input and the result it must produce."""

    name: str
    input: dict
    expected: dict
    notes: str = ""


GOLDEN_SCENARIOS: list[GoldenScenario] = [
    # -- Reference scenarios --
    GoldenScenario(
        name="bright_vision",
        input={
            "target": {"lightingLevel": "bright", "auxiliary": []},
            "observer": {
                "precise": {"vision": {"range": INF}},
                "imprecise": {},
                "conditions": {},
            },
        },
        expected=_observed("vision"),
    ),
    GoldenScenario(
        name="dim_vision",
        input=make_input("dim", precise={"vision": INF}),
        expected=_observed("vision", "concealed"),
    ),
    GoldenScenario(
        name="darkness_vision_and_hearing",
        input=make_input(
            "darkness", precise={"vision": INF}, imprecise={"hearing": 60}
        ),
        expected=_hidden("hearing"),
    ),
    GoldenScenario(
        name="blinded_no_other_senses",
        input=make_input(
            "dim", precise={"vision": INF}, conditions={"blinded": True}
        ),
        expected=UNDETECTED,
    ),
    GoldenScenario(
        name="invisible_grounded_tremorsense",
        input=make_input(
            auxiliary=["invisible"], imprecise={"tremorsense": 30}
        ),
        expected=_hidden("tremorsense"),
    ),
    # -- Vision tiers --
    GoldenScenario(
        name="greater_darkvision_in_greater_darkness",
        input=make_input(
            "greaterMagicalDarkness", precise={"greaterDarkvision": 60}
        ),
        expected=_observed("greaterDarkvision"),
    ),
    GoldenScenario(
        name="darkvision_in_greater_darkness",
        input=make_input("greaterMagicalDarkness", precise={"darkvision": 60}),
        expected=_observed("darkvision", "concealed"),
    ),
    GoldenScenario(
        name="darkvision_in_magical_darkness",
        input=make_input("magicalDarkness", precise={"darkvision": 60}),
        expected=_observed("darkvision"),
    ),
    GoldenScenario(
        name="low_light_in_dim",
        input=make_input("dim", precise={"low-light-vision": INF}),
        expected=_observed("lowLightVision"),
        notes="Kebab-case spelling resolves to the canonical sense name.",
    ),
    GoldenScenario(
        name="low_light_in_darkness",
        input=make_input("darkness", precise={"lowLightVision": INF}),
        expected=UNDETECTED,
    ),
    GoldenScenario(
        name="observer_in_magical_darkness",
        input=make_input(
            precise={"vision": INF}, observer_lighting="magicalDarkness"
        ),
        expected=UNDETECTED,
        notes="Magical darkness around the observer blinds ordinary vision.",
    ),
    GoldenScenario(
        name="observer_in_plain_darkness",
        input=make_input(precise={"vision": INF}, observer_lighting="darkness"),
        expected=_observed("vision"),
    ),
    GoldenScenario(
        name="ray_through_greater_darkness",
        input=make_input(
            precise={"darkvision": 60},
            rayDarkness={
                "passesThroughDarkness": True,
                "rank": 4,
                "lightingLevel": "greaterMagicalDarkness",
            },
        ),
        expected=_observed("darkvision", "concealed"),
    ),
    GoldenScenario(
        name="no_line_of_sight",
        input=make_input(
            precise={"vision": INF},
            imprecise={"hearing": INF},
            hasLineOfSight=False,
        ),
        expected=_hidden("hearing"),
    ),
    # -- Modifiers --
    GoldenScenario(
        name="dazzled_vision_only",
        input=make_input(precise={"vision": INF}, conditions={"dazzled": True}),
        expected=_observed("vision", "concealed"),
    ),
    GoldenScenario(
        name="dazzled_with_echolocation",
        input=make_input(
            precise={"vision": INF, "echolocation": 40},
            conditions={"dazzled": True},
        ),
        expected=_observed("vision"),
        notes="Dazzled only matters when vision is the sole precise sense.",
    ),
    GoldenScenario(
        name="target_concealment",
        input=make_input(precise={"vision": INF}, concealment=True),
        expected=_observed("vision", "concealed"),
    ),
    GoldenScenario(
        name="see_invisibility",
        input=make_input(
            auxiliary=["invisible"],
            precise={"vision": INF, "see-invisibility": INF},
        ),
        expected=_observed("see-invisibility", "concealed"),
    ),
    GoldenScenario(
        name="invisible_heard",
        input=make_input(
            auxiliary=["invisible"],
            precise={"vision": INF},
            imprecise={"hearing": INF},
        ),
        expected=UNDETECTED,
    ),
    # -- Precise non-visual --
    GoldenScenario(
        name="echolocation_when_deafened",
        input=make_input(
            "darkness",
            precise={"echolocation": 40},
            conditions={"deafened": True},
        ),
        expected=UNDETECTED,
    ),
    GoldenScenario(
        name="lifesense_undead_construct",
        input=make_input(
            "darkness", precise={"lifesense": 30}, traits=["construct", "undead"]
        ),
        expected=_observed("lifesense"),
    ),
    GoldenScenario(
        name="lifesense_construct",
        input=make_input("darkness", precise={"lifesense": 30}, traits=["construct"]),
        expected=UNDETECTED,
    ),
    GoldenScenario(
        name="blindsense_generic",
        input=make_input(
            "greaterMagicalDarkness",
            precise={"blindsense": 30},
            conditions={"blinded": True},
        ),
        expected=_observed("blindsense"),
    ),
    # -- Imprecise arbitration --
    GoldenScenario(
        name="tremorsense_beats_hearing",
        input=make_input(
            "darkness", imprecise={"hearing": INF, "tremorsense": 30}
        ),
        expected=_hidden("tremorsense"),
    ),
    GoldenScenario(
        name="flying_target_hearing",
        input=make_input(
            "darkness",
            imprecise={"hearing": INF, "tremorsense": 30},
            target_movement="fly",
        ),
        expected=_hidden("hearing"),
    ),
    GoldenScenario(
        name="petal_step_scent",
        input=make_input(
            "darkness",
            imprecise={"tremorsense": 30, "scent": 30},
            auxiliary=["petal-step"],
        ),
        expected=_hidden("scent"),
    ),
    GoldenScenario(
        name="sound_blocked_scent_survives",
        input=make_input(
            "darkness",
            precise={"echolocation": 40},
            imprecise={"hearing": INF, "scent": 30},
            soundBlocked=True,
        ),
        expected=_hidden("scent"),
    ),
    GoldenScenario(
        name="concealed_vision_beats_hearing",
        input=make_input(
            "dim", precise={"vision": INF}, imprecise={"hearing": INF}
        ),
        expected=_observed("vision", "concealed"),
    ),
    # -- Normalization --
    GoldenScenario(
        name="empty_input",
        input={},
        expected=UNDETECTED,
    ),
    GoldenScenario(
        name="zero_range_sense_disabled",
        input=make_input("darkness", precise={"echolocation": 0}),
        expected=UNDETECTED,
    ),
]


def diff_results(expected: dict, actual: dict) -> list[str]:
    """Field-by-field differences between two wire results."""
    diffs = []
    if expected.get("state") != actual.get("state"):
        diffs.append(f"state: {expected.get('state')} vs {actual.get('state')}")
    exp_det = expected.get("detection")
    act_det = actual.get("detection")
    if (exp_det is None) != (act_det is None):
        diffs.append(f"detection: {exp_det} vs {act_det}")
    elif exp_det is not None:
        for key in ("isPrecise", "sense"):
            if exp_det.get(key) != act_det.get(key):
                diffs.append(
                    f"detection.{key}: {exp_det.get(key)} vs {act_det.get(key)}"
                )
    return diffs


def run_scenario(
    scenario: GoldenScenario, verbose: bool = False
) -> tuple[bool, list[str], float]:
    """Run one scenario. Returns (success, diffs, elapsed seconds)."""
    t0 = time.perf_counter()
    try:
        actual = calculate_json(scenario.input)
    except Exception as e:
        return False, [f"engine raised: {e!r}"], time.perf_counter() - t0
    elapsed = time.perf_counter() - t0

    diffs = diff_results(scenario.expected, actual)
    if verbose and diffs:
        print(f"\nDifferences in {scenario.name}:")
        for diff in diffs:
            print(f"  - {diff}")
    return len(diffs) == 0, diffs, elapsed


def _format_result(
    name: str, success: bool, diffs: list[str], elapsed: float, verbose: bool
) -> str:
    time_str = f"  ({elapsed * 1e6:.0f}us)"
    if success:
        return f"✓ {name}{time_str}"
    lines = [f"✗ {name}{time_str}"]
    if verbose:
        for diff in diffs:
            lines.append(f"    {diff}")
    return "\n".join(lines)


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point with pytest-compatible exit codes."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Check the visibility engine against golden scenarios"
    )
    parser.add_argument(
        "--scenario",
        type=str,
        help="Run specific scenario by name",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Print detailed differences",
    )
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Stop on first failure",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List scenario names and exit",
    )
    args = parser.parse_args(argv)

    scenarios = list(GOLDEN_SCENARIOS)
    if args.list:
        for s in scenarios:
            print(s.name)
        return 0
    if args.scenario:
        scenarios = [s for s in scenarios if s.name == args.scenario]
        if not scenarios:
            print(f"Scenario '{args.scenario}' not found")
            return 1

    passed = 0
    failed = 0
    for scenario in scenarios:
        success, diffs, elapsed = run_scenario(scenario)
        print(_format_result(scenario.name, success, diffs, elapsed, args.verbose))
        if success:
            passed += 1
        else:
            failed += 1
            if args.fail_fast:
                print(f"\n{passed} passed, {failed} failed (stopped early)")
                return 1

    print(f"\n{passed} passed, {failed} failed")
    return 0 if failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
