"""Tests for input normalization and the wire shape."""

import math

from visibility.types import (
    CalculationInput,
    Conditions,
    Detection,
    DetectionResult,
    ObserverState,
    RayDarkness,
    SenseRange,
    TargetState,
    normalize_lighting,
    parse_range,
    range_to_wire,
    state_rank,
)


class TestParseRange:
    def test_numbers(self):
        assert parse_range(30) == 30.0
        assert parse_range(7.5) == 7.5

    def test_infinity_words(self):
        for word in ("Infinity", "infinite", "inf", " INF "):
            assert math.isinf(parse_range(word))

    def test_numeric_string(self):
        assert parse_range("60") == 60.0

    def test_disabled(self):
        for value in (0, -5, None, False, True, "far", float("nan"), [30]):
            assert parse_range(value) == 0.0

    def test_float_infinity(self):
        assert math.isinf(parse_range(float("inf")))

    def test_negative_infinity(self):
        assert parse_range(float("-inf")) == 0.0

    def test_wire(self):
        assert range_to_wire(math.inf) == "Infinity"
        assert range_to_wire(30.0) == 30.0


class TestStateRank:
    def test_order(self):
        ranks = [state_rank(s) for s in ("observed", "concealed", "hidden", "undetected")]
        assert ranks == [1, 2, 3, 4]

    def test_unknown_ranks_last(self):
        assert state_rank("bogus") == 999


class TestSenseRange:
    def test_dict(self):
        assert SenseRange.from_dict({"range": 30}) == SenseRange(range=30)

    def test_bare_value(self):
        assert SenseRange.from_dict("Infinity").range == math.inf

    def test_active(self):
        assert SenseRange(range=1).active
        assert not SenseRange().active

    def test_round_trip_infinite(self):
        assert SenseRange(range=math.inf).to_dict() == {"range": "Infinity"}


class TestFromDictTotality:
    def test_empty_input(self):
        inp = CalculationInput.from_dict({})
        assert inp == CalculationInput()
        assert inp.has_line_of_sight is None
        assert inp.ray_darkness is None

    def test_garbage_input(self):
        assert CalculationInput.from_dict("nope") == CalculationInput()
        assert CalculationInput.from_dict(None) == CalculationInput()

    def test_wrong_types(self):
        inp = CalculationInput.from_dict(
            {
                "target": {
                    "lightingLevel": "twilight",
                    "auxiliary": "invisible",
                    "traits": ["undead", 7],
                    "movementAction": True,
                },
                "observer": {
                    "precise": ["vision"],
                    "imprecise": {"hearing": None, "scent": {"range": "x"}},
                    "conditions": "blinded",
                },
                "rayDarkness": {"rank": float("nan"), "lightingLevel": 3},
                "hasLineOfSight": "yes",
            }
        )
        assert inp.target == TargetState(lighting_level="darkness", traits=["undead"])
        assert inp.observer.precise == {}
        assert inp.observer.imprecise == {"scent": SenseRange(range=0)}
        assert inp.observer.conditions == Conditions()
        assert inp.ray_darkness == RayDarkness()
        assert inp.has_line_of_sight is None

    def test_false_sense_entry_dropped(self):
        obs = ObserverState.from_dict({"precise": {"vision": False}})
        assert obs.precise == {}

    def test_los_booleans_kept(self):
        assert CalculationInput.from_dict({"hasLineOfSight": False}).has_line_of_sight is False
        assert CalculationInput.from_dict({"hasLineOfSight": True}).has_line_of_sight is True

    def test_lighting_names(self):
        assert normalize_lighting("dim") == "dim"
        assert normalize_lighting(None) == "bright"
        assert normalize_lighting("") == "bright"
        assert normalize_lighting(None, "darkness") == "darkness"
        assert normalize_lighting("twilight") == "darkness"

    def test_ray_darkness_default_tier(self):
        ray = RayDarkness.from_dict({"passesThroughDarkness": True, "rank": 2.0})
        assert ray == RayDarkness(True, 2, "darkness")


class TestWireShape:
    def test_input_to_dict(self):
        inp = CalculationInput.from_dict(
            {
                "target": {"lightingLevel": "dim", "auxiliary": ["invisible"]},
                "observer": {
                    "precise": {"vision": {"range": "Infinity"}},
                    "conditions": {"dazzled": True},
                    "movementAction": "fly",
                },
                "soundBlocked": True,
            }
        )
        assert inp.to_dict() == {
            "target": {
                "lightingLevel": "dim",
                "concealment": False,
                "auxiliary": ["invisible"],
                "traits": [],
                "movementAction": 0,
            },
            "observer": {
                "precise": {"vision": {"range": "Infinity"}},
                "imprecise": {},
                "conditions": {
                    "blinded": False,
                    "deafened": False,
                    "dazzled": True,
                },
                "lightingLevel": "bright",
                "movementAction": "fly",
            },
            "rayDarkness": None,
            "soundBlocked": True,
            "hasLineOfSight": None,
        }

    def test_result_to_dict(self):
        result = DetectionResult(
            state="hidden", detection=Detection(is_precise=False, sense="scent")
        )
        assert result.to_dict() == {
            "state": "hidden",
            "detection": {"isPrecise": False, "sense": "scent"},
        }
        assert result.rank == 3

    def test_undetected_default(self):
        assert DetectionResult().to_dict() == {
            "state": "undetected",
            "detection": None,
        }

    def test_result_from_dict(self):
        assert DetectionResult.from_dict(
            {"state": "observed", "detection": {"isPrecise": True, "sense": "vision"}}
        ) == DetectionResult("observed", Detection(True, "vision"))
        assert DetectionResult.from_dict({"state": "??"}) == DetectionResult()
