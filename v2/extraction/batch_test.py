"""Tests for concurrent pairwise evaluation."""

import asyncio

import extraction.batch as batch
from extraction.batch import calculate_pairwise
from extraction.collaborators import AdapterDependencies
from visibility.types import DetectionResult

TOKENS = [
    {"id": "a", "x": 0, "y": 0},
    {"id": "b", "x": 500, "y": 0},
    {"id": "c", "x": 0, "y": 500, "conditions": ["invisible"]},
]


class VisionOnly:
    async def get_senses(self, token):
        await asyncio.sleep(0)
        return {"precise": {"vision": {"range": "Infinity"}}}


def _states(results):
    return {key: result.state for key, result in results.items()}


class TestCalculatePairwise:
    def test_all_pairs_except_self(self):
        deps = AdapterDependencies(senses=VisionOnly())
        results = asyncio.run(calculate_pairwise(TOKENS, TOKENS, deps))
        assert _states(results) == {
            ("a", "b"): "observed",
            ("a", "c"): "undetected",
            ("b", "a"): "observed",
            ("b", "c"): "undetected",
            ("c", "a"): "observed",
            ("c", "b"): "observed",
        }

    def test_generators_accepted(self):
        results = asyncio.run(
            calculate_pairwise(
                (t for t in TOKENS[:1]), (t for t in TOKENS[1:])
            )
        )
        assert set(results) == {("a", "b"), ("a", "c")}

    def test_invalid_tokens_skipped(self):
        results = asyncio.run(
            calculate_pairwise([TOKENS[0], None, {"id": "x"}], TOKENS[1:2])
        )
        assert set(results) == {("a", "b")}

    def test_failing_pair_does_not_abort_others(self, monkeypatch):
        real = batch.calculate_from_tokens

        async def flaky(observer, target, deps=None, options=None):
            if observer.id == "b":
                raise RuntimeError("boom")
            return await real(observer, target, deps, options)

        monkeypatch.setattr(batch, "calculate_from_tokens", flaky)
        deps = AdapterDependencies(senses=VisionOnly())
        results = asyncio.run(calculate_pairwise(TOKENS[:2], TOKENS[:2], deps))
        assert results[("b", "a")] == DetectionResult()
        assert results[("a", "b")].state == "observed"

    def test_empty(self):
        assert asyncio.run(calculate_pairwise([], TOKENS)) == {}
