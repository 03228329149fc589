"""Pytest integration for the golden scenarios."""

import pytest

from golden.scenarios import GOLDEN_SCENARIOS, diff_results, main, run_scenario


@pytest.mark.parametrize(
    "scenario", GOLDEN_SCENARIOS, ids=[s.name for s in GOLDEN_SCENARIOS]
)
def test_golden(scenario):
    """The engine reproduces the pinned result exactly."""
    success, diffs, _ = run_scenario(scenario, verbose=True)

    if not success:
        error_msg = "Engine output differs:\n"
        for diff in diffs:
            error_msg += f"  - {diff}\n"
        pytest.fail(error_msg)


def test_scenario_names_unique():
    names = [s.name for s in GOLDEN_SCENARIOS]
    assert len(names) == len(set(names))


class TestDiffResults:
    def test_identical(self):
        r = {"state": "hidden", "detection": {"isPrecise": False, "sense": "scent"}}
        assert diff_results(r, dict(r)) == []

    def test_state_and_sense(self):
        expected = {"state": "hidden", "detection": {"isPrecise": False, "sense": "scent"}}
        actual = {"state": "hidden", "detection": {"isPrecise": False, "sense": "hearing"}}
        assert diff_results(expected, actual) == ["detection.sense: scent vs hearing"]

    def test_null_detection(self):
        expected = {"state": "undetected", "detection": None}
        actual = {"state": "observed", "detection": {"isPrecise": True, "sense": "vision"}}
        assert len(diff_results(expected, actual)) == 2


class TestCli:
    def test_all_pass(self, capsys):
        assert main([]) == 0
        assert f"{len(GOLDEN_SCENARIOS)} passed, 0 failed" in capsys.readouterr().out

    def test_single_scenario(self, capsys):
        assert main(["--scenario", "dim_vision"]) == 0
        assert "1 passed" in capsys.readouterr().out

    def test_unknown_scenario(self, capsys):
        assert main(["--scenario", "nope"]) == 1

    def test_list(self, capsys):
        assert main(["--list"]) == 0
        assert "bright_vision" in capsys.readouterr().out
