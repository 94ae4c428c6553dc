from types import SimpleNamespace

import pytest

from spatialunits.processes import Failure, Success, as_outcome, sequence

pytestmark = pytest.mark.unit


def test_success_outputs_are_read_only():
    outcome = Success({"output_table_name": "p1_rsu"})

    assert outcome.ok
    assert bool(outcome)
    with pytest.raises(TypeError):
        outcome.outputs["output_table_name"] = "other"


def test_failure_is_falsy():
    outcome = Failure("empty table")

    assert not outcome.ok
    assert not outcome
    assert outcome.error is None


@pytest.mark.parametrize("value", [None, False])
def test_legacy_failure_signals(value):
    outcome = as_outcome(value)

    assert isinstance(outcome, Failure)
    assert outcome.reason == "process returned failure"


def test_true_is_success_without_outputs():
    outcome = as_outcome(True)

    assert isinstance(outcome, Success)
    assert dict(outcome.outputs) == {}


def test_mapping_is_success():
    outcome = as_outcome({"output_table_name": "p1_rsu"})

    assert dict(outcome.outputs) == {"output_table_name": "p1_rsu"}


def test_results_attribute_is_success():
    outcome = as_outcome(SimpleNamespace(results={"output_table_name": "p1_block"}))

    assert outcome.outputs["output_table_name"] == "p1_block"


def test_outcomes_pass_through():
    failure = Failure("boom")
    assert as_outcome(failure) is failure


def test_unsupported_value_raises():
    with pytest.raises(TypeError, match="Unsupported"):
        as_outcome(42)


def test_sequence_stops_at_first_failure():
    seen = []

    def run_one(item):
        seen.append(item)
        return Failure(f"{item} failed") if item == "b" else Success({item: 1})

    outcome, last, count = sequence(["a", "b", "c"], run_one)

    assert not outcome.ok
    assert outcome.reason == "b failed"
    assert last == "b"
    assert count == 2
    assert seen == ["a", "b"]


def test_sequence_returns_last_success():
    outcome, last, count = sequence([1, 2, 3], lambda i: Success({"n": i}))

    assert outcome.outputs["n"] == 3
    assert last == 3
    assert count == 3


def test_sequence_of_nothing_is_success():
    outcome, last, count = sequence([], lambda i: Failure("never"))

    assert outcome.ok
    assert last is None
    assert count == 0
