import random

import pytest
from pydantic import ValidationError

from page_translator.schemas.evaluation import EvaluationResult, EvaluationScores, average_score

DIMS = EvaluationScores.dimensions()


def test_nine_dimensions():
    assert len(DIMS) == 9
    assert "trademark_protection" in DIMS
    assert "redundancy_removal" in DIMS


def test_average_is_rounded_mean_and_bounded():
    rng = random.Random(7)
    for _ in range(200):
        values = {d: rng.choice([0, 10, rng.uniform(0, 10)]) for d in DIMS}
        scores = EvaluationScores(**values)
        avg = average_score(scores)
        assert 0 <= avg <= 10
        assert avg == round(sum(values.values()) / len(DIMS), 1)


def test_scores_out_of_range_are_rejected():
    values = {d: 5 for d in DIMS}
    values["accuracy"] = 11
    with pytest.raises(ValidationError):
        EvaluationScores(**values)


def test_unavailable_result_is_zero_and_flagged():
    result = EvaluationResult.unavailable("malformed response")
    assert result.average_score == 0
    assert result.evaluator_available is False
    assert result.reason == "Evaluator unavailable: malformed response"
    assert result.needs_rerun
    assert set(result.scores.values()) == {0.0}


def test_average_score_is_serialized():
    result = EvaluationResult(scores=EvaluationScores(**{d: 9 for d in DIMS}), reason="ok")
    assert result.model_dump()["average_score"] == 9.0
    assert not result.needs_rerun
