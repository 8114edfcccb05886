import math

import pytest

from newscheck.aggregator import AggregationWeights, ScoreAggregator
from newscheck.models import ClassifierVerdict, ScoreReport


def report(score):
    return ScoreReport(score=score, reasons=[])


def verdict(label, confidence):
    return ClassifierVerdict(label=label, confidence=confidence)


def test_weights_are_normalized():
    weights = AggregationWeights(content=1, source=1, language=1, classifier=1).as_dict()
    assert weights == {"content": 0.25, "source": 0.25, "language": 0.25, "classifier": 0.25}
    assert math.isclose(sum(AggregationWeights().as_dict().values()), 1.0)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"content": -0.1},
        {"content": float("nan")},
        {"content": 0, "source": 0, "language": 0, "classifier": 0},
    ],
)
def test_invalid_weights_rejected(kwargs):
    with pytest.raises(ValueError):
        ScoreAggregator(AggregationWeights(**kwargs))


def test_weights_built_from_settings(settings):
    tuned = settings.model_copy(update={"weight_content": 0.7, "weight_source": 0.3,
                                        "weight_language": 0.0, "weight_classifier": 0.0,
                                        "weights_version": "legacy"})
    weights = AggregationWeights.from_settings(tuned)
    assert weights.version == "legacy"
    aggregator = ScoreAggregator(weights)
    assert aggregator.aggregate(report(80), report(100), report(0), verdict("Fake", 1.0)) == (False, 86)


def test_weighted_sum():
    aggregator = ScoreAggregator(threshold=75)
    # 0.4*80 + 0.2*50 + 0.15*85 + 0.25*90 = 77.25
    assert aggregator.aggregate(report(80), report(50), report(85), verdict("Real", 0.9)) == (False, 77)
    # Fake at 0.9 means a 10% chance of being real.
    assert aggregator.aggregate(report(80), report(50), report(85), verdict("Fake", 0.9)) == (True, 57)


def test_extremes():
    aggregator = ScoreAggregator(threshold=75)
    assert aggregator.aggregate(report(100), report(100), report(100), verdict("Real", 1.0)) == (False, 100)
    assert aggregator.aggregate(report(0), report(0), report(0), verdict("Fake", 1.0)) == (True, 0)


def test_invalid_signals_become_neutral():
    aggregator = ScoreAggregator(threshold=75)
    assert aggregator.aggregate(float("nan"), None, "bad", None) == (True, 50)
    assert aggregator.aggregate(float("inf"), 50, 50, verdict("Real", 0.5)) == (True, 50)


def test_raw_numbers_are_clamped():
    aggregator = ScoreAggregator(threshold=75)
    assert aggregator.aggregate(250, 180, 1000, verdict("Real", 1.0)) == (False, 100)
    assert aggregator.aggregate(-40, -1, -5, verdict("Fake", 1.0)) == (True, 0)


@pytest.mark.parametrize("threshold", [0, 50, 75, 100])
def test_is_fake_follows_threshold(threshold):
    aggregator = ScoreAggregator(threshold=threshold)
    for content in (0, 30, 60, 90):
        is_fake, score = aggregator.aggregate(report(content), report(50), report(70), verdict("Real", 0.6))
        assert 0 <= score <= 100
        assert is_fake == (score < threshold)


def test_aggregation_is_deterministic():
    aggregator = ScoreAggregator()
    args = (report(63), report(50), report(85), verdict("Fake", 0.37))
    first = aggregator.aggregate(*args)
    assert all(aggregator.aggregate(*args) == first for _ in range(20))


@pytest.mark.parametrize(
    "label, confidence, expected",
    [("Real", 0.8, 80), ("Fake", 0.8, 20), ("Fake", 0.0, 100)],
)
def test_classifier_enters_as_probability_of_real(label, confidence, expected):
    only_classifier = AggregationWeights(content=0, source=0, language=0, classifier=1)
    aggregator = ScoreAggregator(only_classifier)

    _, score = aggregator.aggregate(report(0), report(0), report(0), verdict(label, confidence))

    assert score == expected
