"""Aggregator math: weighted score, thresholds, confidence and accuracy."""

from __future__ import annotations

import itertools

import pytest

from signalgate.aggregation import aggregate, consensus_of, estimate_accuracy, weighted_score
from signalgate.labels import Label
from signalgate.signals import SignalSource


def _src(label: Label, confidence: float = 50.0, weight: float = 1.0, name: str = "s") -> SignalSource:
    return SignalSource(name, label, confidence, weight)


# ---------------------------------------------------------------------------
# Weighted score and label
# ---------------------------------------------------------------------------


class TestWeightedScore:
    def test_one_strong_buy_four_neutral(self):
        sources = [_src(Label.STRONG_BUY, 90)] + [_src(Label.NEUTRAL, 50) for _ in range(4)]
        result = aggregate(sources)

        # 100 * 0.9 + 50 * 2.0 = 190 over 2.9
        assert result.final_score == pytest.approx(190 / 2.9)
        assert result.final_score == pytest.approx(65.5172, abs=1e-4)
        assert result.overall_label is Label.BUY
        # mean confidence 58, consensus 4/5 → +8
        assert result.consensus == pytest.approx(0.8)
        assert result.overall_confidence == pytest.approx(66.0)

    def test_zero_total_weight_is_neutral_50(self):
        result = aggregate([_src(Label.STRONG_BUY, 0), _src(Label.SELL, 80, weight=0.0)])
        assert result.final_score == 50.0
        assert result.overall_label is Label.NEUTRAL
        assert result.overall_confidence == 0.0

    def test_empty_input(self):
        result = aggregate([])
        assert result.final_score == 50.0
        assert result.overall_label is Label.NEUTRAL
        assert result.overall_confidence == 0.0
        assert result.component_breakdown == ()

    def test_zero_confidence_is_a_non_vote(self):
        base = [_src(Label.BUY, 80), _src(Label.STRONG_BUY, 60)]
        with_abstainer = base + [_src(Label.STRONG_SELL, 0)]
        assert aggregate(with_abstainer).final_score == pytest.approx(aggregate(base).final_score)
        assert aggregate(with_abstainer).overall_confidence == aggregate(base).overall_confidence

    def test_weights_are_normalised(self):
        a = [_src(Label.BUY, 80, 0.2), _src(Label.SELL, 40, 0.4)]
        b = [_src(Label.BUY, 80, 0.1), _src(Label.SELL, 40, 0.2)]
        assert weighted_score(a) == pytest.approx(weighted_score(b))

    def test_sentiment_labels_share_the_scale(self):
        assert weighted_score([_src(Label.BULLISH, 70)]) == 75.0
        assert weighted_score([_src(Label.BEARISH, 70)]) == 25.0

    def test_breakdown_preserves_order(self):
        sources = [_src(Label.BUY, 70, name="a"), _src(Label.SELL, 60, name="b"), _src(Label.NEUTRAL, 0, name="c")]
        result = aggregate(sources)
        assert [s.source_name for s in result.component_breakdown] == ["a", "b", "c"]
        assert [s.source_name for s in result.active_sources] == ["a", "b"]

    def test_deterministic(self):
        sources = [_src(Label.BUY, 72, 0.3), _src(Label.BEARISH, 55, 0.25), _src(Label.NEUTRAL, 40, 0.1)]
        assert aggregate(sources, 80, 7.0) == aggregate(sources, 80, 7.0)

    def test_raising_one_label_never_lowers_score(self):
        ordered = [Label.STRONG_SELL, Label.SELL, Label.NEUTRAL, Label.BUY, Label.STRONG_BUY]
        others = [_src(Label.SELL, 65, 0.3), _src(Label.BULLISH, 45, 0.2), _src(Label.NEUTRAL, 80, 0.1)]
        for conf, weight in itertools.product([10, 55, 100], [0.05, 0.5, 1.0]):
            scores = [weighted_score(others + [_src(lab, conf, weight)]) for lab in ordered]
            assert scores == sorted(scores)

    @pytest.mark.parametrize("label,expected", [
        (Label.STRONG_BUY, Label.STRONG_BUY),
        (Label.BUY, Label.BUY),
        (Label.NEUTRAL, Label.NEUTRAL),
        (Label.SELL, Label.SELL),
        (Label.STRONG_SELL, Label.STRONG_SELL),
        (Label.BULLISH, Label.BUY),
        (Label.BEARISH, Label.SELL),
    ])
    def test_single_weighted_source_reproduces_its_label(self, label, expected):
        sources = [
            _src(Label.STRONG_SELL, 90, weight=0.0, name="x"),
            _src(label, 70, weight=1.0, name="dominant"),
            _src(Label.STRONG_BUY, 90, weight=0.0, name="y"),
        ]
        result = aggregate(sources)
        assert result.final_score == label.score
        assert result.overall_label is expected

    def test_score_stays_in_bounds(self):
        for labels in itertools.product(list(Label), repeat=3):
            score = aggregate([_src(lab, 60 + i * 10, 0.3) for i, lab in enumerate(labels)]).final_score
            assert 0.0 <= score <= 100.0


# ---------------------------------------------------------------------------
# Confidence
# ---------------------------------------------------------------------------


class TestConfidence:
    def test_capped_at_95(self):
        result = aggregate([_src(Label.STRONG_BUY, 100) for _ in range(3)])
        assert result.overall_confidence == 95.0

    def test_five_strong_buys(self):
        result = aggregate([_src(Label.STRONG_BUY, 90) for _ in range(5)])
        assert result.overall_label is Label.STRONG_BUY
        assert result.overall_confidence >= 90.0
        assert result.overall_confidence == pytest.approx(95.0)

    @pytest.mark.parametrize("label", [Label.BUY, Label.STRONG_BUY, Label.SELL, Label.NEUTRAL])
    def test_raising_confidence_pulls_score_toward_own_label(self, label):
        # more confidence means more effective weight: the score never
        # moves away from the raised source's own label score
        others = [_src(Label.STRONG_BUY, 90, name="a"), _src(Label.SELL, 40, name="b")]
        distances = [
            abs(aggregate(others + [_src(label, c, name="c")]).final_score - label.score)
            for c in range(10, 101, 10)
        ]
        assert all(later <= earlier + 1e-9 for earlier, later in zip(distances, distances[1:]))

    def test_buy_confidence_can_lower_score_beside_strong_buy(self):
        low = aggregate([_src(Label.STRONG_BUY, 90), _src(Label.BUY, 10)]).final_score
        high = aggregate([_src(Label.STRONG_BUY, 90), _src(Label.BUY, 90)]).final_score
        assert low == pytest.approx(97.5)
        assert high == pytest.approx(87.5)

    def test_full_consensus_bonus(self):
        result = aggregate([_src(Label.BUY, 60), _src(Label.STRONG_BUY, 70)])
        assert result.consensus == 1.0
        assert result.overall_confidence == pytest.approx(75.0)

    def test_consensus_of_empty(self):
        assert consensus_of([]) == 0.0

    def test_bullish_and_buy_share_a_bucket(self):
        assert consensus_of([_src(Label.BULLISH), _src(Label.BUY), _src(Label.SELL)]) == pytest.approx(2 / 3)

    def test_consensus_counts_active_sources_only(self):
        sources = [
            _src(Label.BUY, 80, name="a"),
            _src(Label.STRONG_BUY, 70, name="b"),
            _src(Label.SELL, 60, weight=0.0, name="c"),
            _src(Label.STRONG_SELL, 0, name="d"),
        ]
        result = aggregate(sources)
        assert result.consensus == 1.0
        assert result.overall_confidence == pytest.approx(85.0)
        assert [s.source_name for s in result.active_sources] == ["a", "b"]


# ---------------------------------------------------------------------------
# Accuracy estimate
# ---------------------------------------------------------------------------


class TestAccuracy:
    def test_literal_scenario(self):
        sources = [_src(Label.STRONG_BUY, 90)] + [_src(Label.NEUTRAL, 50) for _ in range(4)]
        result = aggregate(sources)
        expected = 60 + 0.8 * 15 + abs(190 / 2.9 - 50) / 50 * 5
        assert result.accuracy_estimate == pytest.approx(expected)

    @pytest.mark.parametrize("bars,bonus", [(0, 0), (49, 0), (50, 10), (99, 10), (100, 20), (500, 20)])
    def test_history_bonus(self, bars, bonus):
        assert estimate_accuracy(bars, 0.0, 50.0) == pytest.approx(60 + bonus)

    def test_calendar_adjustments(self):
        assert estimate_accuracy(0, 0.0, 50.0, calendar_impact=16) == pytest.approx(50)
        assert estimate_accuracy(0, 0.0, 50.0, calendar_impact=4.9) == pytest.approx(65)
        assert estimate_accuracy(0, 0.0, 50.0, calendar_impact=10) == pytest.approx(60)
        assert estimate_accuracy(0, 0.0, 50.0, calendar_impact=None) == pytest.approx(60)

    def test_bounds(self):
        assert estimate_accuracy(1000, 1.0, 100.0, calendar_impact=0) == 95.0
        for bars, consensus, score, impact in itertools.product(
            [0, 60, 200], [0.0, 0.5, 1.0], [0.0, 50.0, 100.0], [None, 0.0, 30.0],
        ):
            assert 45.0 <= estimate_accuracy(bars, consensus, score, impact) <= 95.0
