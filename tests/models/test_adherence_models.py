"""Tests for adherence models."""

import pytest

from coach_running.models.adherence import (
    AdaptationSuggestion,
    ComplianceReport,
    Priority,
    SuggestionItem,
    Verdict,
)


class TestVerdict:
    """Tests for Verdict severity."""

    def test_less_severe(self):
        assert Verdict.RECOVERY.less_severe() == Verdict.REDUCE
        assert Verdict.REDUCE.less_severe() == Verdict.ADJUST
        assert Verdict.ADJUST.less_severe() == Verdict.MAINTAIN
        assert Verdict.MAINTAIN.less_severe() == Verdict.MAINTAIN

    def test_priority_rank(self):
        assert Priority.HIGH.rank < Priority.MEDIUM.rank < Priority.LOW.rank


class TestComplianceReport:
    """Tests for ComplianceReport."""

    def test_sessions_missed(self):
        report = ComplianceReport(1, sessions_planned=3, sessions_done=1, compliance_percent=33)
        assert report.sessions_missed == 2

    def test_extra_sessions_are_not_negative_missed(self):
        report = ComplianceReport(1, sessions_planned=2, sessions_done=4, compliance_percent=100)
        assert report.sessions_missed == 0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"compliance_percent": 101},
            {"compliance_percent": -1},
            {"compliance_percent": 50, "avg_rpe": 0.5},
            {"compliance_percent": 50, "cross_training_equivalent_minutes": -1.0},
        ],
    )
    def test_out_of_range(self, kwargs):
        with pytest.raises(ValueError):
            ComplianceReport(week_number=1, sessions_planned=3, sessions_done=1, **kwargs)

    def test_dict_round_trip(self):
        report = ComplianceReport(2, 4, 3, 81, avg_rpe=6.5, cross_training_equivalent_minutes=30.0)
        assert ComplianceReport.from_dict(report.to_dict()) == report


class TestAdaptationSuggestion:
    """Tests for AdaptationSuggestion."""

    @pytest.mark.parametrize("volume", [-51, 11])
    def test_volume_bounds(self, volume):
        with pytest.raises(ValueError):
            AdaptationSuggestion(verdict=Verdict.ADJUST, volume_change_percent=volume)

    def test_volume_multiplier(self):
        suggestion = AdaptationSuggestion(verdict=Verdict.REDUCE, volume_change_percent=-20)
        assert suggestion.volume_multiplier == pytest.approx(0.8)

    def test_from_dict(self):
        suggestion = AdaptationSuggestion.from_dict(
            {
                "verdict": "RECOVERY",
                "volume_change_percent": -35,
                "items": [
                    {"category": "recovery", "priority": "HIGH", "title": "Recovery week", "detail": "Rest"}
                ],
                "overall_message": "Time to recover.",
            }
        )

        assert suggestion.verdict == Verdict.RECOVERY
        assert suggestion.items == (
            SuggestionItem("recovery", Priority.HIGH, "Recovery week", "Rest"),
        )
        assert suggestion.to_dict()["items"][0]["priority"] == "HIGH"
