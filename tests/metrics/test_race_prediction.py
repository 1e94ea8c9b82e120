"""Tests for Riegel race time prediction."""

import pytest

from coach_running.exceptions import InvalidFormatError, InvalidInputError
from coach_running.metrics.race_prediction import (
    PREDICTION_DISTANCES_M,
    RacePrediction,
    predict_race_time,
    predict_race_times,
)


class TestPredictRaceTime:
    """Tests for predict_race_time."""

    def test_same_distance(self):
        assert predict_race_time(5000, 1200, 5000) == pytest.approx(1200)

    def test_doubling_distance(self):
        """Test 20:00 over 5km predicts about 41:42 over 10km."""
        assert predict_race_time(5000, 1200, 10000) == pytest.approx(2501.9, abs=0.1)

    def test_shorter_target(self):
        assert predict_race_time(10000, 2700, 5000) < 2700 / 2

    @pytest.mark.parametrize(
        "distance,seconds,target",
        [(0, 1200, 5000), (5000, 0, 10000), (5000, 1200, -1)],
    )
    def test_invalid_inputs(self, distance, seconds, target):
        with pytest.raises(InvalidInputError):
            predict_race_time(distance, seconds, target)


class TestPredictRaceTimes:
    """Tests for predict_race_times."""

    def test_every_standard_distance(self):
        predictions = predict_race_times(10000, "45:00")

        assert [p.label for p in predictions] == list(PREDICTION_DISTANCES_M)
        seconds = [p.seconds for p in predictions]
        assert seconds == sorted(seconds)

    def test_reference_distance_unchanged(self):
        ten_k = next(p for p in predict_race_times(10000, "45:00") if p.label == "10km")

        assert ten_k.to_dict() == {
            "label": "10km",
            "distance_m": 10000,
            "seconds": 2700,
            "time_formatted": "45:00",
            "pace_formatted": "4:30",
        }

    def test_marathon_from_10km(self):
        marathon = predict_race_times(10000, "45:00")[-1]

        assert marathon.distance_m == 42195
        assert marathon.seconds == pytest.approx(12421, abs=5)
        assert marathon.to_dict()["time_formatted"].startswith("3:27:")

    def test_unparseable_time(self):
        with pytest.raises(InvalidFormatError):
            predict_race_times(5000, "fast")

    def test_pace(self):
        prediction = RacePrediction("5km", 5000, 1500.0)
        assert prediction.pace_seconds_per_km == 300.0
