"""Tests for merging aligned channels onto retained indices."""
import pytest

from ridetrace.analysis.aggregator import CoordinateAlignedChannels
from ridetrace.analysis.merge import MergedPoint, build_merged_series, compute_grade


def _channels(n=4):
    return CoordinateAlignedChannels(
        longitude=tuple(7.0 + i * 0.001 for i in range(n)),
        latitude=(45.0,) * n,
        altitude_raw=(3000,) * n,
        elevation_ft=tuple(100.0 + 10.0 * i for i in range(n)),
        power=tuple(150 + i for i in range(n)),
        heart_rate=tuple(120 + i for i in range(n)),
        distance=tuple(100.0 * i for i in range(n)),
        elapsed_seconds=tuple(5.0 * i for i in range(n)),
    )


class TestComputeGrade:
    def test_rise_over_run(self):
        assert compute_grade(100.0, 110.0, 0.0, 200.0) == pytest.approx(0.05)

    def test_descent_is_negative(self):
        assert compute_grade(110.0, 100.0, 0.0, 100.0) == pytest.approx(-0.1)

    def test_zero_run_is_zero(self):
        assert compute_grade(100.0, 150.0, 42.0, 42.0) == 0.0


class TestBuildMergedSeries:
    def test_copies_channels_at_retained_indices(self):
        merged = build_merged_series([0, 2, 3], _channels())
        assert [p.power for p in merged] == [150, 152, 153]
        assert [p.heart_rate for p in merged] == [120, 122, 123]
        assert [p.distance for p in merged] == [0.0, 200.0, 300.0]
        assert [p.elevation for p in merged] == [100.0, 120.0, 130.0]
        assert [p.time for p in merged] == [0.0, 10.0, 15.0]

    def test_grade_between_consecutive_retained_points(self):
        merged = build_merged_series([0, 2, 3], _channels())
        assert merged[0].grade == 0.0
        assert merged[1].grade == pytest.approx(20.0 / 200.0)
        assert merged[2].grade == pytest.approx(10.0 / 100.0)

    def test_one_output_per_index(self):
        assert len(build_merged_series([0, 1, 2, 3], _channels())) == 4

    def test_empty_indices(self):
        assert build_merged_series([], _channels()) == []

    def test_out_of_range_index_yields_zero_slot(self, caplog):
        merged = build_merged_series([0, 9], _channels())
        assert len(merged) == 2
        assert merged[1] == MergedPoint(
            power=0, distance=0.0, time=0.0, elevation=0.0, heart_rate=0,
            grade=compute_grade(100.0, 0.0, 0.0, 0.0),
        )
        assert "outside" in caplog.text

    def test_stationary_points_have_zero_grade(self):
        channels = CoordinateAlignedChannels(
            longitude=(7.0, 7.001), latitude=(45.0, 45.0), altitude_raw=(3000, 3010),
            elevation_ft=(100.0, 106.56), power=(0, 0), heart_rate=(0, 0),
            distance=(50.0, 50.0), elapsed_seconds=(0.0, 30.0),
        )
        assert build_merged_series([0, 1], channels)[1].grade == 0.0
