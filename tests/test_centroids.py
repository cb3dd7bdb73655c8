"""Tests for centroid aggregation and dominance ordering."""
from apexcolor.centroids import get_aggregator, mean_centroid, median_centroid, sort_by_dominance
from apexcolor.types import CentroidAggregation, Color, ColorSample


class TestMeanCentroid:
    """Test the unweighted mean."""

    def test_mean_ignores_counts_for_color(self):
        members = [ColorSample(Color(0, 0, 0), 100), ColorSample(Color(10, 20, 31), 1)]
        centroid = mean_centroid(members)

        assert centroid.color == Color(5, 10, 15)  # 31 / 2 floored
        assert centroid.count == 101

    def test_empty(self):
        assert mean_centroid([]).count == 0


class TestMedianCentroid:
    """Test the per-channel median."""

    def test_channels_independent(self):
        members = [
            ColorSample(Color(1, 90, 5), 2),
            ColorSample(Color(50, 10, 7), 3),
            ColorSample(Color(9, 40, 200), 4),
        ]
        centroid = median_centroid(members)

        assert centroid.color == Color(9, 40, 7)
        assert centroid.count == 9

    def test_even_count_takes_upper_middle(self):
        members = [ColorSample(Color(v, v, v), 1) for v in (10, 20, 30, 40)]
        assert median_centroid(members).color == Color(30, 30, 30)

    def test_single_member(self):
        sample = ColorSample(Color(4, 5, 6), 7)
        assert median_centroid([sample]) == sample


class TestSortByDominance:
    """Test deterministic result ordering."""

    def test_count_descending(self):
        items = [ColorSample(Color(0, 0, 1), 1), ColorSample(Color(0, 0, 2), 5), ColorSample(Color(0, 0, 3), 3)]
        assert [s.count for s in sort_by_dominance(items)] == [5, 3, 1]

    def test_ties_by_hex_ascending(self):
        items = [
            ColorSample(Color(255, 0, 0), 4),
            ColorSample(Color(0, 0, 255), 4),
            ColorSample(Color(0, 255, 0), 4),
        ]
        assert [s.hex for s in sort_by_dominance(items)] == ["0000FF", "00FF00", "FF0000"]

    def test_input_not_modified(self):
        items = [ColorSample(Color(0, 0, 0), 1), ColorSample(Color(1, 1, 1), 2)]
        sort_by_dominance(items)
        assert items[0].count == 1


def test_get_aggregator():
    assert get_aggregator(CentroidAggregation.MEAN) is mean_centroid
    assert get_aggregator("median") is median_centroid
