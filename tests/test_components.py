"""
Unit tests for the individual pipeline stages.
"""

import pytest
import numpy as np
from app.core import ROAD_COLOR_RANGES, ColorRange, FeatureSet, is_road_color
from app.core.surface import road_color_mask, round_percent
from app.core.segmentation import (
    count_strong_edges, edge_gradient_map, find_dark_clusters, flood_fill,
)
from app.core.scoring import (
    calculate_confidence, classify_image_type, describe_analysis,
    recommend, unclamped_score,
)


class TestColorClassifier:
    """Tests for road color classification."""

    @pytest.mark.parametrize("rgb, expected", [
        ((30, 30, 30), True),
        ((120, 120, 120), True),
        ((29, 30, 30), False),
        ((121, 121, 121), False),
        ((135, 135, 135), False),
        ((150, 150, 150), True),
        ((220, 220, 220), True),
        ((221, 220, 220), False),
        ((100, 30, 30), True),
        ((180, 80, 80), True),
        ((181, 80, 80), False),
        ((0, 0, 0), False),
    ])
    def test_is_road_color(self, rgb, expected):
        assert is_road_color(*rgb) is expected

    def test_catalog(self):
        names = [r.name for r in ROAD_COLOR_RANGES]
        assert names == ["asphalt", "concrete", "red_brick"]

    def test_custom_ranges(self):
        grass = (ColorRange("grass", (0, 100, 0), (80, 255, 80)),)
        assert is_road_color(20, 150, 20, grass) is True
        assert is_road_color(80, 80, 80, grass) is False

    def test_mask_matches_scalar_test(self):
        rng = np.random.default_rng(7)
        rgb = rng.integers(0, 256, size=(40, 40, 3), dtype=np.uint8)

        mask = road_color_mask(rgb)

        expected = [[is_road_color(*rgb[y, x].tolist()) for x in range(40)]
                    for y in range(40)]
        assert mask.tolist() == expected

    def test_round_percent(self):
        assert round_percent(0.125) == 13
        assert round_percent(0.3) == 30
        assert round_percent(0.0) == 0
        assert round_percent(1.0) == 100


class TestSegmentation:
    """Tests for dark region clustering."""

    def test_diagonal_neighbors_connect(self):
        dark = [True, False, False,
                False, True, False,
                False, False, True]
        visited = bytearray(9)

        cluster = flood_fill(4, dark, visited, 3, 3)

        assert sorted(cluster) == [0, 4, 8]
        assert all(visited)  # light neighbours are marked too

    def test_small_clusters_do_not_qualify(self):
        brightness = np.full((30, 30), 80.0)
        brightness[5:10, 5:10] = 10.0  # 25 pixels

        seg = find_dark_clusters(brightness)

        assert seg.cluster_count == 0
        assert seg.dark_pixels == 25

    def test_minimum_size_qualifies(self):
        brightness = np.full((30, 30), 80.0)
        brightness[5:10, 5:15] = 10.0  # exactly 50 pixels

        seg = find_dark_clusters(brightness)

        assert seg.cluster_count == 1
        assert len(seg.clusters[0]) == 50

    def test_threshold_is_strict(self):
        brightness = np.full((30, 30), 60.0)
        assert find_dark_clusters(brightness).dark_pixels == 0

    def test_border_only_region_has_no_seed(self):
        brightness = np.full((100, 100), 80.0)
        brightness[:, 0] = 10.0

        seg = find_dark_clusters(brightness)

        assert seg.cluster_count == 0
        assert seg.dark_pixels == 100

    def test_fill_spreads_onto_border(self):
        brightness = np.full((50, 50), 80.0)
        brightness[:10, :10] = 10.0

        seg = find_dark_clusters(brightness)

        assert seg.cluster_count == 1
        assert len(seg.clusters[0]) == 100

    def test_large_region_without_recursion(self):
        brightness = np.full((400, 400), 10.0)
        seg = find_dark_clusters(brightness)
        assert seg.cluster_count == 1
        assert len(seg.clusters[0]) == 400 * 400

    def test_tiny_image(self):
        seg = find_dark_clusters(np.zeros((2, 5)))
        assert seg.cluster_count == 0
        assert seg.dark_pixels == 10


class TestEdgeAnalyzer:
    """Tests for edge gradient scoring."""

    def test_gradient_map(self):
        brightness = np.full((5, 5), 80.0)
        brightness[2, 2] = 10.0

        gradient = edge_gradient_map(brightness)

        assert gradient[2, 2] == 70.0
        assert gradient[1, 1] == 70.0
        assert gradient[0, 0] == 0.0  # border
        assert gradient[1, 2] == 70.0

    def test_soft_edges_are_not_counted(self):
        brightness = np.full((30, 30), 50.0)
        brightness[10:20, 10:20] = 30.0  # gradient of 20 at the rim

        seg = find_dark_clusters(brightness)
        assert count_strong_edges(brightness, seg.clusters) == 0

    def test_no_clusters(self):
        assert count_strong_edges(np.zeros((10, 10)), []) == 0


class TestProbabilityScorer:
    """Tests for the confidence formula."""

    def features(self, **overrides):
        values = dict(road_surface_ratio=0.8, qualifying_cluster_count=0,
                      dark_pixel_ratio=0.02, strong_edge_count=0)
        values.update(overrides)
        return FeatureSet(**values)

    def test_edge_density_without_clusters(self):
        assert self.features(strong_edge_count=500).edge_density == 0.0

    def test_terms_are_capped(self):
        features = self.features(road_surface_ratio=1.0, qualifying_cluster_count=8,
                                 dark_pixel_ratio=0.5, strong_edge_count=100000)
        assert unclamped_score(features) == pytest.approx(1.0)
        assert calculate_confidence(features) == 0.95

    def test_low_road_penalty(self):
        features = self.features(road_surface_ratio=0.05, qualifying_cluster_count=2,
                                 dark_pixel_ratio=0.05, strong_edge_count=100)
        expected = (0.01 + 0.2 + 0.1 + 0.2) * 0.3
        assert calculate_confidence(features) == pytest.approx(expected)

    def test_noise_penalty(self):
        features = self.features(qualifying_cluster_count=11)
        assert calculate_confidence(features) == pytest.approx(
            unclamped_score(features) * 0.7
        )

    def test_minimum_clamp(self):
        features = self.features(road_surface_ratio=0.0, dark_pixel_ratio=0.0)
        assert calculate_confidence(features) == 0.05

    def test_monotonic_in_cluster_count(self):
        """With no strong edges the edge term stays at 0 and cannot mask the cluster term."""
        scores = [
            unclamped_score(self.features(qualifying_cluster_count=n, strong_edge_count=0))
            for n in range(11)
        ]
        assert scores == sorted(scores)
        assert scores[4] == pytest.approx(scores[10])  # cluster term capped at 0.4

    def test_edge_term_shrinks_with_more_clusters(self):
        """A fixed edge count is spread thinner across more clusters."""
        dense = self.features(qualifying_cluster_count=4, strong_edge_count=50)
        sparse = self.features(qualifying_cluster_count=10, strong_edge_count=50)
        assert unclamped_score(sparse) < unclamped_score(dense)


class TestResultClassifier:
    """Tests for verdict texts."""

    @pytest.mark.parametrize("confidence, prefix", [
        (0.8, "High confidence"),
        (0.6, "Medium confidence"),
        (0.4, "Low confidence"),
        (0.2, "Very low confidence"),
        (0.1, "Clear road"),
    ])
    def test_analysis_bands(self, confidence, prefix):
        assert describe_analysis(confidence, 0.9).startswith(prefix)

    def test_limited_road_overrides_band(self):
        assert describe_analysis(0.9, 0.25).startswith("Limited road surface visible")

    @pytest.mark.parametrize("ratio, tag", [
        (0.9, "good-road"),
        (0.6, "partial-road"),
        (0.31, "partial-road"),
        (0.3, "non-road"),
    ])
    def test_image_type(self, ratio, tag):
        assert classify_image_type(ratio) == tag

    def test_recommendations(self):
        assert "3 potential pothole(s)" in recommend(0.7, 3)
        assert recommend(0.5, 1).startswith("Possible road damage")
        assert recommend(0.3, 0).startswith("Minor irregularities")
        assert recommend(0.2, 0).startswith("Road appears")
