"""
Pothole probability model and result classification.

The weights below are hand-tuned and fixed. Changing any of them changes
which photos get flagged, so they are not exposed as parameters.
"""

from dataclasses import dataclass
from typing import Any, Dict

MIN_CONFIDENCE = 0.05
MAX_CONFIDENCE = 0.95
POTHOLE_THRESHOLD = 0.4
NON_ROAD_CONFIDENCE = 0.1


@dataclass(frozen=True)
class FeatureSet:
    """Image features the probability model is built from."""

    road_surface_ratio: float
    qualifying_cluster_count: int
    dark_pixel_ratio: float
    strong_edge_count: int

    @property
    def edge_density(self) -> float:
        if self.qualifying_cluster_count <= 0:
            return 0.0
        return self.strong_edge_count / (self.qualifying_cluster_count * 100)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "road_surface_ratio": self.road_surface_ratio,
            "qualifying_cluster_count": self.qualifying_cluster_count,
            "dark_pixel_ratio": self.dark_pixel_ratio,
            "strong_edge_count": self.strong_edge_count,
        }


def unclamped_score(features: FeatureSet) -> float:
    """Sum of the capped feature terms before penalties and clamping."""
    probability = 0.0

    # Road surface (0-20%)
    probability += min(features.road_surface_ratio * 0.2, 0.2)

    # Dark clusters (0-40%)
    if features.qualifying_cluster_count > 0:
        probability += min(features.qualifying_cluster_count * 0.1, 0.4)

    # Dark pixel density (0-20%)
    probability += min(features.dark_pixel_ratio * 2, 0.2)

    # Edge intensity (0-20%)
    probability += min(features.edge_density * 0.5, 0.2)

    return probability


def calculate_confidence(features: FeatureSet) -> float:
    """Combine features into a pothole confidence in [0.05, 0.95]."""
    probability = unclamped_score(features)

    if features.road_surface_ratio < 0.1:
        probability *= 0.3  # not enough road
    if features.qualifying_cluster_count > 10:
        probability *= 0.7  # too many clusters, probably noise

    return min(max(probability, MIN_CONFIDENCE), MAX_CONFIDENCE)


def is_pothole(confidence: float) -> bool:
    return confidence > POTHOLE_THRESHOLD


def describe_analysis(confidence: float, road_ratio: float) -> str:
    if road_ratio < 0.3:
        return "Limited road surface visible - analysis may be inaccurate"

    if confidence > 0.7:
        return "High confidence - Strong pothole characteristics detected"
    if confidence > 0.5:
        return "Medium confidence - Possible pothole detected"
    if confidence > 0.3:
        return "Low confidence - Minor irregularities found"
    if confidence > 0.1:
        return "Very low confidence - Minimal pothole indicators"
    return "Clear road - No significant pothole features detected"


def classify_image_type(road_ratio: float) -> str:
    if road_ratio > 0.6:
        return "good-road"
    if road_ratio > 0.3:
        return "partial-road"
    return "non-road"


def recommend(confidence: float, cluster_count: int) -> str:
    if confidence > 0.6:
        return f"Strong evidence of {cluster_count} potential pothole(s). Consider reporting."
    elif confidence > 0.4:
        return "Possible road damage detected. Review carefully before reporting."
    elif confidence > 0.2:
        return "Minor irregularities found. May not require immediate attention."
    else:
        return "Road appears to be in good condition. No action needed."
