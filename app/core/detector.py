"""
Pothole Detection Core Module

This module runs the road damage heuristic on a decoded photo: road surface
gating, dark region segmentation, edge scoring and the probability model.
Every function here is pure; nothing is kept between calls.
"""

import cv2
import numpy as np
from dataclasses import dataclass
from typing import Tuple, Optional, Dict, Any
import logging

from .buffer import PixelBuffer
from .scoring import (
    NON_ROAD_CONFIDENCE,
    FeatureSet,
    calculate_confidence,
    classify_image_type,
    describe_analysis,
    is_pothole,
    recommend,
)
from .segmentation import count_strong_edges, find_dark_clusters
from .surface import (
    ROAD_COLOR_RANGES,
    ROAD_SURFACE_THRESHOLD,
    ColorRange,
    road_surface_ratio,
    round_percent,
    validate,
)

logger = logging.getLogger(__name__)

# Pothole category is offered above SUGGEST_CONFIDENCE and filled in
# automatically above AUTO_FILL_CONFIDENCE
SUGGEST_CONFIDENCE = 0.4
AUTO_FILL_CONFIDENCE = 0.6


@dataclass
class DetectionResult:
    """Results from pothole detection."""

    is_pothole: bool = False
    confidence: float = NON_ROAD_CONFIDENCE

    # Features (percentages are whole numbers)
    road_surface_percent: int = 0
    dark_cluster_count: int = 0
    potential_pixel_percent: int = 0
    edge_intensity_percent: int = 0

    # Diagnostics
    analysis: str = ""
    image_type: str = "non-road"
    recommendation: str = ""
    is_road_image: bool = False

    # Raw features (None for short-circuited non-road results)
    features: Optional[FeatureSet] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert results to dictionary."""
        result = {
            "is_pothole": self.is_pothole,
            "confidence": self.confidence,
            "features": {
                "road_surface_percent": self.road_surface_percent,
                "dark_clusters": self.dark_cluster_count,
                "potential_pixel_percent": self.potential_pixel_percent,
                "edge_intensity_percent": self.edge_intensity_percent,
                "analysis": self.analysis,
                "image_type": self.image_type,
            },
            "recommendation": self.recommendation,
            "is_road_image": self.is_road_image,
        }

        if self.features is not None:
            result["raw_features"] = self.features.to_dict()

        return result


def non_road_result(road_percent: int = 0,
                    analysis: str = "Not a road image - insufficient road surface detected",
                    recommendation: str = "Please upload a clear photo of a road surface "
                                          "for accurate pothole detection.") -> DetectionResult:
    """Fixed result for images without enough road surface."""
    return DetectionResult(
        is_pothole=False,
        confidence=NON_ROAD_CONFIDENCE,
        road_surface_percent=road_percent,
        analysis=analysis,
        image_type="non-road",
        recommendation=recommendation,
        is_road_image=False,
    )


def extract_features(buffer: PixelBuffer,
                     ranges: Tuple[ColorRange, ...] = ROAD_COLOR_RANGES
                     ) -> Tuple[float, Optional[FeatureSet]]:
    """
    Compute the road surface ratio and, for road images, the full feature set.

    Args:
        buffer: Decoded photo
        ranges: Road color catalog

    Returns:
        (road_ratio, features); features is None when the image is gated out
    """
    road_ratio = road_surface_ratio(buffer, ranges)

    if road_ratio < ROAD_SURFACE_THRESHOLD:
        return road_ratio, None

    total = buffer.total_pixels
    brightness = buffer.rgb().astype(np.float64).sum(axis=2) / 3
    segmentation = find_dark_clusters(brightness)
    strong_edges = count_strong_edges(brightness, segmentation.clusters)

    features = FeatureSet(
        road_surface_ratio=road_ratio,
        qualifying_cluster_count=segmentation.cluster_count,
        dark_pixel_ratio=segmentation.dark_pixels / total,
        strong_edge_count=strong_edges,
    )
    return road_ratio, features


def detect(buffer: PixelBuffer,
           ranges: Tuple[ColorRange, ...] = ROAD_COLOR_RANGES) -> DetectionResult:
    """
    Estimate whether a photo shows a pothole.

    Args:
        buffer: Decoded photo as RGBA pixel buffer
        ranges: Road color catalog

    Returns:
        DetectionResult with verdict, confidence and diagnostics
    """
    road_ratio, features = extract_features(buffer, ranges)

    if features is None:
        logger.info(f"Not a road image (road surface {road_ratio:.1%}), skipping analysis")
        return non_road_result()

    confidence = calculate_confidence(features)

    logger.debug(
        f"Features: road={road_ratio:.3f}, clusters={features.qualifying_cluster_count}, "
        f"dark={features.dark_pixel_ratio:.3f}, edges={features.strong_edge_count}, "
        f"confidence={confidence:.3f}"
    )

    return DetectionResult(
        is_pothole=is_pothole(confidence),
        confidence=confidence,
        road_surface_percent=round_percent(road_ratio),
        dark_cluster_count=features.qualifying_cluster_count,
        potential_pixel_percent=round_percent(features.dark_pixel_ratio),
        edge_intensity_percent=round_percent(features.edge_density),
        analysis=describe_analysis(confidence, road_ratio),
        image_type=classify_image_type(road_ratio),
        recommendation=recommend(confidence, features.qualifying_cluster_count),
        is_road_image=True,
        features=features,
    )


def analyze(buffer: PixelBuffer,
            ranges: Tuple[ColorRange, ...] = ROAD_COLOR_RANGES) -> DetectionResult:
    """
    Validate first, then detect.

    Images that fail validation get a non-road result carrying the measured
    road percentage and the validation message.
    """
    validation = validate(buffer, ranges)
    if not validation.is_valid:
        return non_road_result(
            road_percent=validation.road_percentage,
            analysis=validation.recommendation,
            recommendation="Please capture a clear photo of the road surface for accurate detection.",
        )
    return detect(buffer, ranges)


def suggest_report(result: DetectionResult) -> Dict[str, Any]:
    """
    Suggest an issue category, title and description from a detection.

    Pothole detections on road images above 40% confidence get a pothole
    suggestion the reporter can apply; above 60% it is applied automatically.
    """
    if result.is_road_image and result.is_pothole and result.confidence > SUGGEST_CONFIDENCE:
        percent = round_percent(result.confidence)
        return {
            "category": "pothole",
            "title": f"Pothole Detected ({percent}% confidence)",
            "description": f"AI-detected pothole with {percent}% confidence. {result.analysis}",
            "auto_fill": result.confidence > AUTO_FILL_CONFIDENCE,
        }

    return {"category": "other", "title": None, "description": None, "auto_fill": False}


def process_single_image(image_path: str) -> DetectionResult:
    """
    Convenience function to run detection on an image file.

    Args:
        image_path: Path to the photo

    Returns:
        DetectionResult
    """
    image = cv2.imread(image_path, cv2.IMREAD_COLOR)

    if image is None:
        raise FileNotFoundError(f"Could not load image: {image_path}")

    return detect(PixelBuffer.from_image(image))
