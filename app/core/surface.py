"""
Road surface color classification.

A pixel counts as road surface when its RGB sample falls inside any of the
named ranges in ROAD_COLOR_RANGES. The fraction of such pixels decides whether
an image is worth running the full damage analysis on.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Tuple

import cv2
import numpy as np

from .buffer import PixelBuffer

logger = logging.getLogger(__name__)

# Minimum fraction of road-colored pixels for a usable road photo
ROAD_SURFACE_THRESHOLD = 0.3


@dataclass(frozen=True)
class ColorRange:
    """Named inclusive RGB interval for one road surface material."""

    name: str
    min_rgb: Tuple[int, int, int]
    max_rgb: Tuple[int, int, int]

    def contains(self, r: int, g: int, b: int) -> bool:
        return all(
            lo <= value <= hi
            for value, lo, hi in zip((r, g, b), self.min_rgb, self.max_rgb)
        )


ROAD_COLOR_RANGES: Tuple[ColorRange, ...] = (
    ColorRange("asphalt", (30, 30, 30), (120, 120, 120)),      # dark to medium gray
    ColorRange("concrete", (150, 150, 150), (220, 220, 220)),  # light gray to white
    ColorRange("red_brick", (100, 30, 30), (180, 80, 80)),
)


@dataclass
class ValidationResult:
    """Outcome of the road surface pre-flight check."""

    is_valid: bool = False
    road_percentage: int = 0
    recommendation: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "road_percentage": self.road_percentage,
            "recommendation": self.recommendation,
        }


def round_percent(ratio: float) -> int:
    """Convert a ratio to a whole percentage, rounding halves up."""
    return int(math.floor(ratio * 100 + 0.5))


def is_road_color(r: int, g: int, b: int,
                  ranges: Tuple[ColorRange, ...] = ROAD_COLOR_RANGES) -> bool:
    """Check whether a single RGB sample looks like road surface."""
    return any(color_range.contains(r, g, b) for color_range in ranges)


def road_color_mask(rgb: np.ndarray,
                    ranges: Tuple[ColorRange, ...] = ROAD_COLOR_RANGES) -> np.ndarray:
    """
    Classify every pixel of an RGB image at once.

    Args:
        rgb: Contiguous (H, W, 3) uint8 image in RGB order
        ranges: Color range catalog

    Returns:
        Boolean (H, W) mask, True where the pixel is road-colored
    """
    mask = np.zeros(rgb.shape[:2], dtype=bool)
    for color_range in ranges:
        lower = np.array(color_range.min_rgb, dtype=np.uint8)
        upper = np.array(color_range.max_rgb, dtype=np.uint8)
        mask |= cv2.inRange(rgb, lower, upper) > 0
    return mask


def road_surface_ratio(buffer: PixelBuffer,
                       ranges: Tuple[ColorRange, ...] = ROAD_COLOR_RANGES) -> float:
    """Fraction of pixels in the buffer classified as road surface."""
    road_pixels = int(np.count_nonzero(road_color_mask(buffer.rgb(), ranges)))
    return road_pixels / buffer.total_pixels


def validate(buffer: PixelBuffer,
             ranges: Tuple[ColorRange, ...] = ROAD_COLOR_RANGES) -> ValidationResult:
    """
    Check whether an image shows enough road surface for damage detection.

    This is cheap compared to detect() and can be used for early UI feedback.
    """
    ratio = road_surface_ratio(buffer, ranges)
    is_valid = ratio > ROAD_SURFACE_THRESHOLD

    logger.debug(f"Road surface validation: ratio={ratio:.3f}, valid={is_valid}")

    return ValidationResult(
        is_valid=is_valid,
        road_percentage=round_percent(ratio),
        recommendation=(
            "Suitable for pothole detection" if is_valid
            else "Image may not show enough road surface"
        ),
    )
