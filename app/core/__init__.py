"""Pothole Detection Core Module."""

from .buffer import PixelBuffer
from .detector import DetectionResult, analyze, detect, process_single_image, suggest_report
from .exceptions import DetectorError, ImageDecodeError, InvalidInput
from .scoring import FeatureSet
from .surface import ROAD_COLOR_RANGES, ColorRange, ValidationResult, is_road_color, validate

__all__ = [
    "PixelBuffer",
    "DetectionResult",
    "ValidationResult",
    "FeatureSet",
    "ColorRange",
    "ROAD_COLOR_RANGES",
    "DetectorError",
    "ImageDecodeError",
    "InvalidInput",
    "analyze",
    "detect",
    "is_road_color",
    "process_single_image",
    "suggest_report",
    "validate",
]
