"""
Custom exception classes for the road damage detector.

Usage:
    from app.core.exceptions import InvalidInput

    raise InvalidInput("Buffer length does not match width*height*4")
"""


class DetectorError(Exception):
    """Base exception for all road damage detector errors."""
    pass


class InvalidInput(DetectorError, ValueError):
    """Raised when a pixel buffer has bad dimensions or length."""
    pass


class ImageDecodeError(DetectorError):
    """Raised when an uploaded image cannot be decoded."""
    pass
