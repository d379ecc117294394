"""
Pixel buffer wrapper.

A PixelBuffer is a decoded photo: row-major RGBA bytes plus its dimensions.
The detector only ever reads it through read-only NumPy views.
"""

from dataclasses import dataclass

import cv2
import numpy as np

from .exceptions import InvalidInput

CHANNELS = 4


@dataclass(frozen=True)
class PixelBuffer:
    """Row-major RGBA pixel data. Alpha is ignored by every algorithm."""

    width: int
    height: int
    data: bytes

    def __post_init__(self):
        if not isinstance(self.width, int) or not isinstance(self.height, int):
            raise InvalidInput("Width and height must be integers")
        if self.width <= 0 or self.height <= 0:
            raise InvalidInput(
                f"Width and height must be positive, got {self.width}x{self.height}"
            )
        expected = self.width * self.height * CHANNELS
        if len(self.data) != expected:
            raise InvalidInput(
                f"Buffer length {len(self.data)} does not match "
                f"{self.width}x{self.height}x{CHANNELS} = {expected}"
            )

    @property
    def total_pixels(self) -> int:
        return self.width * self.height

    def rgb(self) -> np.ndarray:
        """Return a contiguous (H, W, 3) uint8 copy of the color channels."""
        rgba = np.frombuffer(self.data, dtype=np.uint8).reshape(
            self.height, self.width, CHANNELS
        )
        return np.ascontiguousarray(rgba[:, :, :3])

    @classmethod
    def from_image(cls, image: np.ndarray) -> "PixelBuffer":
        """
        Build a buffer from an OpenCV image.

        Args:
            image: Grayscale, BGR or BGRA image as returned by cv2.imread/imdecode

        Returns:
            PixelBuffer in RGBA channel order
        """
        if image is None or image.ndim not in (2, 3):
            raise InvalidInput("Expected a 2D grayscale or 3D color image")

        if image.ndim == 2:
            rgba = cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
        elif image.shape[2] == 4:
            rgba = cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
        elif image.shape[2] == 3:
            rgba = cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
        else:
            raise InvalidInput(f"Unsupported channel count: {image.shape[2]}")

        h, w = rgba.shape[:2]
        return cls(width=int(w), height=int(h), data=rgba.astype(np.uint8).tobytes())
