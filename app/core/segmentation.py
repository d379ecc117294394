"""
Dark region segmentation and edge scoring.

Dark pixels are grouped into 8-connected clusters with an iterative flood
fill. Clusters large enough to be damage candidates are then scored by how
sharply their pixels stand out from their neighbours.
"""

import logging
from dataclasses import dataclass, field
from typing import List

import numpy as np

logger = logging.getLogger(__name__)

# Empirical constants. Candidates for calibration against a labeled image set.
DARK_THRESHOLD = 60
MIN_CLUSTER_SIZE = 50
EDGE_THRESHOLD = 25

NEIGHBOR_OFFSETS = [
    (dx, dy)
    for dy in (-1, 0, 1)
    for dx in (-1, 0, 1)
    if not (dx == 0 and dy == 0)
]


@dataclass
class Segmentation:
    """Qualifying dark clusters of one image."""

    clusters: List[List[int]] = field(default_factory=list)
    dark_pixels: int = 0

    @property
    def cluster_count(self) -> int:
        return len(self.clusters)


def dark_mask(brightness: np.ndarray, threshold: float = DARK_THRESHOLD) -> np.ndarray:
    return brightness < threshold


def flood_fill(start: int, dark: List[bool], visited: bytearray,
               width: int, height: int) -> List[int]:
    """
    Collect the 8-connected dark region reachable from a start pixel.

    Uses an explicit stack so large regions cannot exhaust the recursion
    limit. Every in-bounds pixel popped is marked visited, dark or not.

    Args:
        start: Flat index (y * width + x) of the seed pixel
        dark: Flat dark-pixel flags
        visited: Flat visited marks, updated in place
        width: Image width
        height: Image height

    Returns:
        Flat indices of the cluster members
    """
    cluster = []
    stack = [(start % width, start // width)]

    while stack:
        x, y = stack.pop()
        if x < 0 or x >= width or y < 0 or y >= height:
            continue

        index = y * width + x
        if visited[index]:
            continue
        visited[index] = 1

        if dark[index]:
            cluster.append(index)
            for dx, dy in NEIGHBOR_OFFSETS:
                stack.append((x + dx, y + dy))

    return cluster


def find_dark_clusters(brightness: np.ndarray,
                       threshold: float = DARK_THRESHOLD,
                       min_size: int = MIN_CLUSTER_SIZE) -> Segmentation:
    """
    Find qualifying dark clusters in a brightness map.

    Seeds are taken row-major from interior pixels only; a fill started there
    may still spread onto the border.

    Args:
        brightness: (H, W) float brightness map
        threshold: Pixels strictly darker than this are candidates
        min_size: Minimum pixel count for a cluster to qualify

    Returns:
        Segmentation with qualifying clusters and the total dark pixel count
    """
    height, width = brightness.shape
    mask = dark_mask(brightness, threshold)
    result = Segmentation(dark_pixels=int(np.count_nonzero(mask)))

    if height < 3 or width < 3:
        return result

    interior = np.zeros_like(mask)
    interior[1:-1, 1:-1] = mask[1:-1, 1:-1]
    seeds = np.flatnonzero(interior)

    dark = mask.ravel().tolist()
    visited = bytearray(width * height)

    for seed in seeds.tolist():
        if visited[seed]:
            continue
        cluster = flood_fill(seed, dark, visited, width, height)
        if len(cluster) >= min_size:
            result.clusters.append(cluster)

    logger.debug(
        f"Segmentation: {result.cluster_count} qualifying clusters, "
        f"{result.dark_pixels} dark pixels"
    )
    return result


def edge_gradient_map(brightness: np.ndarray) -> np.ndarray:
    """
    Maximum absolute brightness difference to the 8 neighbours.

    Border pixels have no full neighbourhood and are left at 0.
    """
    height, width = brightness.shape
    gradient = np.zeros_like(brightness)
    if height < 3 or width < 3:
        return gradient

    center = brightness[1:-1, 1:-1]
    inner = gradient[1:-1, 1:-1]
    for dx, dy in NEIGHBOR_OFFSETS:
        neighbor = brightness[1 + dy:height - 1 + dy, 1 + dx:width - 1 + dx]
        np.maximum(inner, np.abs(center - neighbor), out=inner)

    return gradient


def count_strong_edges(brightness: np.ndarray, clusters: List[List[int]],
                       threshold: float = EDGE_THRESHOLD) -> int:
    """Count cluster pixels whose edge gradient exceeds the threshold."""
    if not clusters:
        return 0

    strong = (edge_gradient_map(brightness) > threshold).ravel()
    return sum(int(np.count_nonzero(strong[cluster])) for cluster in clusters)
