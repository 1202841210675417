"""
Intensity-driven region growing.

grow() expands a single seed under an intensity tolerance. grow_multi() runs
the edge-aware variant: a deterministic grid of seeds, each expanded under
intensity, gradient-continuity and edge-strength gates, followed by contour
filtering and confidence scoring.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from . import image_processing as ip
from .connectivity import (
    ASSIGNED, QUEUED, UNVISITED, Connectivity, image_center, in_bounds, new_state_grid,
)
from .contours import ScoredContour, extract_contours, filter_contours, score_contours
from .errors import SeedOutOfBounds
from .params import DEFAULT_THRESHOLD, REGION_GROWING_TOLERANCE, SEED_GRID_SIZE

logger = logging.getLogger(__name__)

FOREGROUND = 255


@dataclass
class MultiRegionResult:
    """Label grid (1-based seed index per absorbed pixel) and scored contours."""
    labels: np.ndarray
    regions: List[ScoredContour] = field(default_factory=list)
    seeds: List[Tuple[int, int]] = field(default_factory=list)


def grow(image: np.ndarray, seed: Optional[Tuple[int, int]] = None,
         tolerance: float = REGION_GROWING_TOLERANCE) -> np.ndarray:
    """
    Grow a 4-connected region from ``seed`` (x, y), defaulting to the image center.

    A neighbor joins when it is unvisited and strictly closer than
    ``tolerance`` to the seed intensity captured at the start.

    Returns:
        uint8 mask, 255 for the region and 0 elsewhere

    Raises:
        EmptyInput: if the image has no pixels
        SeedOutOfBounds: if the seed is outside the image
    """
    gray = ip.to_gray(image)
    height, width = gray.shape

    if seed is None:
        seed = image_center(gray.shape)
    sx, sy = int(seed[0]), int(seed[1])
    if not in_bounds(sx, sy, width, height):
        raise SeedOutOfBounds(seed, gray.shape)

    seed_intensity = int(gray[sy, sx])
    mask = np.zeros(gray.shape, dtype=np.uint8)
    state = new_state_grid(gray.shape)

    queue = deque([(sx, sy)])
    state[sy, sx] = QUEUED

    while queue:
        x, y = queue.popleft()
        mask[y, x] = FOREGROUND
        state[y, x] = ASSIGNED

        for dx, dy in Connectivity.FOUR.offsets:
            nx, ny = x + dx, y + dy
            if not in_bounds(nx, ny, width, height) or state[ny, nx] != UNVISITED:
                continue
            if abs(int(gray[ny, nx]) - seed_intensity) < tolerance:
                state[ny, nx] = QUEUED
                queue.append((nx, ny))

    logger.debug("region growing from %s kept %d pixels", (sx, sy), int(np.count_nonzero(mask)))
    return mask


def seed_grid(shape, grid_size: int = SEED_GRID_SIZE) -> List[Tuple[int, int]]:
    """grid_size x grid_size interior seeds, row by row."""
    height, width = shape[:2]
    return [
        ((width * i) // (grid_size + 1), (height * j) // (grid_size + 1))
        for j in range(1, grid_size + 1)
        for i in range(1, grid_size + 1)
    ]


def grow_from_seeds(
    intensity: np.ndarray,
    gradient: np.ndarray,
    candidate: np.ndarray,
    seeds: Sequence[Tuple[int, int]],
    intensity_tol: float,
    gradient_tol: float,
    edge_ceiling: float,
) -> np.ndarray:
    """
    Expand each seed in order; territory claimed by an earlier seed is never reclaimed.

    Neighbors are claimed when they pass the intensity, gradient-continuity
    and edge-strength gates. A claimed pixel is labeled, and expanded, only
    if it is foreground in ``candidate``.
    """
    height, width = intensity.shape
    labels = np.zeros(intensity.shape, dtype=np.int32)
    state = new_state_grid(intensity.shape)
    gradient_gate = gradient_tol * 0.5
    edge_gate = edge_ceiling * 1.5

    for index, (sx, sy) in enumerate(seeds, start=1):
        if not in_bounds(sx, sy, width, height):
            raise SeedOutOfBounds((sx, sy), intensity.shape)
        if state[sy, sx] != UNVISITED:
            continue

        ref_intensity = int(intensity[sy, sx])
        ref_gradient = float(gradient[sy, sx])
        queue = deque([(sx, sy)])
        state[sy, sx] = QUEUED

        while queue:
            x, y = queue.popleft()
            if candidate[y, x] == 0:
                continue
            labels[y, x] = index
            state[y, x] = ASSIGNED

            # No bridge rule here, diagonals are plain neighbors
            for dx, dy in Connectivity.EIGHT.offsets:
                nx, ny = x + dx, y + dy
                if not in_bounds(nx, ny, width, height) or state[ny, nx] != UNVISITED:
                    continue
                g = float(gradient[ny, nx])
                if (abs(int(intensity[ny, nx]) - ref_intensity) < intensity_tol
                        and abs(g - ref_gradient) < gradient_gate
                        and g < edge_gate):
                    state[ny, nx] = QUEUED
                    queue.append((nx, ny))

    return labels


def grow_multi(
    image: np.ndarray,
    grid_size: int = SEED_GRID_SIZE,
    intensity_tol: float = DEFAULT_THRESHOLD,
    gradient_tol: float = DEFAULT_THRESHOLD,
    edge_ceiling: float = DEFAULT_THRESHOLD,
) -> MultiRegionResult:
    """
    Edge-aware multi-seed region growing.

    Args:
        image: BGR or grayscale image
        grid_size: seeds per row and per column
        intensity_tol: maximum intensity difference to the seed (exclusive)
        gradient_tol: twice the maximum gradient difference to the seed
        edge_ceiling: gradients at or above 1.5x this value stop growth

    Returns:
        MultiRegionResult with the label grid and the filtered, scored contours
    """
    gray = ip.to_gray(image)

    denoised = ip.bilateral_filter(gray, 9, 75, 75)
    enhanced = ip.clahe_equalize(denoised, clip_limit=2.0, tile_grid_size=8)
    gradient = ip.gradient_magnitude(enhanced, kernel_size=3)
    candidate = ip.adaptive_candidate_mask(enhanced, block_size=21, offset=5)

    seeds = seed_grid(gray.shape, grid_size)
    labels = grow_from_seeds(enhanced, gradient, candidate, seeds,
                             intensity_tol, gradient_tol, edge_ceiling)

    polygons = filter_contours(extract_contours(labels))
    regions = score_contours(polygons, gray.shape)

    logger.debug(
        "edge-enhanced growing: %d seeds, %d labeled pixels, %d regions kept",
        len(seeds), int(np.count_nonzero(labels)), len(regions),
    )
    return MultiRegionResult(labels=labels, regions=regions, seeds=seeds)
