"""
Flood-fill region segmenter.

Binarizes the raster at a fixed threshold and absorbs the connected region
around the image center whose binarized value matches the center pixel.
The four named variants (see presets.py) differ only in preprocessing,
connectivity and postprocessing.
"""

import logging
from collections import deque
from typing import Optional

import numpy as np

from . import image_processing as ip
from .errors import SeedOutOfBounds
from .connectivity import (
    ASSIGNED, QUEUED, REJECTED, UNVISITED,
    Connectivity, bridge_neighbors, image_center, in_bounds, is_diagonal, new_state_grid,
)
from .params import ParameterSet, Postprocess, Preprocess

logger = logging.getLogger(__name__)

# Mid-gray marker for absorbed pixels; everything else keeps 0 or 255
REGION_MARKER = 128


def flood_fill(
    image: np.ndarray,
    params: Optional[ParameterSet] = None,
    *,
    connectivity=None,
    preprocess=None,
    threshold: Optional[int] = None,
    postprocess=None,
) -> np.ndarray:
    """
    Segment the region connected to the image center.

    Args:
        image: BGR or grayscale image
        params: parameter snapshot; keyword arguments override its fields

    Returns:
        uint8 Label Grid: REGION_MARKER for absorbed pixels, the binarized
        value (0/255) elsewhere, after optional closing

    Raises:
        EmptyInput: if the image has no pixels
    """
    params = params or ParameterSet()
    overrides = {
        "connectivity": connectivity,
        "preprocess": preprocess,
        "threshold": threshold,
        "postprocess": postprocess,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if overrides:
        params = params.with_updates(**overrides)

    gray = ip.to_gray(image)
    smoothed = _preprocess(gray, params.preprocess)
    binary = ip.binary_threshold(smoothed, params.threshold)

    labels = fill_from_seed(binary, image_center(binary.shape), params.connectivity)
    labels = _postprocess(labels, params.postprocess)

    logger.debug(
        "flood fill: connectivity=%d preprocess=%s threshold=%d postprocess=%s",
        params.connectivity, params.preprocess.value, params.threshold, params.postprocess.value,
    )
    return labels


def fill_from_seed(binary: np.ndarray, seed, connectivity=Connectivity.FOUR) -> np.ndarray:
    """BFS over ``binary`` from ``seed`` absorbing pixels equal to the seed's value."""
    height, width = binary.shape
    sx, sy = seed
    if not in_bounds(sx, sy, width, height):
        raise SeedOutOfBounds(seed, binary.shape)

    connectivity = Connectivity(connectivity)
    match_value = binary[sy, sx]
    state = new_state_grid(binary.shape)
    labels = binary.copy()

    def eligible(x, y):
        # Visited pixels reuse their recorded outcome
        recorded = state[y, x]
        if recorded == UNVISITED:
            return binary[y, x] == match_value
        return recorded != REJECTED

    queue = deque([(sx, sy)])
    state[sy, sx] = QUEUED
    absorbed = 0

    while queue:
        x, y = queue.popleft()
        state[y, x] = ASSIGNED
        labels[y, x] = REGION_MARKER
        absorbed += 1

        for dx, dy in connectivity.offsets:
            nx, ny = x + dx, y + dy
            if not in_bounds(nx, ny, width, height) or state[ny, nx] != UNVISITED:
                continue
            if binary[ny, nx] != match_value:
                state[ny, nx] = REJECTED
                continue
            # No corner cutting: a diagonal step needs an eligible bridge pixel
            if is_diagonal(dx, dy) and not any(
                eligible(bx, by) for bx, by in bridge_neighbors(x, y, dx, dy)
            ):
                continue
            state[ny, nx] = QUEUED
            queue.append((nx, ny))

    logger.debug("flood fill absorbed %d of %d pixels", absorbed, binary.size)
    return labels


def _preprocess(gray, mode):
    mode = Preprocess(mode)
    if mode is Preprocess.BLUR:
        return ip.gaussian_blur(gray, 3)
    if mode is Preprocess.BILATERAL:
        return ip.bilateral_filter(gray, 9, 75, 75)
    return gray


def _postprocess(labels, mode):
    mode = Postprocess(mode)
    if mode is Postprocess.CLOSE:
        return ip.morphological_close(labels, 5, "ellipse")
    if mode is Postprocess.CLOSE_LIGHT:
        return ip.morphological_close(labels, 3, "rect")
    return labels
