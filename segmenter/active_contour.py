"""
Active contour ("snake") relaxation over the largest edge contour.
"""

import logging

import cv2
import numpy as np

from . import image_processing as ip
from .errors import EmptyInput, NoInitialContour
from .params import (
    ACTIVE_CONTOURS_ALPHA, ACTIVE_CONTOURS_BETA, ACTIVE_CONTOURS_GAMMA, ACTIVE_CONTOURS_ITERATIONS,
)

logger = logging.getLogger(__name__)

CANNY_LOW = 50
CANNY_HIGH = 150


def initial_contour(edges: np.ndarray) -> np.ndarray:
    """Largest-area external contour of the edge map as an (N, 2) float array."""
    contours, _ = cv2.findContours(edges, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    if not contours:
        raise NoInitialContour("No contours found in the image")

    # First contour wins ties
    largest_idx = 0
    largest_area = 0.0
    for i, contour in enumerate(contours):
        area = cv2.contourArea(contour)
        if area > largest_area:
            largest_area = area
            largest_idx = i

    return contours[largest_idx].reshape(-1, 2).astype(np.float64)


def relax(
    image: np.ndarray,
    iterations: int = ACTIVE_CONTOURS_ITERATIONS,
    alpha: float = ACTIVE_CONTOURS_ALPHA,
    gamma: float = ACTIVE_CONTOURS_GAMMA,
    beta: float = ACTIVE_CONTOURS_BETA,
) -> np.ndarray:
    """
    Relax the largest edge contour toward its neighbors' midpoints.

    Points are updated in index order in a single buffer, so point i+1 sees
    the already-moved point i as its predecessor. A candidate that lands on
    an edge pixel only moves ``gamma`` of the way there.

    ``beta`` (curvature weight) is accepted but does not enter the update.

    Returns:
        (N, 2) float array of (x, y) points forming a closed loop

    Raises:
        NoInitialContour: if the image is empty or has no edge contour
    """
    try:
        gray = ip.to_gray(image)
    except EmptyInput as e:
        raise NoInitialContour(str(e)) from e

    edges = ip.canny_edges(gray, CANNY_LOW, CANNY_HIGH)
    snake = initial_contour(edges)
    height, width = edges.shape
    n = len(snake)

    for _ in range(int(iterations)):
        for i in range(n):
            prev_pt = snake[i - 1]
            next_pt = snake[(i + 1) % n]
            current = snake[i]
            candidate = (1 - alpha) * current + alpha * (prev_pt + next_pt) / 2

            px, py = int(np.rint(candidate[0])), int(np.rint(candidate[1]))
            if 0 <= px < width and 0 <= py < height and edges[py, px] > 0:
                candidate = current + gamma * (candidate - current)
            snake[i] = candidate

    logger.debug("snake relaxed: %d points, %d iterations, beta=%s unused", n, iterations, beta)
    return snake
