"""
Contour extraction, geometric filtering and confidence scoring for label grids.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)

MIN_AREA = 1000
MAX_CIRCULARITY = 0.8
APPROX_RATIO = 0.02
MIN_VERTICES = 4
MAX_VERTICES = 8


@dataclass
class ScoredContour:
    """A filtered polygon with its geometric confidence."""
    points: np.ndarray
    area: float
    confidence: float
    confidence_percent: int
    centroid: Tuple[float, float]


def extract_contours(labels: np.ndarray) -> List[np.ndarray]:
    """External boundaries of every non-zero region of ``labels``."""
    mask = (labels > 0).astype(np.uint8) * 255
    contours, _ = cv2.findContours(mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    return list(contours)


def circularity(area: float, perimeter: float) -> float:
    if perimeter <= 0:
        return 0.0
    return 4 * np.pi * area / (perimeter * perimeter)


def filter_contours(
    contours: Sequence[np.ndarray],
    min_area: float = MIN_AREA,
    max_circularity: float = MAX_CIRCULARITY,
) -> List[np.ndarray]:
    """
    Keep large, non-circular contours whose polygon approximation has 4-8 vertices.

    Returns the approximated polygons, not the raw contours.
    """
    filtered = []
    for contour in contours:
        area = cv2.contourArea(contour)
        perimeter = cv2.arcLength(contour, True)

        if area <= min_area or circularity(area, perimeter) >= max_circularity:
            continue

        approx = cv2.approxPolyDP(contour, APPROX_RATIO * perimeter, True)
        if MIN_VERTICES <= len(approx) <= MAX_VERTICES:
            filtered.append(approx)

    logger.debug("kept %d of %d contours", len(filtered), len(contours))
    return filtered


def confidence_score(area: float, width: int, height: int) -> float:
    """Area ratio scaled by 4 and capped at 1.0."""
    return min(area / (width * height) * 4, 1.0)


def score_contours(polygons: Sequence[np.ndarray], shape) -> List[ScoredContour]:
    height, width = shape[:2]
    scored = []
    for polygon in polygons:
        area = cv2.contourArea(polygon)
        confidence = confidence_score(area, width, height)

        mu = cv2.moments(polygon)
        if mu["m00"] != 0:
            centroid = (mu["m10"] / mu["m00"], mu["m01"] / mu["m00"])
        else:
            pts = polygon.reshape(-1, 2)
            centroid = (float(pts[:, 0].mean()), float(pts[:, 1].mean()))

        scored.append(ScoredContour(
            points=polygon.reshape(-1, 2),
            area=float(area),
            confidence=confidence,
            confidence_percent=int(min(area / (width * height) * 400, 100.0)),
            centroid=centroid,
        ))
    return scored
