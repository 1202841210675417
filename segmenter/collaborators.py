"""
Library-backed segmenters exposed with the same (image, params) -> (labels, stats)
shape as the hand-rolled ones.
"""

from typing import Dict, Tuple

import cv2
import numpy as np

from . import image_processing as ip
from .params import GRAPH_CUT_ITERATIONS, KMEANS_EPSILON, KMEANS_MAX_ITER, ParameterSet


def segment_kmeans(image: np.ndarray, params: ParameterSet) -> Tuple[np.ndarray, Dict]:
    """Cluster grayscale intensities; every pixel takes its cluster center value."""
    gray = ip.to_gray(image)
    k = params.clusters

    pixel_values = np.float32(gray.reshape((-1, 1)))
    criteria = (cv2.TERM_CRITERIA_EPS + cv2.TERM_CRITERIA_MAX_ITER, KMEANS_MAX_ITER, KMEANS_EPSILON)
    _, labels, centers = cv2.kmeans(pixel_values, k, None, criteria, 3, cv2.KMEANS_PP_CENTERS)

    centers = np.uint8(np.clip(centers, 0, 255))
    segmented = centers[labels.flatten()].reshape(gray.shape)

    return segmented, {
        "method_specific": f"kmeans_k{k}",
        "clusters": k,
        "centers": sorted(int(c) for c in centers.flatten()),
    }


def segment_otsu(image: np.ndarray, params: ParameterSet) -> Tuple[np.ndarray, Dict]:
    """Global threshold chosen from the intensity histogram."""
    gray = ip.to_gray(image)
    otsu_threshold, mask = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)

    return mask, {
        "method_specific": "otsu_thresholding",
        "computed_threshold": float(otsu_threshold),
    }


def segment_watershed(image: np.ndarray, params: ParameterSet) -> Tuple[np.ndarray, Dict]:
    """Marker-based watershed; returns int32 markers with -1 on boundaries."""
    gray = ip.to_gray(image)
    color = _as_bgr(image, gray)

    _, binary = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY_INV + cv2.THRESH_OTSU)

    # Sure background area
    kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (3, 3))
    sure_bg = cv2.dilate(binary, kernel, iterations=3)

    # Distance transform to find sure foreground
    dist_transform = cv2.distanceTransform(binary, cv2.DIST_L2, 5)
    dist_transform = cv2.normalize(dist_transform, None, 0, 1.0, cv2.NORM_MINMAX)
    _, sure_fg = cv2.threshold(dist_transform, 0.5, 255, cv2.THRESH_BINARY)
    sure_fg = sure_fg.astype(np.uint8)

    unknown = cv2.subtract(sure_bg, sure_fg)

    # Background becomes 1 so the unknown region can be 0
    _, markers = cv2.connectedComponents(sure_fg)
    markers = markers + 1
    markers[unknown == 255] = 0

    markers = cv2.watershed(color, markers)

    unique_markers = np.unique(markers)
    return markers, {
        "method_specific": "watershed_marker_based",
        "num_regions": int(len(unique_markers[unique_markers > 1])),
    }


def segment_graph_cut(image: np.ndarray, params: ParameterSet) -> Tuple[np.ndarray, Dict]:
    """GrabCut seeded with a centered rectangle; probable foreground is kept."""
    gray = ip.to_gray(image)
    color = _as_bgr(image, gray)
    height, width = gray.shape

    margin = min(width, height) // 4
    rect = (margin, margin, width - 2 * margin, height - 2 * margin)

    mask = np.full((height, width), cv2.GC_BGD, np.uint8)
    bgd_model = np.zeros((1, 65), np.float64)
    fgd_model = np.zeros((1, 65), np.float64)

    cv2.grabCut(color, mask, rect, bgd_model, fgd_model, GRAPH_CUT_ITERATIONS, cv2.GC_INIT_WITH_RECT)

    segmented = np.where(mask == cv2.GC_PR_FGD, 255, 0).astype(np.uint8)
    return segmented, {
        "method_specific": "grabcut_rect_prior",
        "iterations": GRAPH_CUT_ITERATIONS,
        "rect": list(rect),
    }


def _as_bgr(image, gray):
    if image.ndim == 3 and image.shape[2] >= 3:
        return np.ascontiguousarray(image[:, :, :3])
    return ip.to_bgr(gray)
