"""
Tests for edge-aware multi-seed region growing and contour scoring.
"""

import cv2
import numpy as np
import pytest

from segmenter import grow_multi, seed_grid
from segmenter.contours import (
    confidence_score, extract_contours, filter_contours, score_contours,
)
from segmenter.region_growing import grow_from_seeds


def three_band_image():
    """Left band 100, one middle column 130, right band 160."""
    intensity = np.full((20, 30), 100, dtype=np.uint8)
    intensity[:, 14] = 130
    intensity[:, 15:] = 160
    gradient = np.zeros_like(intensity)
    candidate = np.full_like(intensity, 255)
    return intensity, gradient, candidate


def test_seed_grid_is_row_major_and_interior():
    seeds = seed_grid((100, 200), 2)
    assert seeds == [(66, 33), (133, 33), (66, 66), (133, 66)]

    seeds = seed_grid((90, 90), 8)
    assert len(seeds) == 64
    assert all(0 < x < 90 and 0 < y < 90 for x, y in seeds)
    # Rows advance only after a full sweep of columns
    assert [y for _, y in seeds[:8]] == [10] * 8


def test_earlier_seed_claims_the_shared_pixels():
    intensity, gradient, candidate = three_band_image()

    labels = grow_from_seeds(intensity, gradient, candidate, [(5, 10), (25, 10)],
                             intensity_tol=35, gradient_tol=10, edge_ceiling=10)
    assert np.all(labels[:, :15] == 1)
    assert np.all(labels[:, 15:] == 2)

    # Reversing the order hands the shared column to the right-hand seed
    labels = grow_from_seeds(intensity, gradient, candidate, [(25, 10), (5, 10)],
                             intensity_tol=35, gradient_tol=10, edge_ceiling=10)
    assert np.all(labels[:, 14:] == 1)
    assert np.all(labels[:, :14] == 2)


def test_overlapping_circles_go_to_the_first_seed():
    intensity = np.zeros((80, 120), dtype=np.uint8)
    cv2.circle(intensity, (45, 40), 25, 200, -1)
    cv2.circle(intensity, (75, 40), 25, 200, -1)
    candidate = np.where(intensity > 0, 255, 0).astype(np.uint8)
    gradient = np.zeros_like(intensity)

    labels = grow_from_seeds(intensity, gradient, candidate, [(45, 40), (75, 40)],
                             intensity_tol=20, gradient_tol=20, edge_ceiling=20)

    # Shared border pixel between the two centers
    assert labels[40, 60] == 1
    # The second seed was already claimed, so it never starts a region
    assert not np.any(labels == 2)
    np.testing.assert_array_equal(labels > 0, candidate > 0)


def test_gradient_gates_stop_growth():
    intensity = np.full((10, 20), 100, dtype=np.uint8)
    gradient = np.zeros_like(intensity)
    gradient[:, 10] = 60
    candidate = np.full_like(intensity, 255)

    # 60 is past the edge gate (30 * 1.5 = 45)
    labels = grow_from_seeds(intensity, gradient, candidate, [(2, 5)],
                             intensity_tol=50, gradient_tol=200, edge_ceiling=30)
    assert np.all(labels[:, :10] == 1)
    assert np.all(labels[:, 10:] == 0)

    # Difference of 60 fails the continuity gate (100 / 2 = 50)
    labels = grow_from_seeds(intensity, gradient, candidate, [(2, 5)],
                             intensity_tol=50, gradient_tol=100, edge_ceiling=100)
    assert np.all(labels[:, 10:] == 0)


def test_non_candidate_pixels_are_claimed_but_not_labeled():
    intensity, gradient, candidate = three_band_image()
    candidate[:, 14] = 0

    labels = grow_from_seeds(intensity, gradient, candidate, [(5, 10), (25, 10)],
                             intensity_tol=35, gradient_tol=10, edge_ceiling=10)

    assert np.all(labels[:, 14] == 0)
    assert np.all(labels[:, :14] == 1)
    assert np.all(labels[:, 15:] == 2)


def test_confidence_matches_area_ratio():
    height, width = 150, 200
    labels = np.zeros((height, width), dtype=np.int32)
    cv2.rectangle(labels, (20, 30), (119, 69), 1, -1)

    polygons = filter_contours(extract_contours(labels))
    scored = score_contours(polygons, labels.shape)

    assert len(scored) == 1
    region = scored[0]
    assert len(region.points) == 4
    assert region.area == pytest.approx(99 * 39)
    assert region.confidence == pytest.approx(min(99 * 39 / (width * height) * 4, 1.0))
    assert region.confidence_percent == int(99 * 39 / (width * height) * 400)
    assert region.centroid == pytest.approx((69.5, 49.5))


def test_confidence_is_capped():
    assert confidence_score(5000, 100, 100) == pytest.approx(1.0)
    assert confidence_score(1000, 100, 100) == pytest.approx(0.4)


def test_filter_rejects_small_round_and_triangular_shapes():
    labels = np.zeros((300, 300), dtype=np.uint8)
    cv2.rectangle(labels, (5, 5), (20, 20), 1, -1)                 # too small
    cv2.circle(labels, (200, 80), 40, 1, -1)                       # too circular
    triangle = np.array([[20, 280], [140, 280], [80, 160]], dtype=np.int32)
    cv2.fillPoly(labels, [triangle], 1)                             # 3 vertices

    assert filter_contours(extract_contours(labels)) == []


def test_grow_multi_is_deterministic():
    image = np.full((160, 200, 3), 40, dtype=np.uint8)
    cv2.rectangle(image, (30, 30), (170, 90), (210, 210, 210), -1)
    cv2.circle(image, (100, 130), 20, (120, 120, 120), -1)

    first = grow_multi(image, grid_size=3, intensity_tol=60, gradient_tol=60, edge_ceiling=60)
    second = grow_multi(image, grid_size=3, intensity_tol=60, gradient_tol=60, edge_ceiling=60)

    assert first.labels.dtype == np.int32
    assert first.labels.shape == (160, 200)
    assert first.labels.max() <= 9
    assert first.seeds == seed_grid((160, 200), 3)
    np.testing.assert_array_equal(first.labels, second.labels)
    assert [r.confidence for r in first.regions] == [r.confidence for r in second.regions]
    for region in first.regions:
        assert region.confidence == pytest.approx(min(region.area / (160 * 200) * 4, 1.0))
