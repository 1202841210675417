"""
Raster preparation shared by the segmenters.
Every helper takes and returns uint8 single-channel grids unless noted.
"""

import cv2
import numpy as np

from .errors import EmptyInput


def ensure_odd(k: int) -> int:
    k = max(1, int(k))
    if k % 2 == 0:
        k += 1
    return k


def check_image(image):
    if image is None or getattr(image, "size", 0) == 0:
        raise EmptyInput("Image has no pixels to process")
    if image.ndim < 2 or image.shape[0] == 0 or image.shape[1] == 0:
        raise EmptyInput(f"Image has degenerate shape {image.shape}")
    return image


def to_gray(image):
    """Luminance conversion into the Raster Buffer; single-channel input is copied."""
    check_image(image)
    if image.ndim == 2:
        gray = image
    elif image.shape[2] == 1:
        gray = image[:, :, 0]
    elif image.shape[2] == 4:
        gray = cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    else:
        gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    if gray.dtype != np.uint8:
        gray = np.clip(gray, 0, 255).astype(np.uint8)
    return np.ascontiguousarray(gray).copy()


def to_bgr(img):
    if len(img.shape) == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
    return img


# ---------- Smoothing ----------
def gaussian_blur(gray, kernel_size=3, sigma=0):
    k = ensure_odd(kernel_size)
    return cv2.GaussianBlur(gray, (k, k), sigmaX=float(sigma), sigmaY=float(sigma))


def bilateral_filter(gray, diameter=9, sigma_color=75, sigma_space=75):
    return cv2.bilateralFilter(gray, int(diameter), float(sigma_color), float(sigma_space))


def clahe_equalize(gray, clip_limit=2.0, tile_grid_size=8):
    """CLAHE on grayscale."""
    tile_grid_size = max(1, int(tile_grid_size))
    clahe = cv2.createCLAHE(clipLimit=float(clip_limit), tileGridSize=(tile_grid_size, tile_grid_size))
    return clahe.apply(gray)


# ---------- Thresholding ----------
def binary_threshold(gray, threshold=128):
    """Fixed binarization: pixels at or above ``threshold`` become 255, the rest 0."""
    return np.where(gray >= int(threshold), 255, 0).astype(np.uint8)


def adaptive_candidate_mask(gray, block_size=21, offset=5, close_size=3):
    """Locally adaptive threshold followed by a square closing to bridge small gaps."""
    binary = cv2.adaptiveThreshold(gray, 255, cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
                                   cv2.THRESH_BINARY, ensure_odd(block_size), offset)
    kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (close_size, close_size))
    return cv2.morphologyEx(binary, cv2.MORPH_CLOSE, kernel)


# ---------- Edges ----------
def gradient_magnitude(gray, kernel_size=3):
    """Sobel magnitude min-max normalized into the 0..255 Gradient Field."""
    kernel_size = int(kernel_size)
    if kernel_size not in (1, 3, 5, 7):
        kernel_size = 3
    grad_x = cv2.Sobel(gray, cv2.CV_32F, 1, 0, ksize=kernel_size)
    grad_y = cv2.Sobel(gray, cv2.CV_32F, 0, 1, ksize=kernel_size)
    mag = cv2.magnitude(grad_x, grad_y)
    mag = cv2.normalize(mag, None, 0, 255, cv2.NORM_MINMAX)
    return np.rint(mag).astype(np.uint8)


def canny_edges(gray, threshold1=50, threshold2=150):
    return cv2.Canny(gray, threshold1, threshold2)


# ---------- Morphology ----------
def morphological_close(grid, kernel_size=5, shape="ellipse"):
    """Grayscale closing; ``shape`` is 'ellipse' or 'rect'."""
    morph_shape = cv2.MORPH_ELLIPSE if shape == "ellipse" else cv2.MORPH_RECT
    kernel = cv2.getStructuringElement(morph_shape, (kernel_size, kernel_size))
    return cv2.morphologyEx(grid, cv2.MORPH_CLOSE, kernel)

