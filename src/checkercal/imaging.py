"""
Pixel-level collaborators.

The detection core only talks to these through the ImageOps protocol, so
tests can substitute canned contours and quads. OpenCVImageOps is the
production implementation.
"""

from __future__ import annotations

from typing import Literal, Protocol, Sequence

import cv2
import numpy as np

from .types import DetectionConfig, Quad

KernelShape = Literal["rect", "cross"]

KERNELS: dict[str, np.ndarray] = {
    "rect": cv2.getStructuringElement(cv2.MORPH_RECT, (3, 3)),
    "cross": cv2.getStructuringElement(cv2.MORPH_CROSS, (3, 3)),
}


# ============================================================================
# Protocols
# ============================================================================


class ImageOps(Protocol):
    """
    Pixel operations consumed by quad extraction.
    Every method returns None on failure rather than raising.
    """

    def threshold(
        self, image: np.ndarray, block_size: int, constant: float
    ) -> np.ndarray | None: ...

    def erode(self, image: np.ndarray, kernel: KernelShape) -> np.ndarray | None: ...

    def find_contours(self, image: np.ndarray) -> list[np.ndarray] | None: ...

    def fit_quad(self, image: np.ndarray, contour: np.ndarray) -> np.ndarray | None: ...


class DebugTracer(Protocol):
    """
    Optional visual debugging hooks. Implementations must not raise.
    """

    def draw_quad(self, image: np.ndarray, quad: Quad) -> None: ...

    def draw_contours(self, image: np.ndarray, contours: Sequence[np.ndarray]) -> None: ...

    def show_image(self, name: str, image: np.ndarray) -> None: ...


class NullTracer:
    """Tracer that ignores everything. Default in production."""

    def draw_quad(self, image: np.ndarray, quad: Quad) -> None:
        pass

    def draw_contours(self, image: np.ndarray, contours: Sequence[np.ndarray]) -> None:
        pass

    def show_image(self, name: str, image: np.ndarray) -> None:
        pass


# ============================================================================
# OpenCV implementation
# ============================================================================


class OpenCVImageOps:
    """
    ImageOps backed by OpenCV.

    Dark board squares come out of threshold() as foreground (255), so
    erosion separates squares that touch at their corners.
    """

    def __init__(self, config: DetectionConfig | None = None):
        self.config = config or DetectionConfig()

    def threshold(
        self, image: np.ndarray, block_size: int, constant: float
    ) -> np.ndarray | None:
        gray = image
        if gray.ndim == 3:
            gray = cv2.cvtColor(gray, cv2.COLOR_BGR2GRAY)
        try:
            return cv2.adaptiveThreshold(
                gray.astype(np.uint8),
                255,
                cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
                cv2.THRESH_BINARY_INV,
                block_size,
                constant,
            )
        except cv2.error:
            return None

    def erode(self, image: np.ndarray, kernel: KernelShape) -> np.ndarray | None:
        try:
            return cv2.erode(image, KERNELS[kernel])
        except cv2.error:
            return None

    def find_contours(self, image: np.ndarray) -> list[np.ndarray] | None:
        try:
            contours, _ = cv2.findContours(
                image.copy(), cv2.RETR_LIST, cv2.CHAIN_APPROX_SIMPLE
            )
        except cv2.error:
            return None
        return list(contours)

    def fit_quad(self, image: np.ndarray, contour: np.ndarray) -> np.ndarray | None:
        """
        Approximate a contour with a polygon and accept it if it is a convex
        quadrilateral of sufficient area.
        """
        if len(contour) < 4:
            return None

        area = cv2.contourArea(contour)
        if area < self.config.min_quad_area:
            return None

        perimeter = cv2.arcLength(contour, True)
        approx = cv2.approxPolyDP(contour, self.config.approx_epsilon * perimeter, True)
        if len(approx) != 4 or not cv2.isContourConvex(approx):
            return None

        return approx.reshape(4, 2).astype(np.float64)

