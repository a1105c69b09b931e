"""
Low-poly triangulation of scattered points.

Points are projected onto a plane, triangulated with scipy's Delaunay
(Qhull) and lifted back to 3D by reusing the original positions, so every
triangle vertex is one of the input points.
"""

import numpy as np
import structlog
from scipy.spatial import Delaunay, QhullError
from typing import Tuple

from .placement import SpatialLayout

logger = structlog.get_logger()

EMPTY_TRIANGLES = np.zeros((0, 3), dtype=np.int32)

# Projection plane for galaxy disks (x, z)
DISK_PLANE = (0, 2)


def project_to_plane(points: np.ndarray, axes: Tuple[int, int] = DISK_PLANE) -> np.ndarray:
    """Drop the third axis of (N, 3) points."""
    points = np.asarray(points, dtype=np.float64)
    return points[:, list(axes)]


def delaunay_triangulate(points_2d: np.ndarray) -> np.ndarray:
    """
    Delaunay triangulation of 2D points.

    Degenerate input (fewer than three points, all collinear or all
    coincident) yields an empty triangle list rather than an error.
    Duplicate points are left out of the triangulation.

    Args:
        points_2d: (N, 2) array

    Returns:
        (M, 3) int32 array of indices into points_2d
    """
    points_2d = np.asarray(points_2d, dtype=np.float64)
    if points_2d.ndim != 2 or len(points_2d) < 3:
        return EMPTY_TRIANGLES.copy()

    centered = points_2d - points_2d.mean(axis=0)
    if np.linalg.matrix_rank(centered) < 2:
        logger.debug("Skipping degenerate triangulation", points=len(points_2d))
        return EMPTY_TRIANGLES.copy()

    try:
        triangulation = Delaunay(points_2d)
    except QhullError as exc:
        logger.debug("Qhull rejected input", points=len(points_2d), error=str(exc))
        return EMPTY_TRIANGLES.copy()

    return triangulation.simplices.astype(np.int32)


def orient_faces(vertices: np.ndarray, faces: np.ndarray, up_axis: int = 1) -> np.ndarray:
    """Flip faces so their normals point toward +up_axis."""
    if len(faces) == 0:
        return faces
    a, b, c = (vertices[faces[:, i]] for i in range(3))
    normals = np.cross(b - a, c - a)
    flipped = faces.copy()
    down = normals[:, up_axis] < 0
    flipped[down] = flipped[down][:, [0, 2, 1]]
    return flipped


def triangulate_layout(
    layout: SpatialLayout, axes: Tuple[int, int] = DISK_PLANE
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Triangulate a spatial layout into a faceted surface.

    Args:
        layout: Scattered points
        axes: Projection plane

    Returns:
        Tuple of (vertices (N, 3), faces (M, 3)); vertices are the layout
        positions unchanged
    """
    vertices = np.asarray(layout.positions, dtype=np.float64)
    faces = delaunay_triangulate(project_to_plane(vertices, axes))
    faces = orient_faces(vertices, faces)
    logger.debug("Triangulated layout", points=len(vertices), triangles=len(faces))
    return vertices, faces


def decimate_indices(count: int, factor: int, offset: int = 0) -> np.ndarray:
    """
    Indices keeping every ``factor``-th point.

    Args:
        count: Number of points
        factor: Reduction factor (1 keeps everything)
        offset: Starting offset in [0, factor)

    Returns:
        Sorted index array of about count / factor entries
    """
    factor = max(1, int(factor))
    start = offset % factor
    return np.arange(start, count, factor, dtype=np.int64)
