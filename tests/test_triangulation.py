"""Tests for low-poly triangulation."""

import numpy as np
import pytest

from py_cosmogen.config.options import GalaxyLayoutConfig
from py_cosmogen.core.lehmer_prng import LehmerPRNG
from py_cosmogen.core.placement import scatter_spiral_arms
from py_cosmogen.core.triangulation import (
    decimate_indices,
    delaunay_triangulate,
    orient_faces,
    project_to_plane,
    triangulate_layout,
)


def _segments_cross(p1, p2, q1, q2):
    def orient(a, b, c):
        return np.sign((b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0]))

    return (
        orient(p1, p2, q1) * orient(p1, p2, q2) < 0
        and orient(q1, q2, p1) * orient(q1, q2, p2) < 0
    )


class TestDelaunay:
    """Test 2D Delaunay triangulation."""

    @pytest.mark.parametrize("count", [0, 1, 2])
    def test_too_few_points(self, count):
        faces = delaunay_triangulate(np.zeros((count, 2)))
        assert faces.shape == (0, 3)

    def test_collinear_points(self):
        points = np.stack([np.linspace(0, 1, 10), np.linspace(0, 2, 10)], axis=1)
        assert delaunay_triangulate(points).shape == (0, 3)

    def test_coincident_points(self):
        assert delaunay_triangulate(np.ones((5, 2))).shape == (0, 3)

    def test_square(self):
        square = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
        faces = delaunay_triangulate(square)
        assert faces.shape == (2, 3)
        assert set(faces.ravel()) == {0, 1, 2, 3}

    def test_uses_only_input_points(self):
        rng = np.random.default_rng(0)
        points = rng.random((200, 2))
        faces = delaunay_triangulate(points)
        assert faces.min() >= 0
        assert faces.max() < len(points)
        # Every point of a general-position set is a triangle vertex
        assert len(np.unique(faces)) == len(points)

    def test_empty_circumcircle(self):
        rng = np.random.default_rng(1)
        points = rng.random((60, 2))
        for a, b, c in delaunay_triangulate(points):
            pa, pb, pc = points[a], points[b], points[c]
            d = 2 * (pa[0] * (pb[1] - pc[1]) + pb[0] * (pc[1] - pa[1]) + pc[0] * (pa[1] - pb[1]))
            ux = (
                (pa @ pa) * (pb[1] - pc[1]) + (pb @ pb) * (pc[1] - pa[1]) + (pc @ pc) * (pa[1] - pb[1])
            ) / d
            uy = (
                (pa @ pa) * (pc[0] - pb[0]) + (pb @ pb) * (pa[0] - pc[0]) + (pc @ pc) * (pb[0] - pa[0])
            ) / d
            center = np.array([ux, uy])
            radius = np.linalg.norm(pa - center)
            others = np.delete(np.arange(len(points)), [a, b, c])
            assert np.all(np.linalg.norm(points[others] - center, axis=1) >= radius - 1e-9)

    def test_no_crossing_edges(self):
        rng = np.random.default_rng(2)
        points = rng.random((40, 2))
        faces = delaunay_triangulate(points)
        edges = {tuple(sorted((f[i], f[(i + 1) % 3]))) for f in faces for i in range(3)}
        edges = list(edges)
        for i, (a, b) in enumerate(edges):
            for c, d in edges[i + 1:]:
                if len({a, b, c, d}) < 4:
                    continue
                assert not _segments_cross(points[a], points[b], points[c], points[d])


class TestLayoutTriangulation:
    """Test triangulation of scattered layouts."""

    def test_vertices_are_layout_positions(self):
        layout = scatter_spiral_arms(LehmerPRNG(3), GalaxyLayoutConfig(star_count=500, radius=50.0))
        vertices, faces = triangulate_layout(layout)
        np.testing.assert_array_equal(vertices, layout.positions)
        assert len(faces) > 0
        assert faces.max() < len(layout)

    def test_faces_point_up(self):
        layout = scatter_spiral_arms(LehmerPRNG(3), GalaxyLayoutConfig(star_count=300, radius=50.0))
        vertices, faces = triangulate_layout(layout)
        a, b, c = (vertices[faces[:, i]] for i in range(3))
        normals = np.cross(b - a, c - a)
        assert np.all(normals[:, 1] >= 0)

    def test_orient_faces_flips_down_facing(self):
        vertices = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 0.0, 1.0]])
        faces = np.array([[0, 1, 2]])
        fixed = orient_faces(vertices, faces)
        np.testing.assert_array_equal(fixed, [[0, 2, 1]])

    def test_projection_axes(self):
        points = np.array([[1.0, 2.0, 3.0]])
        np.testing.assert_array_equal(project_to_plane(points), [[1.0, 3.0]])


class TestDecimation:
    """Test LOD point decimation."""

    def test_every_third(self):
        np.testing.assert_array_equal(decimate_indices(10, 3), [0, 3, 6, 9])

    def test_factor_one_keeps_all(self):
        assert len(decimate_indices(7, 1)) == 7

    def test_offset(self):
        np.testing.assert_array_equal(decimate_indices(10, 4, offset=1), [1, 5, 9])
